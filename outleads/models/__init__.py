# Import db from extensions to use the same instance
from outleads.extensions import db

# Import all models to ensure they are registered with SQLAlchemy
from outleads.models.enums import Role, UserStatus, DispositionCategory, AuditSeverity
from outleads.models.sbu import Sbu
from outleads.models.user import User
from outleads.models.sector import Sector
from outleads.models.product_category import ProductCategory
from outleads.models.product import Product, lead_products
from outleads.models.campaign import Campaign
from outleads.models.lead_pool import LeadPool
from outleads.models.disposition import (
    FirstLevelDisposition,
    SecondLevelDisposition,
    ThirdLevelDisposition,
    DispositionHistory,
)
from outleads.models.lead import Lead
from outleads.models.permission import Permission, RolePermission
from outleads.models.audit_log import AuditLog

__all__ = [
    'db', 'Role', 'UserStatus', 'DispositionCategory', 'Sbu', 'User', 'Sector', 'Product',
    'lead_products', 'Campaign', 'LeadPool', 'FirstLevelDisposition', 'SecondLevelDisposition',
    'ThirdLevelDisposition', 'DispositionHistory', 'Lead', 'Permission', 'RolePermission',
    'AuditSeverity', 'AuditLog', 'ProductCategory',
]
