import logging
from outleads.extensions import db
from outleads.models import Permission, RolePermission
from outleads.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)

PERMISSION_SEED = [
    ('dashboard', 'Dashboard'),
    ('leads', 'Leads'),
    ('campaigns', 'Campaigns'),
    ('reports', 'Reports'),
    ('users', 'Users'),
    ('products', 'Products'),
    ('product-categories', 'Product Categories'),
    ('sectors', 'Sectors'),
    ('sbus', 'SBUs'),
    ('settings', 'Settings'),
]


def replace_role_permissions(role, permission_ids):
    """Replace a role's permission set wholesale in one transaction."""
    permission_ids = list(dict.fromkeys(permission_ids))
    if permission_ids:
        known = {row.id for row in Permission.query.filter(Permission.id.in_(permission_ids)).all()}
        unknown = [pid for pid in permission_ids if pid not in known]
        if unknown:
            raise ValidationError(f"Unknown permission(s): {', '.join(unknown)}")

    RolePermission.query.filter_by(role=role).delete(synchronize_session=False)
    for permission_id in permission_ids:
        db.session.add(RolePermission(role=role, permission_id=permission_id))
    db.session.commit()
    logger.info(f"Replaced permissions for role {role.value}: {permission_ids}")
    return RolePermission.query.filter_by(role=role).all()


def seed_permissions():
    created = 0
    for permission_id, name in PERMISSION_SEED:
        if db.session.get(Permission, permission_id) is None:
            db.session.add(Permission(id=permission_id, name=name))
            created += 1
    db.session.commit()
    return created
