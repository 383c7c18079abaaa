from flask import Blueprint, request
from outleads.models import AuditLog, AuditSeverity, Role
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import ValidationError
from outleads.utils.pagination import apply_date_range, parse_date_range

audit_bp = Blueprint('audit', __name__)

AUDIT_ROLES = [Role.ADMIN, Role.INFOSEC]


def audit_filters(query, user):
    """Severity and createdAt window filters taken from the query string."""
    severity = request.args.get('severity')
    if severity:
        try:
            query = query.filter(AuditLog.severity == AuditSeverity(severity.upper()))
        except ValueError:
            raise ValidationError(f"Unknown severity: {severity}")

    start, end = parse_date_range(request.args)
    return apply_date_range(query, AuditLog.created_at, start, end)


audit_log_crud = CrudConfig(
    model=AuditLog,
    entity_name='Audit log entry',
    order_by=('created_at', 'desc'),
    search_fields=('user_email', 'action', 'error_message'),
    filter_fields={
        'action': 'action',
        'userId': 'user_id',
        'resourceType': 'resource_type',
    },
    scope=audit_filters,
)

# Read only: entries are written by the audit service, never through the API
register_crud_routes(audit_bp, '/audit-log', audit_log_crud, read_roles=AUDIT_ROLES,
                     operations=('list', 'get'))
