from flask import Blueprint, g, request
from outleads.auth.gate import protect
from outleads.models import Permission, Role, RolePermission
from outleads.schemas import validate_payload
from outleads.schemas.user import RolePermissionUpdate
from outleads.services.permissions import replace_role_permissions
from outleads.utils.error_handling import create_success_response

role_bp = Blueprint('role', __name__)


@role_bp.route('/permissions', methods=['GET'])
@protect([Role.ADMIN])
def list_role_permissions():
    """All permissions plus the permission ids granted to each role."""
    permissions = Permission.query.order_by(Permission.name).all()
    granted = {role.value: [] for role in Role}
    for assignment in RolePermission.query.order_by(RolePermission.permission_id).all():
        granted[assignment.role.value].append(assignment.permission_id)
    return create_success_response({
        'permissions': [permission.to_dict() for permission in permissions],
        'rolePermissions': granted,
    })


@role_bp.route('/permissions/update', methods=['POST'])
@protect([Role.ADMIN])
def update_role_permissions():
    data = validate_payload(RolePermissionUpdate, request.get_json(silent=True))
    assignments = replace_role_permissions(data['role'], data['permission_ids'])
    return create_success_response({
        'role': data['role'].value,
        'permissionIds': [assignment.permission_id for assignment in assignments],
        'updatedBy': g.current_user.id,
    })
