import csv
import io
import logging
from datetime import date
from flask import Blueprint, Response, g, request
from sqlalchemy import func
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import AuditSeverity, Campaign, Role, Sbu, User, UserStatus
from outleads.schemas import validate_payload
from outleads.schemas.user import UserApprove, UserStatusUpdate, UserUpdate
from outleads.services import audit
from outleads.services.audit import record_audit_event
from outleads.services.domain_auth import DomainAuthClient, DomainAuthError
from outleads.services.notifications import NotificationService
from outleads.utils.crud import CrudConfig, register_crud_routes, reject_null_columns
from outleads.utils.error_handling import (
    Conflict,
    ExternalServiceError,
    Forbidden,
    ServiceUnavailable,
    ValidationError,
    create_success_response,
    not_found,
)

logger = logging.getLogger(__name__)

user_bp = Blueprint('user', __name__)

USER_READ_ROLES = [Role.ADMIN, Role.BSS, Role.SUPERVISOR]
ACTIVATING_ROLES = frozenset([Role.ADMIN, Role.BSS])
EXPORT_HEADERS = ['Username', 'Name', 'Email', 'SBU', 'Role', 'Status', 'Created Date', 'Last Login', 'Campaigns Count']


def exclude_deleted(query, user):
    return query.filter(User.status != UserStatus.DELETED)


user_crud = CrudConfig(
    model=User,
    entity_name='User',
    order_by=('created_at', 'desc'),
    search_fields=('name', 'email', 'username'),
    filter_fields={'role': 'role', 'status': 'status', 'sbuId': 'sbu_id'},
    scope=exclude_deleted,
)

register_crud_routes(user_bp, '', user_crud, read_roles=USER_READ_ROLES, operations=('list',))


def _load_user(user_id, include_deleted=False):
    user = db.session.get(User, user_id)
    if user is None or (user.status == UserStatus.DELETED and not include_deleted):
        raise not_found('User', user_id)
    return user


def _notify_status_change(user, previous_status):
    if user.status == previous_status:
        return
    notifier = NotificationService()
    if user.status == UserStatus.ACTIVE:
        notifier.send_account_activated(user)
    elif user.status == UserStatus.REJECTED:
        notifier.send_account_rejected(user)


@user_bp.route('/pending', methods=['GET'])
@protect([Role.ADMIN])
def list_pending_users():
    """Users waiting for approval, oldest request first."""
    users = User.query.filter_by(status=UserStatus.PENDING).order_by(User.created_at.asc()).all()
    return create_success_response([user.to_dict() for user in users], {'total': len(users)})


@user_bp.route('/deleted', methods=['GET'])
@protect([Role.ADMIN, Role.BSS])
def list_deleted_users():
    users = User.query.filter_by(status=UserStatus.DELETED).order_by(User.updated_at.desc()).all()
    return create_success_response([user.to_dict() for user in users], {'total': len(users)})


@user_bp.route('/<user_id>', methods=['GET'])
@protect(USER_READ_ROLES)
def get_user(user_id):
    return create_success_response(_load_user(user_id).to_dict())


@user_bp.route('/<user_id>', methods=['PUT'])
@protect(USER_READ_ROLES)
def update_user(user_id):
    user = _load_user(user_id)
    data = validate_payload(UserUpdate, request.get_json(silent=True), partial=True)
    reject_null_columns(User, data, UserUpdate)

    new_status = data.get('status')
    if new_status == UserStatus.DELETED:
        raise ValidationError("Use DELETE to remove a user")
    if new_status == UserStatus.ACTIVE and user.status != UserStatus.ACTIVE \
            and g.current_user.role not in ACTIVATING_ROLES:
        raise Forbidden("Only ADMIN or BSS users can activate accounts")
    if data.get('sbu_id') and db.session.get(Sbu, data['sbu_id']) is None:
        raise ValidationError("sbuId: SBU not found")
    if data.get('email') and User.query.filter(User.email == data['email'], User.id != user.id).first():
        raise Conflict("A user with this email already exists")

    previous_status = user.status
    for key, value in data.items():
        setattr(user, key, value)
    db.session.commit()
    logger.info(f"User {user.id} updated by {g.current_user.id}: {sorted(data)}")

    _notify_status_change(user, previous_status)
    return create_success_response(user.to_dict())


@user_bp.route('/<user_id>', methods=['DELETE'])
@protect([Role.ADMIN])
def delete_user(user_id):
    """Soft delete: the row stays, flagged DELETED."""
    user = _load_user(user_id)
    if user.id == g.current_user.id:
        raise ValidationError("You cannot delete your own account")

    user.status = UserStatus.DELETED
    record_audit_event(audit.USER_DELETED, audit.USER, user=g.current_user, resource_id=user.id,
                       severity=AuditSeverity.HIGH)
    db.session.commit()
    logger.info(f"User {user.id} soft-deleted by {g.current_user.id}")
    return '', 204


@user_bp.route('/<user_id>/status', methods=['PUT'])
@protect([Role.ADMIN])
def set_user_status(user_id):
    user = _load_user(user_id)
    data = validate_payload(UserStatusUpdate, request.get_json(silent=True))

    previous_status = user.status
    user.status = UserStatus(data['status'])
    record_audit_event(audit.USER_STATUS_CHANGED, audit.USER, user=g.current_user, resource_id=user.id,
                       severity=AuditSeverity.MEDIUM,
                       details={'from': previous_status.value, 'to': user.status.value})
    db.session.commit()
    logger.info(f"User {user.id} status {previous_status.value} -> {user.status.value} by {g.current_user.id}")

    _notify_status_change(user, previous_status)
    return create_success_response(user.to_dict())


@user_bp.route('/<user_id>/restore', methods=['PUT'])
@protect([Role.ADMIN])
def restore_user(user_id):
    user = _load_user(user_id, include_deleted=True)
    if user.status != UserStatus.DELETED:
        raise ValidationError("User is not deleted")

    user.status = UserStatus.ACTIVE
    record_audit_event(audit.USER_RESTORED, audit.USER, user=g.current_user, resource_id=user.id,
                       severity=AuditSeverity.MEDIUM)
    db.session.commit()
    logger.info(f"User {user.id} restored by {g.current_user.id}")
    return create_success_response(user.to_dict())


@user_bp.route('/approve', methods=['POST'])
@protect([Role.ADMIN])
def approve_user():
    """Approve a pending access request. The account becomes ACTIVE on its next login."""
    data = validate_payload(UserApprove, request.get_json(silent=True))
    user = _load_user(data['user_id'])
    if user.status != UserStatus.PENDING:
        raise ValidationError("User is not pending approval")

    user.status = UserStatus.APPROVED
    db.session.commit()
    logger.info(f"User {user.id} approved by {g.current_user.id}")
    return create_success_response(user.to_dict())


def _format_date(value):
    return value.strftime('%Y-%m-%d') if value else ''


def render_users_csv(users, campaign_counts):
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for user in users:
        writer.writerow([
            user.username,
            user.name or '',
            user.email,
            user.sbu.name if user.sbu else '',
            user.role.value,
            user.status.value,
            _format_date(user.created_at),
            user.last_login.strftime('%Y-%m-%d %H:%M:%S') if user.last_login else 'Never',
            campaign_counts.get(user.id, 0),
        ])
    return buffer.getvalue()


@user_bp.route('/export', methods=['GET'])
@protect([Role.ADMIN, Role.BSS, Role.INFOSEC])
def export_users():
    users = (User.query
             .filter(User.status != UserStatus.DELETED)
             .order_by(User.created_at.desc())
             .all())
    campaign_counts = dict(
        db.session.query(Campaign.assigned_to_id, func.count(Campaign.id))
        .filter(Campaign.assigned_to_id.isnot(None))
        .group_by(Campaign.assigned_to_id)
        .all()
    )
    record_audit_event(audit.DATA_EXPORT, audit.USER, user=g.current_user, severity=AuditSeverity.HIGH,
                       details={'format': 'csv', 'rows': len(users)}, commit=True)
    filename = f"nexus-users-export-{date.today().isoformat()}.csv"
    logger.info(f"User {g.current_user.id} exported {len(users)} users")
    return Response(
        render_users_csv(users, campaign_counts),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@user_bp.route('/search', methods=['GET'])
@protect([Role.ADMIN, Role.BSS])
def search_directory_user():
    """Look a username up in the corporate directory before granting access."""
    username = (request.args.get('username') or '').strip()
    if not username:
        raise ValidationError("Username is required")

    directory = DomainAuthClient()
    if not directory.configured:
        raise ServiceUnavailable("Directory lookup is not configured")
    try:
        record = directory.search_user(username)
    except DomainAuthError as e:
        if e.status_code == 404:
            return create_success_response([])
        raise ExternalServiceError(f"Directory lookup failed: {str(e)}")
    return create_success_response([record] if record else [])
