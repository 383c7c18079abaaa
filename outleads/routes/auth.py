import logging
from datetime import datetime
from flask import Blueprint, current_app, g, request
from outleads.auth.gate import protect
from outleads.auth.tokens import (
    InvalidTokenError,
    UserNotFoundError,
    clear_refresh_cookie,
    issue_access_token,
    issue_refresh_token,
    load_token_subject,
    set_refresh_cookie,
    verify_token,
)
from outleads.extensions import db
from outleads.models import AuditSeverity, Role, Sbu, User, UserStatus
from outleads.schemas import validate_payload
from outleads.schemas.auth import CompleteRegistrationRequest, LoginRequest, OnboardingRequest
from outleads.services import audit
from outleads.services.audit import record_audit_event
from outleads.services.domain_auth import DomainAuthClient, DomainAuthError
from outleads.utils.error_handling import (
    ExternalServiceError,
    Forbidden,
    Unauthorized,
    ValidationError,
    create_success_response,
    not_found,
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _login_with_directory(directory, username, password):
    """Authenticate against the corporate directory. Returns (user, is_new)."""
    try:
        directory_token = directory.authenticate(username, password)
        info = directory.get_user_info(username, directory_token)
    except DomainAuthError as e:
        if e.status_code in (400, 401, 403):
            raise Unauthorized("Invalid credentials")
        raise ExternalServiceError(str(e))

    user = User.query.filter_by(email=info['email']).first()
    if user is not None:
        return user, False

    user = User(name=info['name'], email=info['email'], username=info['email'], status=UserStatus.PENDING)
    db.session.add(user)
    db.session.commit()
    logger.info(f"Created pending user {user.id} on first domain login")
    return user, True


def _login_with_password(username, password):
    user = User.query.filter((User.username == username) | (User.email == username)).first()
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid credentials")
    return user


def _record_failed_login(username, reason, user=None):
    record_audit_event(
        audit.LOGIN_FAILED, audit.SESSION, user=user, user_email=username, success=False,
        severity=AuditSeverity.HIGH, error_message=reason, commit=True,
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    """Sign a user in and start a session (access token + refresh cookie)."""
    data = validate_payload(LoginRequest, request.get_json(silent=True))

    directory = DomainAuthClient()
    try:
        if directory.configured:
            user, is_new = _login_with_directory(directory, data['username'], data['password'])
            if is_new:
                # Onboarding token only: no refresh cookie until the account is activated
                return create_success_response({
                    'newUser': True,
                    'token': issue_access_token(user),
                    'user': user.to_dict(),
                })
        else:
            user = _login_with_password(data['username'], data['password'])
    except Unauthorized as e:
        logger.warning(f"Failed login for {data['username']} from {request.remote_addr}")
        _record_failed_login(data['username'], e.message)
        raise

    if user.status == UserStatus.PENDING:
        _record_failed_login(data['username'], "Access request pending approval", user=user)
        raise Forbidden("Your access request is pending approval.")
    if user.status == UserStatus.APPROVED:
        user.status = UserStatus.ACTIVE
    if user.status != UserStatus.ACTIVE:
        _record_failed_login(data['username'], f"Account status {user.status.value}", user=user)
        raise Forbidden("Your account is not active.")

    user.last_login = datetime.utcnow()
    record_audit_event(audit.LOGIN, audit.SESSION, user=user, resource_id=user.id)
    db.session.commit()
    logger.info(f"User {user.id} logged in")

    response, status = create_success_response({
        'newUser': False,
        'token': issue_access_token(user),
        'user': user.to_dict(),
    })
    set_refresh_cookie(response, issue_refresh_token(user))
    return response, status


@auth_bp.route('/refresh', methods=['POST'])
def refresh():
    """Issue a new access token from the refresh cookie and rotate the cookie."""
    token = request.cookies.get(current_app.config['JWT_REFRESH_COOKIE_NAME'])
    if not token:
        logger.warning(f"Refresh attempt without token from {request.remote_addr}")
        raise Unauthorized("Refresh token not found.")

    try:
        user = load_token_subject(verify_token(token, 'refresh'))
    except (InvalidTokenError, UserNotFoundError) as e:
        logger.warning(f"Refresh token validation failed: {str(e)}")
        raise Forbidden("Invalid refresh token.")

    if user.status != UserStatus.ACTIVE:
        raise Forbidden("User account is not active")

    response, status = create_success_response({'token': issue_access_token(user)})
    set_refresh_cookie(response, issue_refresh_token(user))
    return response, status


def _refresh_cookie_user():
    token = request.cookies.get(current_app.config['JWT_REFRESH_COOKIE_NAME'])
    if not token:
        return None
    try:
        return load_token_subject(verify_token(token, 'refresh'))
    except (InvalidTokenError, UserNotFoundError):
        return None


@auth_bp.route('/logout', methods=['POST'])
def logout():
    user = _refresh_cookie_user()
    if user is not None:
        record_audit_event(audit.LOGOUT, audit.SESSION, user=user, resource_id=user.id, commit=True)
        logger.info(f"User {user.id} logged out")

    response, status = create_success_response({'loggedOut': True})
    clear_refresh_cookie(response)
    return response, status


@auth_bp.route('/me', methods=['GET'])
@protect()
def me():
    return create_success_response({'user': g.current_user.to_dict(), 'isAuthenticated': True})


@auth_bp.route('/verify', methods=['GET', 'POST'])
@protect()
def verify():
    """Check that the bearer token is valid and its user can still sign in."""
    return create_success_response({'valid': True, 'user': g.current_user.to_dict()})


@auth_bp.route('/onboarding', methods=['POST'])
@protect(require_active=False)
def onboarding():
    """Record a pending user's SBU and requested role; the account still waits for activation."""
    user = g.current_user
    if user.status != UserStatus.PENDING:
        raise Forbidden("Onboarding is only available to accounts awaiting approval")

    data = validate_payload(OnboardingRequest, request.get_json(silent=True))
    if db.session.get(Sbu, data['sbu_id']) is None:
        raise ValidationError("sbuId: SBU not found")

    user.sbu_id = data['sbu_id']
    user.role = data['role']
    db.session.commit()
    logger.info(f"User {user.id} completed onboarding as {user.role.value}")
    return create_success_response({'user': user.to_dict()})


@auth_bp.route('/complete-registration', methods=['POST'])
@protect([Role.ADMIN, Role.BSS])
def complete_registration():
    data = validate_payload(CompleteRegistrationRequest, request.get_json(silent=True))
    user = db.session.get(User, data['user_id'])
    if user is None:
        raise not_found('User', data['user_id'])

    if data.get('sbu_id'):
        if db.session.get(Sbu, data['sbu_id']) is None:
            raise ValidationError("sbuId: SBU not found")
        user.sbu_id = data['sbu_id']
    user.role = data['role']
    db.session.commit()
    logger.info(f"User {g.current_user.id} completed registration of {user.id} as {user.role.value}")
    return create_success_response({'user': user.to_dict()})
