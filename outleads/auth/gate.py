"""
Role gate for API handlers.

``protect`` requires a valid bearer access token, loads the acting user,
checks the account is ACTIVE and that its role is allowed, then calls the
handler with the user available as ``flask.g.current_user``.
"""

import logging
from functools import wraps
from flask import g, request
from outleads.auth.tokens import InvalidTokenError, UserNotFoundError, verify_token, load_token_subject
from outleads.models.enums import Role, UserStatus
from outleads.utils.error_handling import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

ALL_ROLES = frozenset(Role)


def bearer_token():
    """Return the token from ``Authorization: Bearer <token>`` or None."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def authenticate(require_active=True):
    """Resolve the acting user from the request's bearer token."""
    token = bearer_token()
    if not token:
        raise Unauthorized("Access token is required")

    try:
        claims = verify_token(token, 'access')
        user = load_token_subject(claims)
    except InvalidTokenError:
        raise Unauthorized("Invalid or expired token")
    except UserNotFoundError:
        raise Unauthorized("User not found")

    if require_active and user.status != UserStatus.ACTIVE:
        logger.info(f"Rejected request from inactive user {user.id} ({user.status.value})")
        raise Forbidden("User account is not active")
    return user


def protect(allowed_roles=ALL_ROLES, handler=None, require_active=True):
    """Wrap a view so only active users holding one of ``allowed_roles`` reach it.

    Works both as ``protect(roles, view)`` and as ``@protect(roles)``.
    """
    roles = frozenset(Role.parse(role) for role in allowed_roles)

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            user = authenticate(require_active=require_active)
            if user.role not in roles:
                raise Forbidden("Insufficient permissions for this operation")
            g.current_user = user
            return view(*args, **kwargs)

        wrapped.allowed_roles = roles
        return wrapped

    if handler is not None:
        return decorator(handler)
    return decorator
