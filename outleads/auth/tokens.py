"""
Token service: issues and verifies access and refresh tokens.

Access tokens are short lived bearer credentials carrying the user's role.
Refresh tokens live longer and only ever travel in the HttpOnly
``refresh-token`` cookie.
"""

import logging
import jwt as pyjwt
from flask import current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    decode_token,
    set_refresh_cookies,
    unset_refresh_cookies,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from outleads.extensions import db
from outleads.models import User

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Signature, expiry or token type check failed."""


class UserNotFoundError(Exception):
    """The token's subject no longer exists."""


def issue_access_token(user):
    return create_access_token(identity=user.id, additional_claims={'role': user.role.value})


def issue_refresh_token(user):
    return create_refresh_token(identity=user.id)


def verify_token(token, expected_type='access'):
    """Decode a token and return its claims.

    Raises:
        InvalidTokenError: when the token is malformed, tampered with, expired
            or of the wrong type.
    """
    if not token:
        raise InvalidTokenError("Token is missing")
    try:
        claims = decode_token(token)
    except (pyjwt.PyJWTError, JWTExtendedException) as e:
        raise InvalidTokenError(str(e)) from e

    if claims.get('type') != expected_type:
        raise InvalidTokenError(f"Expected a {expected_type} token")
    return claims


def load_token_subject(claims):
    """Return the User a token was issued for."""
    user = db.session.get(User, claims.get('sub'))
    if user is None:
        raise UserNotFoundError(f"User {claims.get('sub')} not found")
    return user


def refresh_cookie_max_age():
    return int(current_app.config['JWT_REFRESH_TOKEN_EXPIRES'].total_seconds())


def set_refresh_cookie(response, token):
    set_refresh_cookies(response, token, max_age=refresh_cookie_max_age())
    return response


def clear_refresh_cookie(response):
    unset_refresh_cookies(response)
    return response
