"""
Audit trail for authentication and administrative actions.

Entries are added to the current session so they commit together with the
change they describe. ``record_audit_event(..., commit=True)`` is for events
that have no change of their own to ride on, such as a failed login; those
are written best effort and never fail the request that triggered them.
"""

import logging
from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError
from outleads.extensions import db
from outleads.models import AuditLog, AuditSeverity

logger = logging.getLogger(__name__)

# Actions
LOGIN = 'LOGIN'
LOGIN_FAILED = 'LOGIN_FAILED'
LOGOUT = 'LOGOUT'
DATA_EXPORT = 'DATA_EXPORT'
USER_STATUS_CHANGED = 'USER_STATUS_CHANGED'
USER_DELETED = 'USER_DELETED'
USER_RESTORED = 'USER_RESTORED'

# Resource types
SESSION = 'SESSION'
USER = 'USER'
REPORT = 'REPORT'

SENSITIVE_KEYS = ('password', 'token', 'secret', 'key')


def sanitize_details(details):
    """Redact secrets and mask contact data before it is stored."""
    if not details:
        return details
    sanitized = {}
    for key, value in details.items():
        lowered = key.lower()
        if any(marker in lowered for marker in SENSITIVE_KEYS):
            sanitized[key] = '[REDACTED]'
        elif lowered == 'email' and isinstance(value, str) and '@' in value:
            local, _, domain = value.partition('@')
            sanitized[key] = f"{local[:1]}***@{domain}"
        else:
            sanitized[key] = value
    return sanitized


def _request_metadata():
    if not has_request_context():
        return None, None
    user_agent = request.headers.get('User-Agent')
    return request.remote_addr, user_agent[:512] if user_agent else None


def record_audit_event(action, resource_type, user=None, resource_id=None, success=True,
                       severity=AuditSeverity.LOW, error_message=None, details=None,
                       user_email=None, commit=False):
    ip_address, user_agent = _request_metadata()
    entry = AuditLog(
        user_id=user.id if user is not None else None,
        user_email=user.email if user is not None else user_email,
        user_role=user.role.value if user is not None and user.role else None,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        success=success,
        severity=severity,
        error_message=error_message,
        details=sanitize_details(details),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)
    logger.info(f"Audit {action} on {resource_type} {resource_id or ''} by {entry.user_id or user_email} "
                f"(success={success}, severity={severity.value})")

    if commit:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to store audit event {action}: {str(e)}")
            return None
    return entry
