"""
Standardized Error Handling Utilities

This module provides the API exception taxonomy and the two response
envelopes used by every endpoint:

- success: {"data": ..., "meta": {...}?}
- error:   {"error": <code>, "message": <human readable text>}
"""

import logging
from typing import Any, Dict, Optional
from flask import jsonify

logger = logging.getLogger(__name__)

# Standard error codes
ERROR_CODES = {
    'VALIDATION_ERROR': 'VALIDATION_ERROR',
    'BAD_REQUEST': 'BAD_REQUEST',
    'UNAUTHORIZED': 'UNAUTHORIZED',
    'FORBIDDEN': 'FORBIDDEN',
    'NOT_FOUND': 'NOT_FOUND',
    'METHOD_NOT_ALLOWED': 'METHOD_NOT_ALLOWED',
    'CONFLICT': 'CONFLICT',
    'INTERNAL_ERROR': 'INTERNAL_ERROR',
    'DATABASE_ERROR': 'DATABASE_ERROR',
    'EXTERNAL_API_ERROR': 'EXTERNAL_API_ERROR',
    'SERVICE_UNAVAILABLE': 'SERVICE_UNAVAILABLE',
}

# HTTP status code mapping
STATUS_CODES = {
    'VALIDATION_ERROR': 400,
    'BAD_REQUEST': 400,
    'UNAUTHORIZED': 401,
    'FORBIDDEN': 403,
    'NOT_FOUND': 404,
    'METHOD_NOT_ALLOWED': 405,
    'CONFLICT': 409,
    'INTERNAL_ERROR': 500,
    'DATABASE_ERROR': 500,
    'EXTERNAL_API_ERROR': 502,
    'SERVICE_UNAVAILABLE': 503,
}


class APIError(Exception):
    """Base class for errors that map directly onto an error envelope."""
    code = 'INTERNAL_ERROR'
    default_message = 'An unexpected error occurred'

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.status_code = status_code or STATUS_CODES[self.code]

    def to_response(self):
        return create_error_response(self.code, self.message, status_code=self.status_code)


class ValidationError(APIError):
    code = 'VALIDATION_ERROR'
    default_message = 'Invalid request data'


class Unauthorized(APIError):
    code = 'UNAUTHORIZED'
    default_message = 'Authentication required'


class Forbidden(APIError):
    code = 'FORBIDDEN'
    default_message = 'Insufficient permissions for this operation'


class NotFound(APIError):
    code = 'NOT_FOUND'
    default_message = 'Resource not found'


class Conflict(APIError):
    code = 'CONFLICT'
    default_message = 'Resource conflict'


class InternalError(APIError):
    code = 'INTERNAL_ERROR'
    default_message = 'An unexpected error occurred'


class ExternalServiceError(APIError):
    code = 'EXTERNAL_API_ERROR'
    default_message = 'Error communicating with an external service'


class ServiceUnavailable(APIError):
    code = 'SERVICE_UNAVAILABLE'
    default_message = 'Service temporarily unavailable'


def create_error_response(code: str, message: str, status_code: Optional[int] = None) -> tuple:
    """
    Create a standardized error response.

    Args:
        code: Error code from ERROR_CODES
        message: Human-readable error message
        status_code: HTTP status code (optional, defaults to code mapping)

    Returns:
        Tuple of (json_response, status_code)
    """
    if code not in ERROR_CODES:
        logger.warning(f"Unknown error code used: {code}, defaulting to INTERNAL_ERROR")
        code = 'INTERNAL_ERROR'

    http_status = status_code or STATUS_CODES.get(code, 500)
    return jsonify({'error': code, 'message': message}), http_status


def create_success_response(data: Any, meta: Optional[Dict[str, Any]] = None, status_code: int = 200) -> tuple:
    """Wrap a payload in the success envelope."""
    body = {'data': data}
    if meta is not None:
        body['meta'] = meta
    return jsonify(body), status_code


def not_found(entity: str, entity_id: Optional[str] = None) -> NotFound:
    """Build a NotFound error with a consistent message."""
    message = f"{entity} not found"
    if entity_id:
        message += f" with id: {entity_id}"
    return NotFound(message)


def handle_internal_error(error: Exception, operation: str = "operation", **context) -> tuple:
    """Log an unexpected failure with context and return the generic 500 envelope."""
    details = ', '.join(f"{key}={value}" for key, value in context.items() if value is not None)
    logger.exception(f"Internal error during {operation}" + (f" ({details})" if details else "") + f": {error}")
    return create_error_response('INTERNAL_ERROR', f"An unexpected error occurred during {operation}")
