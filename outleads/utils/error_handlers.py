"""
Global Error Handlers for Flask Application

This module provides global error handlers that catch unhandled exceptions
and return standardized error responses.
"""

import logging
from flask import request
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from outleads.extensions import db
from .error_handling import APIError, create_error_response, handle_internal_error

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: 'BAD_REQUEST',
    401: 'UNAUTHORIZED',
    403: 'FORBIDDEN',
    404: 'NOT_FOUND',
    405: 'METHOD_NOT_ALLOWED',
    409: 'CONFLICT',
    503: 'SERVICE_UNAVAILABLE',
}


def register_error_handlers(app):
    """Register global error handlers for the Flask application."""

    @app.errorhandler(APIError)
    def api_error(error):
        """Handle errors raised deliberately by handlers and services."""
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        return error.to_response()

    @app.errorhandler(IntegrityError)
    def integrity_error(error):
        """Unique or foreign-key constraint violations surface as conflicts."""
        db.session.rollback()
        logger.warning(f"Constraint violation on {request.method} {request.path}: {error.orig}")
        return create_error_response('CONFLICT', "Operation violates a database constraint")

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        """Handle SQLAlchemy database errors."""
        db.session.rollback()
        return handle_internal_error(error, "database operation", path=request.path)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Handle HTTP exceptions raised by werkzeug (routing, abort(), bad JSON)."""
        code = HTTP_ERROR_CODES.get(error.code, 'BAD_REQUEST' if error.code < 500 else 'INTERNAL_ERROR')
        return create_error_response(code, error.description or "HTTP error occurred", status_code=error.code)

    @app.errorhandler(Exception)
    def generic_error(error):
        """Handle all other unhandled exceptions."""
        db.session.rollback()
        return handle_internal_error(error, "request processing", method=request.method, path=request.path)
