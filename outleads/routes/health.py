import logging
from datetime import datetime
from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from outleads.extensions import db
from outleads.utils.error_handling import create_error_response, create_success_response

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health():
    """Health check including a database round trip."""
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Health check failed: {str(e)}")
        return create_error_response('SERVICE_UNAVAILABLE', 'Database is unreachable')

    return create_success_response({
        'status': 'healthy',
        'database': 'connected',
        'timestamp': datetime.utcnow().isoformat(),
    })
