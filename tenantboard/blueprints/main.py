"""Main blueprint with the health check endpoint."""
import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from tenantboard.database import get_database

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates the database connection.

    Returns:
        200: {status: 'ok', timestamp}
        503: {status: 'unhealthy', timestamp} when the DB does not answer
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        get_database().ping()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({'status': 'unhealthy', 'database': 'disconnected', 'timestamp': timestamp}), 503

    return jsonify({'status': 'ok', 'database': 'connected', 'timestamp': timestamp}), 200
