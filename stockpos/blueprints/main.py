"""Main blueprint with health check endpoints."""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from stockpos.database import get_session

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        session = get_session()
        row = session.execute(text("SELECT 1 as health_check")).fetchone()

        if row and row[0] == 1:
            return jsonify({'status': 'ok', 'database': 'connected'}), 200
        return jsonify({'status': 'error', 'database': 'unexpected result'}), 500

    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({'status': 'error', 'database': 'disconnected'}), 500
