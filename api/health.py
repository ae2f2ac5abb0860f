import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import storage

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)

VERSION = "1.0.0"


@bp.get("/health")
def health():
    """
    Health check, including a round trip to the database
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
      503:
        description: Database unreachable
    """
    try:
        storage.get_session().execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return {"status": "degraded", "database": "down", "version": VERSION}, 503
    return {"status": "ok", "database": "up", "version": VERSION}, 200
