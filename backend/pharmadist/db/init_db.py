"""Create all tables. Run on app startup."""
import logging

from pharmadist.db.base import Base
from pharmadist.db.session import engine
from pharmadist.models import stored_value  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("[DB] Tables ready")
