"""Create the Threadline schema in the configured database."""

import logging

from threadline.core.settings import settings
from threadline.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    init_db()
    logger.info("Database initialized at %s", settings.effective_database_url)
