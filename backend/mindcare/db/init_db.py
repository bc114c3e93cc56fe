"""
Database initialization script.

Usage: python -m mindcare.db.init_db
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from mindcare.core.config import settings
from mindcare.core.logging import configure_logging
from mindcare.db.session import engine, init_db

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    logger.info("Initializing database at %s", engine.url.render_as_string(hide_password=True))
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error("Database setup failed: %s", e)
        logger.error(
            "Make sure the database server is running, the credentials are correct "
            "and the user has CREATE privileges"
        )
        return 1
    logger.info("Tables ready: users, moods, journal_entries")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
