import logging
import sys

from loyaltyapi.config import settings
from loyaltyapi.database.connection import engine, init_db
from loyaltyapi.logging_config import setup_logging

logger = logging.getLogger("loyaltyapi.init_db")


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    try:
        init_db(engine)
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        sys.exit(1)
    logger.info(
        f"Database initialized successfully: {engine.url.render_as_string(hide_password=True)}"
    )
