"""
Check the database and bootstrap the OAuth storage.
Run once after migrations: python scripts/init_storage.py

Requires the schema to exist (alembic upgrade head) unless
DB_INIT_MODE=create_all is set for local development.
"""

import logging
import sys
from pathlib import Path

# Add repository root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text

from oauth_store.config import settings
from oauth_store.core.database import dispose_engine, get_engine
from oauth_store.core.exceptions import IndexBootstrapError
from oauth_store.core.log_config import configure_logging
from oauth_store.storage import OAuthStorage

logger = logging.getLogger("init_storage")


def main() -> int:
    configure_logging(settings)
    try:
        settings.validate_database_settings()
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection OK.")

        storage = OAuthStorage.open(engine)
        storage.close()
        logger.info("OAuth storage ready.")
        return 0
    except IndexBootstrapError as e:
        logger.error(f"Index bootstrap failed: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Cannot initialize OAuth storage: {e}")
        return 1
    finally:
        dispose_engine()


if __name__ == "__main__":
    sys.exit(main())
