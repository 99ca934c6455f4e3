"""
CLI entrypoint for the expired refresh token cleanup job. Run from cron, e.g.:

  python -m auth_service.token_cleanup

Or daily: 0 3 * * * cd /path/to/auth-service && .venv/bin/python -m auth_service.token_cleanup
"""

import logging
import sys

from dotenv import load_dotenv

from auth_service.core.config import get_settings
from auth_service.core.database import Database
from auth_service.core.logging_config import configure_logging
from auth_service.services.token_cleanup import run_token_cleanup

logger = logging.getLogger(__name__)


def main() -> int:
    """Run cleanup: delete refresh tokens past their expiry."""
    load_dotenv()
    settings = get_settings()
    configure_logging(settings)
    database = Database.from_settings(settings)
    db = database.session()
    try:
        tokens_deleted = run_token_cleanup(db, settings)
        logger.info("Token cleanup completed: tokens_deleted=%s", tokens_deleted)
        return 0
    except Exception as e:
        logger.exception("Token cleanup job failed: %s", e)
        return 1
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
