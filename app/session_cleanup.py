"""
Cron entrypoint that deletes expired server-side sessions.

  python -m app.session_cleanup

Hourly crontab line:
  0 * * * * cd /srv/userbase && .venv/bin/python -m app.session_cleanup
"""

import logging
import sys
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import session_scope
from app.core.log_config import configure_logging
from app.services.sessions import SessionStore

configure_logging()
logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    with session_scope() as db:
        store = SessionStore(db, ttl=timedelta(seconds=settings.SESSION_TTL_SECONDS))
        try:
            deleted = store.purge_expired()
        except SQLAlchemyError as e:
            logger.exception("Session cleanup failed: %s", e)
            return 1
    logger.info("Session cleanup completed: sessions_deleted=%s", deleted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
