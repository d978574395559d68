"""
CLI entrypoint for the expired-session cleanup job. Run from cron, e.g.:

  python -m portal.session_cleanup

Or hourly: 0 * * * * cd /path/to/portal && .venv/bin/python -m portal.session_cleanup
"""

import asyncio
import logging
import sys

from portal.core.config import get_settings
from portal.services.session_cleanup import run_session_cleanup
from portal.storage import build_storage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete expired sessions from the configured storage backend."""
    settings = get_settings()
    if settings.STORAGE_BACKEND != "database":
        logger.info("STORAGE_BACKEND=%s keeps sessions in process; nothing to clean.", settings.STORAGE_BACKEND)
        return 0
    storage = build_storage(settings)
    try:
        deleted = asyncio.run(run_session_cleanup(storage.sessions))
        logger.info("Session cleanup completed: sessions_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Session cleanup job failed: %s", e)
        return 1
    finally:
        storage.close()


if __name__ == "__main__":
    sys.exit(main())
