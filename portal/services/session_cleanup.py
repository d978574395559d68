"""Session cleanup: physically delete expired session records."""

import logging

from portal.storage.base import SessionStore

logger = logging.getLogger(__name__)


async def run_session_cleanup(sessions: SessionStore) -> int:
    """
    Purge sessions past their expiry. Expired sessions already resolve as
    anonymous; this only reclaims space. Idempotent: safe to run repeatedly.
    """
    deleted_count = await sessions.purge_expired()
    if deleted_count > 0:
        logger.info("Session cleanup run: sessions_deleted=%s", deleted_count)
    return deleted_count
