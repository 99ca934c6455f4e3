"""Expired refresh token cleanup: delete refresh_tokens rows past expires_at."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from auth_service.services.refresh_tokens import RefreshTokenStore

if TYPE_CHECKING:
    from auth_service.core.config import Settings

logger = logging.getLogger(__name__)


def run_token_cleanup(session: Session, settings: "Settings") -> int:
    """
    Delete refresh tokens that have expired. Returns the number of rows deleted.

    Idempotent: safe to run repeatedly.
    """
    if not settings.TOKEN_CLEANUP_ENABLED:
        logger.info("Token cleanup is disabled (TOKEN_CLEANUP_ENABLED=false); skipping.")
        return 0

    now = datetime.now(UTC)
    store = RefreshTokenStore(session, ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    deleted_count = store.purge_expired(now)

    if deleted_count > 0:
        logger.info(
            "Token cleanup run: cutoff=%s, tokens_deleted=%s",
            now.isoformat(),
            deleted_count,
        )
    return deleted_count
