"""Refresh token store: one row per issued refresh token."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth_service.core.errors import InternalError, NotFoundError
from auth_service.models.refresh_token import RefreshToken
from auth_service.models.user import User

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every timestamp we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_expired(token: RefreshToken, now: datetime | None = None) -> bool:
    now = now or datetime.now(UTC)
    return as_utc(token.expires_at) <= now


class RefreshTokenStore:
    def __init__(self, session: Session, ttl: timedelta) -> None:
        self.session = session
        self.ttl = ttl

    def _new_row(self, user: User) -> RefreshToken:
        return RefreshToken(user_id=user.id, expires_at=datetime.now(UTC) + self.ttl)

    def persist(self, user: User) -> RefreshToken:
        """Insert a new row expiring ttl from now. All or nothing."""
        token = self._new_row(user)
        self.session.add(token)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError("Failed to persist refresh token", cause=e) from e
        self.session.refresh(token)
        return token

    def find(self, token_id: int) -> RefreshToken:
        """Return the row or raise NotFoundError."""
        token = self.session.get(RefreshToken, token_id)
        if token is None:
            raise NotFoundError(f"Refresh token {token_id} not found")
        return token

    def revoke(self, token_id: int) -> bool:
        """Delete the row. Idempotent; returns whether a row was removed."""
        try:
            deleted = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.id == token_id)
                .delete(synchronize_session="evaluate")
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError("Failed to revoke refresh token", cause=e) from e
        return deleted > 0

    def rotate(self, old_token_id: int, user: User) -> RefreshToken:
        """
        Delete old_token_id and insert its replacement in one transaction.

        Raises NotFoundError when the old row is already gone, which is how the
        loser of two concurrent rotations of the same token finds out.
        """
        token = self._new_row(user)
        try:
            deleted = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.id == old_token_id)
                .delete(synchronize_session="evaluate")
            )
            if deleted != 1:
                self.session.rollback()
                raise NotFoundError(f"Refresh token {old_token_id} not found")
            self.session.add(token)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError("Failed to rotate refresh token", cause=e) from e
        self.session.refresh(token)
        logger.info(
            "Refresh token rotated",
            extra={"user_id": user.id, "old_token_id": old_token_id, "token_id": token.id},
        )
        return token

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every row past its expiry; returns how many were removed."""
        cutoff = now or datetime.now(UTC)
        try:
            deleted = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.expires_at <= cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError("Failed to purge expired refresh tokens", cause=e) from e
        return deleted
