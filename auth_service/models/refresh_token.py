"""ORM model for issued refresh tokens."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from auth_service.models.base import Base


class RefreshToken(Base):
    """
    One row per issued refresh token.

    The row id is embedded in the signed refresh token as the "id" claim; a token
    whose row is gone (revoked, rotated, or purged) is no longer accepted.
    """

    __tablename__ = "refresh_tokens"
    # Ids must never be reused after a delete, or a rotated-out token would become valid again.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="refresh_tokens")
