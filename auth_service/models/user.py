"""ORM model for application users."""

import enum

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from auth_service.models.base import Base


class Role(str, enum.Enum):
    """Closed set of authorization tiers. Self-registration always yields CUSTOMER."""

    CUSTOMER = "customer"
    ADMIN = "admin"
    MANAGER = "manager"


class User(Base):
    """
    User account. Email is unique and compared case-sensitively as stored.

    password_hash is never serialized to clients; response schemas omit it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.CUSTOMER.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
