"""SQLAlchemy ORM models."""

from auth_service.models.base import Base
from auth_service.models.refresh_token import RefreshToken
from auth_service.models.user import Role, User

__all__ = ["Base", "RefreshToken", "Role", "User"]
