"""Core app configuration, database handle, and error types."""

from auth_service.core.config import Settings, get_settings
from auth_service.core.database import Database, get_db

__all__ = ["Database", "Settings", "get_db", "get_settings"]
