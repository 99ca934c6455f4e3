"""Database handle (engine + session factory) and the per-request session dependency."""

from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auth_service.models.base import Base

if TYPE_CHECKING:
    from auth_service.core.config import Settings

_SQLITE_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Constructed once at startup (see main.lifespan), stored on app.state and
    disposed at shutdown. Nothing in the package keeps a module-level engine.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        connect_timeout_sec: int = 10,
        statement_timeout_ms: int = 5000,
    ) -> None:
        self.url = url
        engine_kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": connect_timeout_sec,
            }
            if url in _SQLITE_MEMORY_URLS:
                # A single shared connection, otherwise every session sees an empty database.
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["connect_args"] = {
                "connect_timeout": connect_timeout_sec,
                "options": f"-c statement_timeout={statement_timeout_ms}",
            }
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            connect_timeout_sec=settings.DB_CONNECT_TIMEOUT_SEC,
            statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS,
        )

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        """Create all tables directly (tests and local SQLite). Production uses Alembic."""
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's Database and closes it when done."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
