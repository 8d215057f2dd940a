"""SQLAlchemy engine and session handling.

One ``Database`` is built at startup and shared by every service. Services
open a short-lived session per call through ``session_scope``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import MetaData, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from src.core.config import Settings
from src.core.logger import get_logger

from shared.constants import Environment

logger = get_logger("analytics.database")

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Database:
    def __init__(self, url: str, **engine_kwargs: Any):
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self._session_factory = sessionmaker(
            bind=self.engine, expire_on_commit=False, class_=Session
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        kwargs: Dict[str, Any] = {
            "echo": settings.database_echo,
            "pool_pre_ping": True,
        }
        if settings.database_url.startswith("sqlite"):
            # In-memory SQLite must share one connection across threads
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        elif Environment.is_local(settings.app_environment):
            kwargs["poolclass"] = NullPool
        else:
            kwargs["pool_size"] = settings.database_pool_size
            kwargs["max_overflow"] = settings.database_max_overflow
            kwargs["pool_recycle"] = settings.database_pool_recycle_seconds
        logger.info(
            "database_engine_created",
            extra={"dialect": settings.database_url.split(":", 1)[0]},
        )
        return cls(settings.database_url, **kwargs)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        # Import registers the mapped classes on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()
