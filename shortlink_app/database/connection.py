"""
Database engine and session handling.

``Database`` owns the engine and session factory for one application
instance. It is created in the app lifespan and disposed on shutdown, so
nothing connects at import time.
"""

from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine, text, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Stores naive UTC, always returns timezone-aware UTC.

    SQLite drops tzinfo on the way back, which would make comparisons
    against ``utcnow()`` fail.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Database:
    """Engine + session factory with explicit init/shutdown hooks."""

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            # FastAPI runs sync dependencies in a threadpool
            connect_args["check_same_thread"] = False

        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def create_tables(self) -> None:
        # Import models so they're registered with Base
        import shortlink_app.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self.session_factory()

    def iter_session(self) -> Iterator[Session]:
        """Yield a session and always close it (FastAPI dependency style)."""
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
