"""
Test configuration and fixtures for the URL shortener.
This centralizes all test setup, making individual tests clean.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink_app.config import Settings
from shortlink_app.database.connection import Database
from shortlink_app.services.shortcode import ShortcodeGenerator
from shortlink_app.services.url_service import URLService
from shortlink_app.storage.strategies import SQLAlchemyShortUrlStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file per test."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        base_url=None,
        log_level="WARNING",
    )


@pytest.fixture(scope="function")
def client(settings):
    """
    Test client for a freshly built app.
    The context manager runs the lifespan (tables, logger, database).
    """
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def database(settings):
    db = Database(settings.database_url)
    db.create_tables()
    try:
        yield db
    finally:
        db.drop_tables()
        db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def logger():
    return logging.getLogger("shortlink.tests")


@pytest.fixture
def store(db_session, logger):
    return SQLAlchemyShortUrlStore(db=db_session, logger=logger)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def url_service(store, logger, clock):
    return URLService(
        store=store,
        generator=ShortcodeGenerator(store),
        logger=logger,
        clock=clock,
    )
