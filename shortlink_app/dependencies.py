"""
FastAPI dependencies for dependency injection.

Nothing here is a module-level singleton: settings, database and logger
live on ``app.state`` (set up by the application lifespan) and each
request gets its own session, store and service built from them.
"""

import logging
from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from shortlink_app.config import Settings
from shortlink_app.services.shortcode import ShortcodeGenerator
from shortlink_app.services.url_service import URLService
from shortlink_app.storage.strategies import ShortUrlStore, SQLAlchemyShortUrlStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, closed afterwards."""
    yield from request.app.state.database.iter_session()


def get_store(
    db: Session = Depends(get_db),
    logger: logging.Logger = Depends(get_logger),
) -> ShortUrlStore:
    return SQLAlchemyShortUrlStore(db=db, logger=logger)


def get_base_url(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Base for public short links: configured value or this request's origin."""
    if settings.base_url:
        return settings.base_url.rstrip("/")
    return str(request.base_url).rstrip("/")


def get_url_service(
    store: ShortUrlStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    logger: logging.Logger = Depends(get_logger),
) -> URLService:
    """
    Get URLService with all dependencies injected.
    
    Controller depends on service, service depends on the store.
    Tests can override this (or get_store) via app.dependency_overrides.
    """
    generator = ShortcodeGenerator(
        store=store,
        length=settings.shortcode_length,
        fallback_length=settings.shortcode_fallback_length,
        max_retries=settings.shortcode_max_retries,
    )
    return URLService(
        store=store,
        generator=generator,
        logger=logger,
        default_validity_minutes=settings.default_validity_minutes,
        deactivate_expired_on_stats=settings.deactivate_expired_on_stats,
    )
