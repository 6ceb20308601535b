"""
Store strategies for short URL records.

Same Strategy Pattern as the rest of the app: the service depends on the
abstract interface, the concrete backend is injected.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shortlink_app.database.connection import utcnow
from shortlink_app.errors import ConflictError, StoreError
from shortlink_app.models import ShortUrl, Click
from shortlink_app.schemas.url import ClickData


class ShortUrlStore(ABC):
    """
    Abstract persistent mapping from shortcode to record + click log.

    Implementations raise ``StoreError`` on persistence failures and
    ``ConflictError`` when an insert hits an existing shortcode.
    """

    @abstractmethod
    def find_by_shortcode(self, shortcode: str) -> Optional[ShortUrl]:
        """Return the record (active or not) or None."""
        pass

    @abstractmethod
    def exists(self, shortcode: str) -> bool:
        """Uniqueness probe."""
        pass

    @abstractmethod
    def insert(self, record: ShortUrl) -> ShortUrl:
        """
        Persist a new record.

        Raises:
            ConflictError: shortcode already present
        """
        pass

    @abstractmethod
    def deactivate(self, record_id: str) -> None:
        """Set is_active=False. Idempotent."""
        pass

    @abstractmethod
    def deactivate_many(self, record_ids: Iterable[str]) -> None:
        """Batch variant of deactivate(). Idempotent."""
        pass

    @abstractmethod
    def list_active(self) -> List[ShortUrl]:
        """
        All records with is_active=True, newest first.

        Includes records that are past their expiry but have not been
        swept yet; the caller decides what to do with them.
        """
        pass

    @abstractmethod
    def append_click(
        self,
        short_url_id: str,
        click: ClickData,
        timestamp: Optional[datetime] = None,
    ) -> Optional[Click]:
        """
        Append to a record's click log. No-op (None) for unknown ids.

        ``timestamp`` defaults to the current UTC time.
        """
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Liveness check, never raises."""
        pass


class SQLAlchemyShortUrlStore(ShortUrlStore):
    """
    Relational store on a SQLAlchemy session.

    One instance per request (it wraps the request's session). Every write
    commits immediately; there is no transaction spanning several calls.
    """

    def __init__(self, db: Session, logger: logging.Logger):
        self.db = db
        self.logger = logger

    def _fail(self, action: str, exc: Exception) -> StoreError:
        self.db.rollback()
        self.logger.error("Store failure while %s: %s", action, exc, exc_info=exc)
        return StoreError(f"{action}: {exc}")

    def find_by_shortcode(self, shortcode: str) -> Optional[ShortUrl]:
        try:
            return self.db.scalars(
                select(ShortUrl).where(ShortUrl.shortcode == shortcode)
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("looking up shortcode", e) from e

    def exists(self, shortcode: str) -> bool:
        try:
            found = self.db.scalars(
                select(ShortUrl.id).where(ShortUrl.shortcode == shortcode)
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("checking shortcode uniqueness", e) from e
        return found is not None

    def insert(self, record: ShortUrl) -> ShortUrl:
        try:
            self.db.add(record)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"Shortcode '{record.shortcode}' already exists") from e
        except SQLAlchemyError as e:
            raise self._fail("inserting short url", e) from e

        self.db.refresh(record)
        return record

    def deactivate(self, record_id: str) -> None:
        self.deactivate_many([record_id])

    def deactivate_many(self, record_ids: Iterable[str]) -> None:
        ids = list(record_ids)
        if not ids:
            return
        try:
            self.db.execute(
                update(ShortUrl)
                .where(ShortUrl.id.in_(ids))
                .values(is_active=False)
                .execution_options(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("deactivating short urls", e) from e

    def list_active(self) -> List[ShortUrl]:
        try:
            return list(
                self.db.scalars(
                    select(ShortUrl)
                    .where(ShortUrl.is_active.is_(True))
                    .order_by(ShortUrl.created_at.desc())
                ).all()
            )
        except SQLAlchemyError as e:
            raise self._fail("listing active short urls", e) from e

    def append_click(
        self,
        short_url_id: str,
        click: ClickData,
        timestamp: Optional[datetime] = None,
    ) -> Optional[Click]:
        try:
            record = self.db.get(ShortUrl, short_url_id)
            if record is None:
                return None

            row = Click(
                short_url_id=short_url_id,
                timestamp=timestamp or utcnow(),
                referrer=click.referrer,
                user_agent=click.user_agent,
                ip=click.ip,
                location=click.location,
            )
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("recording click", e) from e

        self.db.refresh(row)
        return row

    def ping(self) -> bool:
        try:
            self.db.execute(select(1))
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error("Database health check failed: %s", e)
            return False
