import logging
import math
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from shortlink_app.database.connection import utcnow
from shortlink_app.errors import (
    ConflictError,
    InvalidShortcodeError,
    InvalidUrlError,
    InvalidValidityError,
    NotFoundError,
    ShortcodeCollisionError,
    ShortcodeExhaustedError,
    ShortUrlError,
    StoreError,
)
from shortlink_app.models import Click, ShortUrl
from shortlink_app.schemas.url import ClickData, ClickResponse, ShortUrlStats
from shortlink_app.services.result import Result
from shortlink_app.services.shortcode import ShortcodeGenerator, is_valid_shortcode
from shortlink_app.storage.strategies import ShortUrlStore

_url_adapter = TypeAdapter(AnyUrl)


def build_short_link(base_url: str, shortcode: str) -> str:
    return f"{base_url.rstrip('/')}/{shortcode}"


class URLService:
    """
    Short URL lifecycle: creation, resolution with lazy expiry, listing
    with an expiry sweep, statistics and click recording.
    
    Store, generator and logger are injected; the clock is injectable so
    expiry can be tested without sleeping.
    
    Every public method returns a ``Result``. Validation failures are
    reported before the store is touched, store failures come back as
    ``StoreError`` and nothing is raised to the caller.
    
    Note: Async for interface consistency, store calls are sync.
    """
    
    def __init__(
        self,
        store: ShortUrlStore,
        generator: ShortcodeGenerator,
        logger: logging.Logger,
        clock: Callable[[], datetime] = utcnow,
        default_validity_minutes: int = 30,
        deactivate_expired_on_stats: bool = False,
    ):
        self.store = store
        self.generator = generator
        self.logger = logger
        self.clock = clock
        self.default_validity_minutes = default_validity_minutes
        # resolve() deactivates expired records it runs into, stats() by
        # default only reports them as missing
        self.deactivate_expired_on_stats = deactivate_expired_on_stats

    def _validate_url(self, original_url) -> None:
        if not original_url:
            raise InvalidUrlError(
                "Please provide a valid URL to shorten", error="URL is required"
            )
        if not isinstance(original_url, str):
            raise InvalidUrlError()
        try:
            _url_adapter.validate_python(original_url)
        except ValidationError as e:
            raise InvalidUrlError() from e

    def _validate_validity(self, validity_minutes) -> int:
        if validity_minutes is None:
            return self.default_validity_minutes
        # bool is an int subclass
        if isinstance(validity_minutes, bool) or not isinstance(validity_minutes, (int, float)):
            raise InvalidValidityError()
        if isinstance(validity_minutes, float):
            if not math.isfinite(validity_minutes) or not validity_minutes.is_integer():
                raise InvalidValidityError()
            validity_minutes = int(validity_minutes)
        if validity_minutes <= 0:
            raise InvalidValidityError()
        # Expiry must fit in a datetime (year 9999)
        try:
            self.clock() + timedelta(minutes=validity_minutes)
        except OverflowError as e:
            raise InvalidValidityError() from e
        return validity_minutes

    def _is_expired(self, record: ShortUrl, now: datetime) -> bool:
        # Strictly after: a record is still usable at exactly expires_at
        return now > record.expires_at

    async def create(
        self,
        original_url: str,
        validity_minutes: Optional[float] = None,
        custom_shortcode: Optional[str] = None,
    ) -> Result[ShortUrl]:
        """
        Create a new short URL.
        
        Process:
        1. Validate URL, validity and custom shortcode (no store access)
        2. Pick a shortcode (custom one must be free, else generate)
        3. Insert; the unique constraint backs up the pre-check
        
        A generated code that loses an insert race is regenerated; a
        custom one that does is reported as a collision.
        """
        if custom_shortcode == "":
            custom_shortcode = None
        try:
            self._validate_url(original_url)
            validity = self._validate_validity(validity_minutes)
            if custom_shortcode is not None and not is_valid_shortcode(custom_shortcode):
                raise InvalidShortcodeError()
        except ShortUrlError as e:
            self.logger.warning("Rejected short URL request: %s", e.error)
            return Result.failure(e)

        attempts = 1 if custom_shortcode is not None else self.generator.max_retries
        for _ in range(attempts):
            try:
                shortcode = self.generator.ensure_unique(custom_shortcode)
                now = self.clock()
                record = self.store.insert(ShortUrl(
                    original_url=original_url,
                    shortcode=shortcode,
                    created_at=now,
                    validity=validity,
                    expires_at=now + timedelta(minutes=validity),
                    is_active=True,
                ))
            except ConflictError:
                if custom_shortcode is not None:
                    self.logger.warning("Shortcode collision on insert: %s", custom_shortcode)
                    return Result.failure(ShortcodeCollisionError())
                self.logger.warning("Generated shortcode taken on insert, retrying")
                continue
            except ShortcodeCollisionError as e:
                self.logger.warning("Shortcode collision: %s", custom_shortcode)
                return Result.failure(e)
            except StoreError as e:
                self.logger.error("Error creating short URL for %s: %s", original_url, e)
                return Result.failure(e)

            self.logger.info(
                "Short URL created: %s -> %s (expires %s)",
                record.shortcode,
                record.original_url,
                record.expires_at.isoformat(),
            )
            return Result.success(record)

        error = ShortcodeExhaustedError("Every generated shortcode lost its insert race")
        self.logger.error("Error creating short URL for %s: %s", original_url, error)
        return Result.failure(error)

    async def resolve(self, shortcode: str) -> Result[ShortUrl]:
        """
        Look up a usable record for redirecting.
        
        Expired-but-active records are deactivated on the spot (lazy
        expiry) and reported as not found.
        """
        if not is_valid_shortcode(shortcode):
            return Result.failure(InvalidShortcodeError())
        try:
            record = self.store.find_by_shortcode(shortcode)
            if record is None or not record.is_active:
                return Result.failure(NotFoundError())
            if self._is_expired(record, self.clock()):
                self.store.deactivate(record.id)
                self.logger.info("Short URL expired, deactivated: %s", shortcode)
                return Result.failure(NotFoundError())
        except StoreError as e:
            self.logger.error("Error resolving shortcode %s: %s", shortcode, e)
            return Result.failure(e)

        return Result.success(record)

    async def list_all(self) -> Result[List[ShortUrl]]:
        """
        Active, unexpired records, newest first.
        
        Active records found past their expiry are deactivated in one batch
        and left out. Best effort only: list and sweep are separate store
        calls.
        """
        try:
            records = self.store.list_active()
            now = self.clock()
            expired_ids = [record.id for record in records if record.expires_at <= now]
            fresh = [record for record in records if record.expires_at > now]
            if expired_ids:
                self.store.deactivate_many(expired_ids)
                self.logger.info("Deactivated %d expired short URLs", len(expired_ids))
        except StoreError as e:
            self.logger.error("Error listing short URLs: %s", e)
            return Result.failure(e)

        return Result.success(fresh)

    async def stats(self, shortcode: str, base_url: str) -> Result[ShortUrlStats]:
        """Statistics for a short URL: record details plus its click log."""
        if not is_valid_shortcode(shortcode):
            return Result.failure(InvalidShortcodeError())
        try:
            record = self.store.find_by_shortcode(shortcode)
            if record is None or not record.is_active:
                return Result.failure(NotFoundError())
            if self._is_expired(record, self.clock()):
                if self.deactivate_expired_on_stats:
                    self.store.deactivate(record.id)
                    self.logger.info("Short URL expired, deactivated: %s", shortcode)
                return Result.failure(NotFoundError())

            clicks = [ClickResponse.model_validate(click) for click in record.clicks]
        except StoreError as e:
            self.logger.error("Error getting statistics for %s: %s", shortcode, e)
            return Result.failure(e)

        return Result.success(ShortUrlStats(
            shortcode=record.shortcode,
            original_url=record.original_url,
            short_link=build_short_link(base_url, record.shortcode),
            created_at=record.created_at,
            expires_at=record.expires_at,
            total_clicks=len(clicks),
            clicks=clicks,
        ))

    async def record_click(self, shortcode: str, click: ClickData) -> Result[Optional[Click]]:
        """Append a click to the record's log; unknown shortcodes are a no-op."""
        try:
            record = self.store.find_by_shortcode(shortcode)
            if record is None:
                self.logger.debug("Click for unknown shortcode dropped: %s", shortcode)
                return Result.success(None)
            row = self.store.append_click(record.id, click, timestamp=self.clock())
        except StoreError as e:
            self.logger.error("Error recording click for %s: %s", shortcode, e)
            return Result.failure(e)

        self.logger.info("Click recorded: %s", shortcode)
        return Result.success(row)

    async def is_healthy(self) -> bool:
        return self.store.ping()
