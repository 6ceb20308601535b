"""
Tests for the SQLAlchemy store.
"""
from datetime import datetime, timedelta, timezone

import pytest

from shortlink_app.errors import ConflictError
from shortlink_app.models import ShortUrl
from shortlink_app.schemas.url import ClickData

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_record(shortcode, created_at=NOW, minutes=30):
    return ShortUrl(
        original_url=f"https://example.com/{shortcode}",
        shortcode=shortcode,
        created_at=created_at,
        validity=minutes,
        expires_at=created_at + timedelta(minutes=minutes),
        is_active=True,
    )


class TestSQLAlchemyStore:

    def test_insert_and_find(self, store):
        record = store.insert(make_record("abc123"))

        found = store.find_by_shortcode("abc123")
        assert found is not None
        assert found.id == record.id
        assert found.is_active is True
        assert found.clicks == []
        # Timestamps come back timezone-aware
        assert found.expires_at == NOW + timedelta(minutes=30)

    def test_find_unknown(self, store):
        assert store.find_by_shortcode("nope42") is None

    def test_exists(self, store):
        store.insert(make_record("abc123"))
        assert store.exists("abc123") is True
        assert store.exists("xyz789") is False

    def test_insert_duplicate_shortcode_conflicts(self, store):
        store.insert(make_record("abc123"))
        with pytest.raises(ConflictError):
            store.insert(make_record("abc123"))
        # Session still usable after the rollback
        assert store.exists("abc123") is True

    def test_deactivate_is_idempotent(self, store):
        record = store.insert(make_record("abc123"))

        store.deactivate(record.id)
        store.deactivate(record.id)

        assert store.find_by_shortcode("abc123").is_active is False

    def test_deactivate_many(self, store):
        first = store.insert(make_record("first1"))
        second = store.insert(make_record("second"))
        store.insert(make_record("third3"))

        store.deactivate_many([first.id, second.id])
        store.deactivate_many([])

        assert [r.shortcode for r in store.list_active()] == ["third3"]

    def test_list_active_newest_first(self, store):
        store.insert(make_record("older1", created_at=NOW))
        store.insert(make_record("newer1", created_at=NOW + timedelta(minutes=1)))

        assert [r.shortcode for r in store.list_active()] == ["newer1", "older1"]

    def test_append_click(self, store):
        record = store.insert(make_record("abc123"))

        click = store.append_click(record.id, ClickData(referrer="https://ref.example", ip="10.0.0.1"))

        assert click is not None
        assert click.short_url_id == record.id
        assert click.location == "Unknown"
        assert click.timestamp.tzinfo is not None

    def test_append_click_unknown_record(self, store):
        assert store.append_click("missing-id", ClickData()) is None

    def test_clicks_newest_first(self, store):
        record = store.insert(make_record("abc123"))
        first = store.append_click(record.id, ClickData(user_agent="first"))
        second = store.append_click(record.id, ClickData(user_agent="second"))

        clicks = store.find_by_shortcode("abc123").clicks
        assert [c.id for c in clicks] == [second.id, first.id]

    def test_ping(self, store):
        assert store.ping() is True
