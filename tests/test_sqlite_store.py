"""Tests for the SQLite feed store."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from helpers import insert, retrieve, unique_image_feed
from sqlalchemy import text

from feedcache.cache import policy
from feedcache.cache.store import CachedFeed, LocalFeedImage, StoreCorruptedError, StoreError
from feedcache.result import Failure, Success
from feedcache.stores import SQLiteFeedStore
from feedcache.stores.sqlite_store import ManagedCache, ManagedFeedImage


class TestSQLiteStore:
    """Test SQLite specific behaviour."""

    def test_in_memory_database_by_default(self):
        store = SQLiteFeedStore()
        try:
            assert store.store_path is None
            assert retrieve(store) == Success(None)
        finally:
            store.close()

    def test_retrieve_from_separate_instance(self, tmp_path):
        store_path = tmp_path / "feed.sqlite"
        _, feed = unique_image_feed()
        timestamp = datetime.now()

        first = SQLiteFeedStore(store_path)
        try:
            insert(first, feed, timestamp)
        finally:
            first.close()

        second = SQLiteFeedStore(store_path)
        try:
            result = retrieve(second)
        finally:
            second.close()

        assert result == Success(CachedFeed(feed=tuple(feed), timestamp=timestamp))

    def test_preserves_order_of_many_images(self):
        feed = [
            LocalFeedImage(
                id=uuid.uuid4(),
                description=f"image {i}",
                location=None,
                url=f"https://any-url.com/{i}.png",
            )
            for i in range(25)
        ]
        timestamp = datetime.now()

        store = SQLiteFeedStore()
        try:
            insert(store, list(reversed(feed)), timestamp)
            result = retrieve(store)
        finally:
            store.close()

        assert result.value.feed == tuple(reversed(feed))

    def test_insert_keeps_a_single_cache_row(self, tmp_path):
        store = SQLiteFeedStore(tmp_path / "feed.sqlite")
        try:
            insert(store, unique_image_feed()[1], datetime.now())
            insert(store, unique_image_feed()[1], datetime.now())

            with store.Session() as session:
                assert session.query(ManagedCache).count() == 1
                assert session.query(ManagedFeedImage).count() == 2
        finally:
            store.close()

    def test_open_fails_on_invalid_path(self, tmp_path):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")

        with pytest.raises(StoreError, match="Cannot open feed store database"):
            SQLiteFeedStore(blocker / "feed.sqlite")

    def test_preserves_timezone_offset(self, tmp_path):
        _, feed = unique_image_feed()
        timestamp = datetime(2024, 1, 15, 10, 30, tzinfo=timezone(timedelta(hours=-5)))
        store = SQLiteFeedStore(tmp_path / "feed.sqlite")
        try:
            insert(store, feed, timestamp)
            result = retrieve(store)
        finally:
            store.close()

        assert result.value.timestamp == timestamp
        assert result.value.timestamp.utcoffset() == timedelta(hours=-5)
        assert policy.expiration_date(result.value.timestamp) == timestamp + timedelta(days=7)


class TestSQLiteStoreCorruption:
    """Test rows that load but hold invalid values."""

    @pytest.mark.parametrize(
        "statement",
        [
            "UPDATE feed_images SET image_id = 'garbage'",
            "UPDATE feed_images SET image_id = '42'",
            "UPDATE feed_cache SET timestamp = 'yesterday'",
        ],
        ids=["malformed-image-id", "numeric-image-id", "malformed-timestamp"],
    )
    def test_retrieve_delivers_failure_on_invalid_row(self, tmp_path, statement):
        store = SQLiteFeedStore(tmp_path / "feed.sqlite")
        try:
            insert(store, unique_image_feed()[1], datetime.now())
            with store.engine.begin() as connection:
                connection.execute(text(statement))

            result = retrieve(store)
        finally:
            store.close()

        assert isinstance(result, Failure)
        assert isinstance(result.error, StoreCorruptedError)
