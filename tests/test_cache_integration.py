"""Integration tests: LocalFeedLoader against real stores.

Each test uses separate loader and store instances sharing one location,
the way separate screens or app launches would.
"""

from datetime import datetime, timedelta

import pytest
from helpers import Clock, drain, insert, retrieve, unique_image_feed, wait_for

from feedcache.cache.loader import LocalFeedLoader
from feedcache.result import Success
from feedcache.stores import JsonFeedStore, SQLiteFeedStore


@pytest.fixture(params=["json", "sqlite"])
def make_store(request, tmp_path):
    """Factory for stores sharing one file."""
    stores = []

    def make():
        if request.param == "json":
            store = JsonFeedStore(tmp_path / "feed.json")
        else:
            store = SQLiteFeedStore(tmp_path / "feed.sqlite")
        stores.append(store)
        return store

    yield make
    for store in stores:
        store.close()


def save(loader, feed):
    return wait_for(lambda completion: loader.save(feed, completion))


class TestCacheIntegration:
    """Test load, save and validate across instances."""

    def test_load_delivers_no_items_on_empty_cache(self, make_store):
        sut = LocalFeedLoader(make_store())

        assert wait_for(sut.load) == Success([])

    def test_load_delivers_items_saved_on_a_separate_instance(self, make_store):
        sut_to_perform_save = LocalFeedLoader(make_store())
        sut_to_perform_load = LocalFeedLoader(make_store())
        feed, _ = unique_image_feed()

        assert save(sut_to_perform_save, feed) is None

        assert wait_for(sut_to_perform_load.load) == Success(feed)

    def test_save_overrides_items_saved_on_a_separate_instance(self, make_store):
        sut_to_perform_first_save = LocalFeedLoader(make_store())
        sut_to_perform_last_save = LocalFeedLoader(make_store())
        sut_to_perform_load = LocalFeedLoader(make_store())
        first_feed, _ = unique_image_feed()
        latest_feed, _ = unique_image_feed()

        assert save(sut_to_perform_first_save, first_feed) is None
        assert save(sut_to_perform_last_save, latest_feed) is None

        assert wait_for(sut_to_perform_load.load) == Success(latest_feed)

    def test_load_twice_has_no_side_effects(self, make_store):
        store = make_store()
        sut = LocalFeedLoader(store)
        feed, _ = unique_image_feed()
        save(sut, feed)
        before = retrieve(store)

        assert wait_for(sut.load) == wait_for(sut.load) == Success(feed)
        assert retrieve(store) == before

    def test_load_keeps_expired_cache_but_delivers_no_items(self, make_store):
        store = make_store()
        _, local = unique_image_feed()
        insert(store, local, datetime.now() - timedelta(days=8))
        sut = LocalFeedLoader(store)

        assert wait_for(sut.load) == Success([])
        assert retrieve(store).value is not None

    def test_validate_cache_deletes_expired_cache(self, make_store):
        store = make_store()
        now = datetime(2024, 1, 15, 10, 30, 0)
        _, local = unique_image_feed()
        insert(store, local, now - timedelta(days=7))
        sut = LocalFeedLoader(store, current_date=Clock(now))

        sut.validate_cache()
        drain(store)

        assert retrieve(store) == Success(None)

    def test_validate_cache_keeps_valid_cache(self, make_store):
        store = make_store()
        now = datetime(2024, 1, 15, 10, 30, 0)
        _, local = unique_image_feed()
        insert(store, local, now - timedelta(days=6))
        sut = LocalFeedLoader(store, current_date=Clock(now))

        sut.validate_cache()
        drain(store)

        assert retrieve(store).value.feed == tuple(local)

    def test_validate_cache_deletes_unreadable_json_cache(self, tmp_path):
        store_path = tmp_path / "feed.json"
        store_path.write_text("invalid data")
        store = JsonFeedStore(store_path)
        sut = LocalFeedLoader(store)

        try:
            sut.validate_cache()
            drain(store)

            assert retrieve(store) == Success(None)
            assert not store_path.exists()
        finally:
            store.close()
