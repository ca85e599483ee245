"""Shared helpers for the feedcache test suite."""

import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Sequence, Tuple

import pytest

from feedcache.cache.policy import MAX_CACHE_AGE_DAYS
from feedcache.cache.store import CachedFeed, FeedStore, LocalFeedImage, StoreError
from feedcache.feed.models import FeedItem
from feedcache.result import Failure, Result, Success


def unique_image() -> FeedItem:
    return FeedItem(
        id=uuid.uuid4(),
        description="any",
        location="any",
        image_url="https://any-url.com/image.png",
    )


def unique_image_feed() -> Tuple[List[FeedItem], List[LocalFeedImage]]:
    """Two unique items, as models and as their cache representation."""
    models = [unique_image(), unique_image()]
    local = [LocalFeedImage.from_item(item) for item in models]
    return models, local


def any_error() -> StoreError:
    return StoreError("Test error (code 1)")


def minus_feed_cache_max_age(date: datetime) -> datetime:
    return date - timedelta(days=MAX_CACHE_AGE_DAYS)


class FeedStoreSpy(FeedStore):
    """Records store messages and lets tests complete them on demand."""

    def __init__(self):
        self.received_messages: List[tuple] = []
        self._deletion_completions: List[Callable[[Result], None]] = []
        self._insertion_completions: List[Callable[[Result], None]] = []
        self._retrieval_completions: List[Callable[[Result], None]] = []

    def delete_cached_feed(self, completion):
        self._deletion_completions.append(completion)
        self.received_messages.append(("delete",))

    def complete_deletion(self, error: Exception, index: int = 0):
        self._deletion_completions[index](Failure(error))

    def complete_deletion_successfully(self, index: int = 0):
        self._deletion_completions[index](Success())

    def insert(self, feed, timestamp, completion):
        self._insertion_completions.append(completion)
        self.received_messages.append(("insert", list(feed), timestamp))

    def complete_insertion(self, error: Exception, index: int = 0):
        self._insertion_completions[index](Failure(error))

    def complete_insertion_successfully(self, index: int = 0):
        self._insertion_completions[index](Success())

    def retrieve(self, completion):
        self._retrieval_completions.append(completion)
        self.received_messages.append(("retrieve",))

    def complete_retrieval(self, error: Exception, index: int = 0):
        self._retrieval_completions[index](Failure(error))

    def complete_retrieval_with_empty_cache(self, index: int = 0):
        self._retrieval_completions[index](Success(None))

    def complete_retrieval_with(
        self, feed: Sequence[LocalFeedImage], timestamp: datetime, index: int = 0
    ):
        self._retrieval_completions[index](
            Success(CachedFeed(feed=tuple(feed), timestamp=timestamp))
        )


class Clock:
    """Controllable clock for loaders under test."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def wait_for(operation: Callable[[Callable[[Any], None]], None], timeout: float = 5.0) -> Any:
    """Block until the completion passed to ``operation`` fires."""
    done = threading.Event()
    received = []

    def completion(result):
        received.append(result)
        done.set()

    operation(completion)
    if not done.wait(timeout):
        pytest.fail(f"Completion did not fire within {timeout} seconds")
    return received[0]


def retrieve(store: FeedStore) -> Result:
    return wait_for(store.retrieve)


def insert(store: FeedStore, feed, timestamp: datetime) -> Optional[Exception]:
    result = wait_for(lambda completion: store.insert(feed, timestamp, completion))
    return result.error if isinstance(result, Failure) else None


def delete(store: FeedStore) -> Optional[Exception]:
    result = wait_for(store.delete_cached_feed)
    return result.error if isinstance(result, Failure) else None


def drain(store: FeedStore) -> None:
    """Wait until work queued by earlier completions has run.

    A retrieval issued now completes after every operation already queued,
    including any that their completions enqueue before it runs.
    """
    retrieve(store)
    retrieve(store)
