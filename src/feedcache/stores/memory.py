"""In-memory feed store."""

from datetime import datetime
from typing import Optional, Sequence

from feedcache.cache.store import (
    CachedFeed,
    DeletionCompletion,
    FeedStore,
    InsertionCompletion,
    LocalFeedImage,
    RetrievalCompletion,
)
from feedcache.result import Success
from feedcache.stores.queue import SerialQueue


class InMemoryFeedStore(FeedStore):
    """Feed store that keeps the cached feed in process memory.

    Nothing survives the process; useful for tests and for running without
    a writable cache directory.
    """

    def __init__(self):
        self._cache: Optional[CachedFeed] = None
        self._queue = SerialQueue("feedcache-memory")

    def retrieve(self, completion: RetrievalCompletion) -> None:
        self._queue.deliver(lambda: Success(self._cache), completion)

    def delete_cached_feed(self, completion: DeletionCompletion) -> None:
        def delete():
            self._cache = None
            return Success()

        self._queue.deliver(delete, completion)

    def insert(
        self,
        feed: Sequence[LocalFeedImage],
        timestamp: datetime,
        completion: InsertionCompletion,
    ) -> None:
        cache = CachedFeed(feed=tuple(feed), timestamp=timestamp)

        def insert():
            self._cache = cache
            return Success()

        self._queue.deliver(insert, completion)

    def close(self) -> None:
        self._queue.close()
