"""Local feed loader: load, save and validate the cached feed."""

import logging
import weakref
from datetime import datetime
from typing import Callable, Optional, Sequence

from feedcache.cache import policy
from feedcache.cache.store import CacheError, CachedFeed, FeedStore, LocalFeedImage
from feedcache.feed.loader import FeedLoader, LoadCompletion
from feedcache.feed.models import FeedItem
from feedcache.result import Failure, Result, Success

logger = logging.getLogger(__name__)

SaveCompletion = Callable[[Optional[Exception]], None]


class RetrievalError(CacheError):
    """Raised when the cached feed cannot be retrieved from the store."""

    def __init__(self, store_error: Exception):
        super().__init__(f"Cannot retrieve cached feed: {store_error}")
        self.store_error = store_error
        self.__cause__ = store_error


class LocalFeedLoader(FeedLoader):
    """Serves feed items from a store and keeps it within its maximum age.

    The loader holds no state besides the store and the clock. Each use case
    issues its store calls and reacts to their completions; completions only
    hold a weak reference to the loader, so results are dropped once the
    loader has been released.

    Examples:
        >>> loader = LocalFeedLoader(store, current_date=datetime.now)
        >>> loader.save(items, lambda error: print(error))
        >>> loader.load(lambda result: print(result))
    """

    def __init__(
        self,
        store: FeedStore,
        current_date: Callable[[], datetime] = datetime.now,
    ):
        """Initialize local feed loader.

        Args:
            store: Store holding the cached feed
            current_date: Clock used for timestamps and validation
        """
        self.store = store
        self.current_date = current_date

    def load(self, completion: LoadCompletion) -> None:
        """Load cached items.

        Delivers ``Success([])`` for an empty or expired cache and
        ``Failure(RetrievalError)`` when the store fails. Never modifies
        the store.
        """
        loader_ref = weakref.ref(self)

        def on_retrieve(result: Result) -> None:
            loader = loader_ref()
            if loader is None:
                logger.debug("Loader released before retrieval completed")
                return

            if isinstance(result, Failure):
                completion(Failure(RetrievalError(result.error)))
            elif result.value is not None and loader._is_valid(result.value):
                completion(Success([image.to_item() for image in result.value.feed]))
            else:
                completion(Success([]))

        self.store.retrieve(on_retrieve)

    def save(self, feed: Sequence[FeedItem], completion: SaveCompletion) -> None:
        """Replace the cached feed with ``feed``.

        Deletes the current cache first and inserts only if that succeeds.
        The timestamp is read from the clock once deletion has completed.
        ``completion`` receives the failing store error, or None.
        """
        loader_ref = weakref.ref(self)
        local_feed = [LocalFeedImage.from_item(item) for item in feed]

        def on_delete(result: Result) -> None:
            loader = loader_ref()
            if loader is None:
                logger.debug("Loader released before deletion completed")
                return

            if isinstance(result, Failure):
                completion(result.error)
            else:
                loader._cache(local_feed, completion)

        self.store.delete_cached_feed(on_delete)

    def _cache(self, feed: Sequence[LocalFeedImage], completion: SaveCompletion) -> None:
        loader_ref = weakref.ref(self)

        def on_insert(result: Result) -> None:
            if loader_ref() is None:
                logger.debug("Loader released before insertion completed")
                return

            completion(result.error if isinstance(result, Failure) else None)

        self.store.insert(feed, self.current_date(), on_insert)

    def validate_cache(self) -> None:
        """Delete the cached feed if it is expired or cannot be retrieved."""
        loader_ref = weakref.ref(self)

        def on_retrieve(result: Result) -> None:
            loader = loader_ref()
            if loader is None:
                return

            if isinstance(result, Failure):
                logger.warning(f"Deleting unreadable feed cache: {result.error}")
                loader.store.delete_cached_feed(_log_deletion)
            elif result.value is not None and not loader._is_valid(result.value):
                logger.debug(f"Deleting feed cache saved at {result.value.timestamp}")
                loader.store.delete_cached_feed(_log_deletion)

        self.store.retrieve(on_retrieve)

    def _is_valid(self, cache: CachedFeed) -> bool:
        return policy.validate(cache.timestamp, against=self.current_date())


def _log_deletion(result: Result) -> None:
    if isinstance(result, Failure):
        logger.warning(f"Failed to delete feed cache: {result.error}")
