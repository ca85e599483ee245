"""Persistence contract for the feed cache.

A store holds at most one cached feed generation. Every operation is
asynchronous: it reports through a completion callback that is invoked
exactly once and may run on any thread. Clients are responsible for
dispatching to another thread if they need to.

Operations issued against the same store instance complete in the order
they were issued.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

from feedcache.feed.models import FeedItem
from feedcache.result import Result


class CacheError(Exception):
    """Base exception for cache-related errors."""

    pass


class StoreError(CacheError):
    """Raised when the store medium cannot be read or written."""

    pass


class StoreCorruptedError(StoreError):
    """Raised when a persisted feed cannot be decoded."""

    pass


class StoreLockError(StoreError):
    """Raised when unable to acquire the store lock."""

    pass


@dataclass(frozen=True)
class LocalFeedImage:
    """Cache-side representation of a feed item."""

    id: uuid.UUID
    description: Optional[str]
    location: Optional[str]
    url: str

    @classmethod
    def from_item(cls, item: FeedItem) -> "LocalFeedImage":
        return cls(
            id=item.id,
            description=item.description,
            location=item.location,
            url=item.image_url,
        )

    def to_item(self) -> FeedItem:
        return FeedItem(
            id=self.id,
            description=self.description,
            location=self.location,
            image_url=self.url,
        )


@dataclass(frozen=True)
class CachedFeed:
    """The single feed generation a store holds.

    Attributes:
        feed: Images in the order they were inserted
        timestamp: When the feed was saved
    """

    feed: Tuple[LocalFeedImage, ...]
    timestamp: datetime

    def __post_init__(self):
        # Accept any sequence but keep the value immutable
        object.__setattr__(self, "feed", tuple(self.feed))


RetrievalCompletion = Callable[[Result], None]
DeletionCompletion = Callable[[Result], None]
InsertionCompletion = Callable[[Result], None]


class FeedStore(ABC):
    """Abstract feed store.

    Retrieval delivers ``Success(None)`` for an empty store,
    ``Success(CachedFeed)`` when a feed is cached and ``Failure(StoreError)``
    when the medium fails. Deletion and insertion deliver ``Success(None)``
    or ``Failure(StoreError)``.
    """

    @abstractmethod
    def retrieve(self, completion: RetrievalCompletion) -> None:
        """Retrieve the cached feed, if any."""
        pass

    @abstractmethod
    def delete_cached_feed(self, completion: DeletionCompletion) -> None:
        """Delete the cached feed. Succeeds when the store is already empty."""
        pass

    @abstractmethod
    def insert(
        self,
        feed: Sequence[LocalFeedImage],
        timestamp: datetime,
        completion: InsertionCompletion,
    ) -> None:
        """Replace any cached feed with ``feed`` saved at ``timestamp``."""
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
