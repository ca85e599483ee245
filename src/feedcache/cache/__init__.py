"""Local feed cache.

This module keeps the most recently fetched feed on the device so it can be
shown without a network round-trip, and expires it after a fixed age.

Key components:
- FeedStore: Persistence contract implemented by the stores package
- LocalFeedLoader: Load, save and validate use cases
- policy: Calendar-day validity rule
- CacheConfig: Configuration management
"""

from feedcache.cache.config import CacheConfig
from feedcache.cache.loader import LocalFeedLoader, RetrievalError
from feedcache.cache.store import (
    CacheError,
    CachedFeed,
    FeedStore,
    LocalFeedImage,
    StoreCorruptedError,
    StoreError,
    StoreLockError,
)

__all__ = [
    "CacheConfig",
    "CacheError",
    "CachedFeed",
    "FeedStore",
    "LocalFeedImage",
    "LocalFeedLoader",
    "RetrievalError",
    "StoreCorruptedError",
    "StoreError",
    "StoreLockError",
]
