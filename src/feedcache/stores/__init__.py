"""Feed store implementations.

Every store runs its operations on a private serial queue, so operations on
one store instance complete in the order they were issued.
"""

import logging
from typing import Optional

from feedcache.cache.config import CacheConfig, get_global_config
from feedcache.cache.store import FeedStore
from feedcache.stores.json_store import JsonFeedStore
from feedcache.stores.memory import InMemoryFeedStore
from feedcache.stores.queue import SerialQueue
from feedcache.stores.sqlite_store import SQLiteFeedStore

logger = logging.getLogger(__name__)


def create_store(config: Optional[CacheConfig] = None) -> FeedStore:
    """Create the store described by ``config``.

    Args:
        config: Cache configuration (uses global if None)

    Returns:
        A new FeedStore

    Raises:
        ValueError: If the store type is unknown
    """
    config = config or get_global_config()
    logger.debug(f"Creating {config.store_type} feed store at {config.store_path}")

    if config.store_type == "json":
        return JsonFeedStore(config.store_path, lock_timeout=config.lock_timeout)
    if config.store_type == "sqlite":
        return SQLiteFeedStore(config.store_path)
    if config.store_type == "memory":
        return InMemoryFeedStore()
    raise ValueError(f"Unknown store type: {config.store_type}")


__all__ = [
    "InMemoryFeedStore",
    "JsonFeedStore",
    "SQLiteFeedStore",
    "SerialQueue",
    "create_store",
]
