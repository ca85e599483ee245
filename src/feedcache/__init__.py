"""feedcache: Offline-first caching of remote feed items."""

__version__ = "0.1.0"

from feedcache.cache.loader import LocalFeedLoader
from feedcache.feed.models import FeedItem

__all__ = ["FeedItem", "LocalFeedLoader", "__version__"]
