"""Feed domain vocabulary shared by the remote and local loaders."""

from feedcache.feed.loader import FeedLoader, LoadCompletion
from feedcache.feed.models import FeedItem

__all__ = ["FeedItem", "FeedLoader", "LoadCompletion"]
