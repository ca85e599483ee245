"""Remote feed API: HTTP client boundary, payload mapper and loader."""

from feedcache.api.client import HTTPClient, HTTPResponse, HttpxClient
from feedcache.api.mapper import (
    ConnectivityError,
    InvalidDataError,
    RemoteFeedError,
    map_feed_items,
)
from feedcache.api.remote import RemoteFeedLoader

__all__ = [
    "ConnectivityError",
    "HTTPClient",
    "HTTPResponse",
    "HttpxClient",
    "InvalidDataError",
    "RemoteFeedError",
    "RemoteFeedLoader",
    "map_feed_items",
]
