"""Remote feed loader."""

import logging
import weakref

from feedcache.api.client import HTTPClient
from feedcache.api.mapper import ConnectivityError, InvalidDataError, map_feed_items
from feedcache.feed.loader import FeedLoader, LoadCompletion
from feedcache.result import Failure, Result, Success

logger = logging.getLogger(__name__)


class RemoteFeedLoader(FeedLoader):
    """Loads feed items from an HTTP endpoint.

    Delivers ``Success(list[FeedItem])``, ``Failure(ConnectivityError)`` when
    the client fails or ``Failure(InvalidDataError)`` for a non-200 status or
    malformed body. Results are dropped once the loader has been released.
    """

    def __init__(self, url: str, client: HTTPClient):
        self.url = url
        self.client = client

    def load(self, completion: LoadCompletion) -> None:
        loader_ref = weakref.ref(self)

        def on_response(result: Result) -> None:
            if loader_ref() is None:
                logger.debug("Remote loader released before response arrived")
                return

            if isinstance(result, Failure):
                error = ConnectivityError(f"Cannot reach feed endpoint: {result.error}")
                error.__cause__ = result.error
                completion(Failure(error))
                return

            try:
                items = map_feed_items(result.value.content, result.value.status_code)
            except InvalidDataError as e:
                completion(Failure(e))
                return

            completion(Success(items))

        self.client.get(self.url, on_response)
