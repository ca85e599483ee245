"""Maps remote feed responses to feed items."""

import uuid
from typing import List

import orjson

from feedcache.feed.models import FeedItem

OK_200 = 200


class RemoteFeedError(Exception):
    """Base exception for remote feed errors."""

    pass


class ConnectivityError(RemoteFeedError):
    """Raised when the feed endpoint cannot be reached."""

    pass


class InvalidDataError(RemoteFeedError):
    """Raised when the feed endpoint answers with unusable data."""

    pass


def map_feed_items(content: bytes, status_code: int) -> List[FeedItem]:
    """Decode a feed response body.

    The body must be ``{"items": [{"id", "description", "location", "image"}]}``
    and the status 200.

    Args:
        content: Raw response body
        status_code: HTTP status code

    Returns:
        Feed items in response order

    Raises:
        InvalidDataError: If the status is not 200 or the body is malformed
    """
    if status_code != OK_200:
        raise InvalidDataError(f"Unexpected status code {status_code}")

    try:
        root = orjson.loads(content)
        return [
            FeedItem(
                id=uuid.UUID(item["id"]),
                description=item.get("description"),
                location=item.get("location"),
                image_url=item["image"],
            )
            for item in root["items"]
        ]
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise InvalidDataError(f"Malformed feed payload: {e}") from e
