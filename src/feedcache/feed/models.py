"""Feed item model."""

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FeedItem:
    """A single image entry in the feed.

    Attributes:
        id: Stable unique identifier
        description: Optional caption
        location: Optional place name
        image_url: Absolute URL of the image
    """

    id: uuid.UUID
    description: Optional[str]
    location: Optional[str]
    image_url: str
