"""Feed loader interface."""

from abc import ABC, abstractmethod
from typing import Callable

from feedcache.result import Result

LoadCompletion = Callable[[Result], None]


class FeedLoader(ABC):
    """Anything that can deliver a list of feed items.

    Completions receive ``Success(list[FeedItem])`` or ``Failure(error)``
    exactly once and may be invoked on any thread.
    """

    @abstractmethod
    def load(self, completion: LoadCompletion) -> None:
        """Load feed items and deliver them to ``completion``."""
        pass
