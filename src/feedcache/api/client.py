"""HTTP client boundary used by the remote feed loader."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from feedcache.result import Failure, Result, Success

logger = logging.getLogger(__name__)

GetCompletion = Callable[[Result], None]


@dataclass(frozen=True)
class HTTPResponse:
    """Status code and raw body of a completed request."""

    status_code: int
    content: bytes


class HTTPClient(ABC):
    """Performs GET requests.

    Completions receive ``Success(HTTPResponse)`` for any response the server
    sent, whatever its status, and ``Failure(error)`` when no response was
    received. They may be invoked on any thread.
    """

    @abstractmethod
    def get(self, url: str, completion: GetCompletion) -> None:
        pass


class HttpxClient(HTTPClient):
    """HTTP client running httpx requests on background threads."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        max_workers: int = 4,
    ):
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (e.g. httpx.MockTransport)
            max_workers: Maximum number of concurrent requests
        """
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="feedcache-http"
        )

    def get(self, url: str, completion: GetCompletion) -> None:
        self._executor.submit(lambda: completion(self._get(url)))

    def _get(self, url: str) -> Result:
        try:
            r = self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"GET {url} failed: {e}")
            return Failure(e)

        logger.debug(f"GET {url} -> {r.status_code}")
        return Success(HTTPResponse(status_code=r.status_code, content=r.content))

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
