"""JSON file feed store.

The cached feed is kept in a single JSON document:

    {
      "feed": [
        {"id": "...", "description": "...", "location": "...", "url": "..."}
      ],
      "timestamp": "2024-01-15T10:30:00"
    }

Writes go to a temporary file that atomically replaces the store file, so a
failed insert never leaves a partial document behind. A file lock guards the
store against other processes sharing it.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import orjson
from filelock import FileLock, Timeout

from feedcache.cache.store import (
    CachedFeed,
    DeletionCompletion,
    FeedStore,
    InsertionCompletion,
    LocalFeedImage,
    RetrievalCompletion,
    StoreCorruptedError,
    StoreError,
    StoreLockError,
)
from feedcache.result import Failure, Result, Success
from feedcache.stores.queue import SerialQueue

logger = logging.getLogger(__name__)


def encode_cache(feed: Sequence[LocalFeedImage], timestamp: datetime) -> bytes:
    """Serialize a feed and its timestamp to JSON bytes."""
    data = {
        "feed": [
            {
                "id": str(image.id),
                "description": image.description,
                "location": image.location,
                "url": image.url,
            }
            for image in feed
        ],
        "timestamp": timestamp.isoformat(),
    }
    return orjson.dumps(data, option=orjson.OPT_INDENT_2)


def decode_cache(content: bytes) -> CachedFeed:
    """Deserialize JSON bytes written by ``encode_cache``.

    Raises:
        StoreCorruptedError: If the document is not a valid cached feed
    """
    try:
        data: Dict[str, Any] = orjson.loads(content)
        feed = [
            LocalFeedImage(
                id=uuid.UUID(image["id"]),
                description=image.get("description"),
                location=image.get("location"),
                url=image["url"],
            )
            for image in data["feed"]
        ]
        timestamp = datetime.fromisoformat(data["timestamp"])
    except (
        orjson.JSONDecodeError,
        KeyError,
        TypeError,
        ValueError,
        AttributeError,
    ) as e:
        raise StoreCorruptedError(f"Invalid cached feed document: {e}") from e

    return CachedFeed(feed=tuple(feed), timestamp=timestamp)


class JsonFeedStore(FeedStore):
    """Feed store backed by a JSON file.

    Examples:
        >>> store = JsonFeedStore(Path.home() / ".feedcache" / "feed.json")
        >>> store.retrieve(lambda result: print(result))
    """

    def __init__(self, store_path: Union[str, Path], lock_timeout: float = 30):
        """Initialize JSON feed store.

        Args:
            store_path: File holding the cached feed (created on first insert)
            lock_timeout: Seconds to wait for the file lock
        """
        self.store_path = Path(store_path).expanduser()
        self.lock_path = self.store_path.with_name(self.store_path.name + ".lock")
        self.lock_timeout = lock_timeout
        self._queue = SerialQueue("feedcache-json")

    def retrieve(self, completion: RetrievalCompletion) -> None:
        self._queue.deliver(self._retrieve, completion)

    def delete_cached_feed(self, completion: DeletionCompletion) -> None:
        self._queue.deliver(self._delete, completion)

    def insert(
        self,
        feed: Sequence[LocalFeedImage],
        timestamp: datetime,
        completion: InsertionCompletion,
    ) -> None:
        feed = tuple(feed)
        self._queue.deliver(lambda: self._insert(feed, timestamp), completion)

    def close(self) -> None:
        self._queue.close()

    def _lock(self) -> FileLock:
        return FileLock(self.lock_path, timeout=self.lock_timeout)

    def _retrieve(self) -> Result:
        if not self.store_path.parent.exists():
            return Success(None)

        try:
            with self._lock():
                cache = self._read_locked()
        except Timeout as e:
            return Failure(self._lock_error(e))
        except StoreError as e:
            logger.error(f"Cannot read feed cache at {self.store_path}: {e}")
            return Failure(e)
        except OSError as e:
            logger.error(f"Cannot lock feed cache at {self.store_path}: {e}")
            return Failure(StoreError(f"Cannot lock cache file: {e}"))

        return Success(cache)

    def _read_locked(self) -> Optional[CachedFeed]:
        """Read the store file with the lock already acquired."""
        try:
            content = self.store_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Cannot read cache file: {e}") from e

        return decode_cache(content)

    def _delete(self) -> Result:
        if not self.store_path.parent.exists():
            return Success()

        try:
            with self._lock():
                if self.store_path.exists():
                    self.store_path.unlink()
        except Timeout as e:
            return Failure(self._lock_error(e))
        except OSError as e:
            logger.error(f"Cannot delete feed cache at {self.store_path}: {e}")
            return Failure(StoreError(f"Cannot delete cache file: {e}"))

        return Success()

    def _insert(self, feed: Sequence[LocalFeedImage], timestamp: datetime) -> Result:
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create feed cache directory: {e}")
            return Failure(StoreError(f"Cannot create cache directory: {e}"))

        try:
            with self._lock():
                self._write_locked(encode_cache(feed, timestamp))
        except Timeout as e:
            return Failure(self._lock_error(e))
        except StoreError as e:
            return Failure(e)
        except OSError as e:
            logger.error(f"Cannot lock feed cache at {self.store_path}: {e}")
            return Failure(StoreError(f"Cannot lock cache file: {e}"))

        logger.debug(f"Cached {len(feed)} feed images at {self.store_path}")
        return Success()

    def _write_locked(self, content: bytes) -> None:
        """Write the store file atomically with the lock already acquired."""
        temp_path = self.store_path.with_name(self.store_path.name + ".tmp")

        try:
            temp_path.write_bytes(content)
            temp_path.replace(self.store_path)
        except OSError as e:
            logger.error(f"Cannot write feed cache at {self.store_path}: {e}")
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError as cleanup_error:
                    logger.warning(
                        f"Failed to clean up temp file {temp_path}: {cleanup_error}"
                    )
            raise StoreError(f"Cannot write cache file: {e}") from e

    def _lock_error(self, error: Timeout) -> StoreLockError:
        lock_error = StoreLockError(
            f"Timeout acquiring lock for {self.store_path} "
            f"after {self.lock_timeout} seconds"
        )
        lock_error.__cause__ = error
        return lock_error
