"""SQLite feed store built on SQLAlchemy.

One ``feed_cache`` row holds the timestamp; its images live in
``feed_images`` ordered by ``position`` and are removed with their cache row.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

from sqlalchemy import Column, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from feedcache.cache.store import (
    CachedFeed,
    DeletionCompletion,
    FeedStore,
    InsertionCompletion,
    LocalFeedImage,
    RetrievalCompletion,
    StoreCorruptedError,
    StoreError,
)
from feedcache.result import Failure, Result, Success
from feedcache.stores.queue import SerialQueue

logger = logging.getLogger(__name__)

Base = declarative_base()


class IsoDateTime(TypeDecorator):
    """Stores datetimes as ISO 8601 text so UTC offsets survive the round-trip."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return value.isoformat() if value is not None else None

    def process_result_value(self, value, dialect):
        return datetime.fromisoformat(value) if value is not None else None


class ManagedCache(Base):
    __tablename__ = "feed_cache"

    id = Column(Integer, primary_key=True)
    timestamp = Column(IsoDateTime, nullable=False)
    images = relationship(
        "ManagedFeedImage",
        order_by="ManagedFeedImage.position",
        cascade="all, delete-orphan",
    )

    @property
    def local(self) -> CachedFeed:
        return CachedFeed(
            feed=tuple(image.local for image in self.images),
            timestamp=self.timestamp,
        )


class ManagedFeedImage(Base):
    __tablename__ = "feed_images"

    id = Column(Integer, primary_key=True)
    cache_id = Column(
        Integer, ForeignKey("feed_cache.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False)
    image_id = Column(String(36), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    url = Column(Text, nullable=False)

    @property
    def local(self) -> LocalFeedImage:
        return LocalFeedImage(
            id=uuid.UUID(self.image_id),
            description=self.description,
            location=self.location,
            url=self.url,
        )


class SQLiteFeedStore(FeedStore):
    """Feed store backed by an SQLite database.

    Examples:
        >>> store = SQLiteFeedStore(Path.home() / ".feedcache" / "feed.sqlite")
        >>> in_memory = SQLiteFeedStore()  # private in-memory database
    """

    def __init__(self, store_path: Optional[Union[str, Path]] = None):
        """Initialize SQLite feed store.

        Args:
            store_path: Database file, or None for an in-memory database

        Raises:
            StoreError: If the database cannot be opened
        """
        self.store_path = Path(store_path).expanduser() if store_path else None

        try:
            if self.store_path is None:
                self.engine = create_engine(
                    "sqlite://",
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                self.store_path.parent.mkdir(parents=True, exist_ok=True)
                self.engine = create_engine(f"sqlite:///{self.store_path}")
            Base.metadata.create_all(self.engine)
        except (OSError, SQLAlchemyError) as e:
            raise StoreError(f"Cannot open feed store database: {e}") from e

        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._queue = SerialQueue("feedcache-sqlite")

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
        self.engine.dispose()

    def _retrieve(self) -> Result:
        try:
            with self.Session() as session:
                cache = session.query(ManagedCache).first()
                return Success(cache.local if cache is not None else None)
        except SQLAlchemyError as e:
            logger.error(f"Cannot read feed cache: {e}")
            return Failure(StoreError(f"Cannot read cached feed: {e}"))
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid feed cache row: {e}")
            return Failure(StoreCorruptedError(f"Invalid cached feed row: {e}"))

    def _delete(self) -> Result:
        try:
            with self.Session.begin() as session:
                for cache in session.query(ManagedCache).all():
                    session.delete(cache)
        except SQLAlchemyError as e:
            logger.error(f"Cannot delete feed cache: {e}")
            return Failure(StoreError(f"Cannot delete cached feed: {e}"))

        return Success()

    def _insert(self, feed: Sequence[LocalFeedImage], timestamp: datetime) -> Result:
        try:
            with self.Session.begin() as session:
                for cache in session.query(ManagedCache).all():
                    session.delete(cache)
                session.add(
                    ManagedCache(
                        timestamp=timestamp,
                        images=[
                            ManagedFeedImage(
                                position=position,
                                image_id=str(image.id),
                                description=image.description,
                                location=image.location,
                                url=image.url,
                            )
                            for position, image in enumerate(feed)
                        ],
                    )
                )
        except SQLAlchemyError as e:
            logger.error(f"Cannot insert feed cache: {e}")
            return Failure(StoreError(f"Cannot insert cached feed: {e}"))

        logger.debug(f"Cached {len(feed)} feed images in SQLite")
        return Success()
