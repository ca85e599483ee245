"""Cache configuration management."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CACHE_DIR = Path.home() / ".feedcache"

STORE_FILENAMES = {
    "json": "feed.json",
    "sqlite": "feed.sqlite",
    "memory": None,
}


@dataclass
class CacheConfig:
    """Configuration for the local feed cache.

    Attributes:
        cache_dir: Directory holding the store file (~/.feedcache by default)
        store_type: Store engine ('json', 'sqlite' or 'memory')
        store_filename: Store file name inside cache_dir. Defaults to
            feed.json or feed.sqlite depending on store_type.
        lock_timeout: Seconds to wait for the store file lock
        feed_url: Remote feed endpoint used by ``feedcache fetch``
        request_timeout: HTTP timeout in seconds for remote loads
    """

    cache_dir: Path = DEFAULT_CACHE_DIR
    store_type: str = "json"
    store_filename: Optional[str] = None
    lock_timeout: float = 30
    feed_url: Optional[str] = None
    request_timeout: float = 10.0

    def __post_init__(self):
        """Ensure cache_dir is a Path object and store_type is known."""
        if self.cache_dir is None:
            self.cache_dir = DEFAULT_CACHE_DIR
        self.cache_dir = Path(self.cache_dir).expanduser()

        if self.store_type not in STORE_FILENAMES:
            raise ValueError(
                f"Unknown store type: {self.store_type} "
                f"(expected one of {', '.join(STORE_FILENAMES)})"
            )

    @property
    def store_path(self) -> Optional[Path]:
        """Path of the store file, or None for the in-memory store."""
        filename = self.store_filename or STORE_FILENAMES[self.store_type]
        if filename is None:
            return None
        return self.cache_dir / filename

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "CacheConfig":
        """Load configuration from file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            CacheConfig instance
        """
        if config_path is None:
            config_path = DEFAULT_CACHE_DIR / "config.json"

        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = json.load(f)

        if "cache_dir" in data:
            data["cache_dir"] = Path(data["cache_dir"])

        return cls(**data)

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file.

        Args:
            config_path: Path to config file. If None, uses default location.
        """
        if config_path is None:
            config_path = self.cache_dir / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "cache_dir": str(self.cache_dir),
            "store_type": self.store_type,
            "store_filename": self.store_filename,
            "lock_timeout": self.lock_timeout,
            "feed_url": self.feed_url,
            "request_timeout": self.request_timeout,
        }

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Create configuration from environment variables.

        Environment variables:
            FEEDCACHE_DIR: Cache directory path
            FEEDCACHE_STORE: Store engine ('json', 'sqlite', 'memory')
            FEEDCACHE_FEED_URL: Remote feed endpoint
            FEEDCACHE_LOCK_TIMEOUT: Store lock timeout in seconds
            FEEDCACHE_REQUEST_TIMEOUT: HTTP timeout in seconds

        Returns:
            CacheConfig instance
        """
        config = cls()

        if os.getenv("FEEDCACHE_DIR"):
            config.cache_dir = Path(os.getenv("FEEDCACHE_DIR")).expanduser()

        if os.getenv("FEEDCACHE_STORE"):
            store_type = os.getenv("FEEDCACHE_STORE", "").lower()
            if store_type not in STORE_FILENAMES:
                raise ValueError(f"Unknown store type: {store_type}")
            config.store_type = store_type

        if os.getenv("FEEDCACHE_FEED_URL"):
            config.feed_url = os.getenv("FEEDCACHE_FEED_URL")

        if os.getenv("FEEDCACHE_LOCK_TIMEOUT"):
            config.lock_timeout = float(os.getenv("FEEDCACHE_LOCK_TIMEOUT"))

        if os.getenv("FEEDCACHE_REQUEST_TIMEOUT"):
            config.request_timeout = float(os.getenv("FEEDCACHE_REQUEST_TIMEOUT"))

        return config


# Global cache configuration instance
_global_config: Optional[CacheConfig] = None


def get_global_config() -> CacheConfig:
    """Get global cache configuration.

    Returns:
        Global CacheConfig instance
    """
    global _global_config
    if _global_config is None:
        # Environment wins over the config file when set
        if any(key.startswith("FEEDCACHE_") for key in os.environ):
            _global_config = CacheConfig.from_env()
        else:
            _global_config = CacheConfig.load()
    return _global_config


def set_global_config(config: CacheConfig) -> None:
    """Set global cache configuration.

    Args:
        config: CacheConfig instance to use globally
    """
    global _global_config
    _global_config = config
