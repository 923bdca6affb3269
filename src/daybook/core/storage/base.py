"""
Abstract base class for key-value backing stores.

The journal persists each collection as one string value under a fixed
key. Backends are synchronous: every write either completes or raises
before returning, and nothing is batched across keys.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator


class KeyValueStore(ABC):
    """Synchronous, string-keyed, string-valued durable store."""

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*. Raises StorageError on failure."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove *key*. Returns True if deleted, False if it didn't exist."""

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterator[str]:
        """Iterate stored keys with an optional prefix filter."""

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def load(self, key: str) -> str:
        """Like :meth:`get` but raises StorageKeyError when *key* is absent."""
        value = self.get(key)
        if value is None:
            raise StorageKeyError(f"Key not found: {key}")
        return value


class StorageError(Exception):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key doesn't exist."""


class StoragePermissionError(StorageError):
    """Raised when storage operation is not permitted."""


class StorageQuotaError(StorageError):
    """Raised when storage quota is exceeded."""
