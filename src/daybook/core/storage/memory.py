"""
In-memory storage backend.

Mirrors a browser-style local store: values live in a dict, and an
optional byte quota makes writes fail the way a full store does.
"""

from collections.abc import Iterator

from loguru import logger

from .base import KeyValueStore, StorageError, StorageQuotaError


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store with an optional quota on total UTF-8 size."""

    def __init__(self, initial: dict[str, str] | None = None, quota_bytes: int | None = None, **config):
        super().__init__(**config)
        self._data: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    @property
    def used_bytes(self) -> int:
        return sum(self._size(k, v) for k, v in self._data.items())

    @staticmethod
    def _size(key: str, value: str) -> int:
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        try:
            needed = self._size(key, value)
        except UnicodeEncodeError as e:
            raise StorageError(f"Cannot encode value for '{key}': {e}") from e
        if self.quota_bytes is not None:
            current = self._data.get(key)
            used = self.used_bytes - (self._size(key, current) if current is not None else 0)
            if used + needed > self.quota_bytes:
                logger.debug(f"Quota exceeded writing '{key}': {used + needed} > {self.quota_bytes}")
                raise StorageQuotaError(
                    f"Writing '{key}' needs {needed} bytes; {self.quota_bytes - used} of {self.quota_bytes} available"
                )
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> Iterator[str]:
        for key in list(self._data):
            if key.startswith(prefix):
                yield key
