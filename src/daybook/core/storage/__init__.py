"""
Storage backends for daybook.

Provides a synchronous string-keyed store interface with an in-memory
implementation and a local-filesystem implementation (optionally gzipped).
"""

from daybook.core.exceptions import ConfigurationError

from .base import (
    KeyValueStore,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageQuotaError,
)
from .compression import (
    CompressionType,
    compress_bytes,
    compress_text,
    decompress_bytes,
    decompress_text,
)
from .local import LocalKeyValueStore
from .memory import MemoryKeyValueStore

__all__ = [
    "CompressionType",
    "KeyValueStore",
    "LocalKeyValueStore",
    "MemoryKeyValueStore",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
    "StorageQuotaError",
    "compress_bytes",
    "compress_text",
    "decompress_bytes",
    "decompress_text",
    "open_store",
]


def open_store(config) -> KeyValueStore:
    """Build the backing store described by the ``storage`` config section."""
    backend = config.get("storage.backend", "local")
    if backend == "memory":
        quota = config.get("storage.quota_bytes")
        return MemoryKeyValueStore(quota_bytes=int(quota) if quota else None)
    if backend == "local":
        compress = config.get("storage.compress", False)
        if isinstance(compress, str):
            compress = compress.strip().lower() in ("1", "true", "yes", "on")
        return LocalKeyValueStore(base_path=config.get("storage.dir"), compress=bool(compress))
    raise ConfigurationError(f"Unknown storage backend: {backend!r}")
