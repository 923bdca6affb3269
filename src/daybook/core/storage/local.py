"""
Local filesystem storage backend.

Each key is one file under ``base_path`` (``<key>.json``, or
``<key>.json.gz`` when compression is on). Writes go to a temporary file
that is then renamed over the target, so a crash mid-write leaves the
previous value intact.
"""

import errno
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

from loguru import logger

from daybook.core.types import PathLike

from .base import KeyValueStore, StorageError, StoragePermissionError, StorageQuotaError
from .compression import CompressionType, compress_text, decompress_text

_SUFFIX = ".json"
_GZ_SUFFIX = ".json.gz"
_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT} if hasattr(errno, "EDQUOT") else {errno.ENOSPC}


class LocalKeyValueStore(KeyValueStore):
    """Local filesystem key-value store."""

    def __init__(self, base_path: PathLike = "~/.daybook-data/store", compress: bool = False, **config):
        super().__init__(**config)
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.compression = CompressionType.GZIP if compress else CompressionType.NONE

    def _check_key(self, key: str) -> str:
        """Reject keys that could escape ``base_path`` or collide with suffixes."""
        raw_key = key.strip()
        if not raw_key:
            raise StoragePermissionError("Storage key cannot be empty.")
        if "\x00" in raw_key:
            raise StoragePermissionError("Storage key cannot contain null bytes.")
        if "/" in raw_key or "\\" in raw_key:
            raise StoragePermissionError(f"Unsafe storage key '{key}': path separators are not allowed.")
        if raw_key in (".", "..") or raw_key.startswith("~"):
            raise StoragePermissionError(f"Unsafe storage key '{key}'.")
        return raw_key

    def _plain_path(self, key: str) -> Path:
        return self.base_path / f"{self._check_key(key)}{_SUFFIX}"

    def _gz_path(self, key: str) -> Path:
        return self.base_path / f"{self._check_key(key)}{_GZ_SUFFIX}"

    def get(self, key: str) -> str | None:
        plain, gz = self._plain_path(key), self._gz_path(key)
        # The file matching the current mode wins over a leftover in the other format.
        paths = (gz, plain) if self.compression == CompressionType.GZIP else (plain, gz)
        try:
            for path in paths:
                if path.exists():
                    data = path.read_bytes()
                    return decompress_text(data) if path == gz else data.decode("utf-8")
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read '{key}': {e}") from e
        except (OSError, EOFError, UnicodeDecodeError) as e:
            # Unreadable bytes are treated like a corrupt payload: the codec
            # downstream substitutes its default.
            logger.warning(f"Unreadable value for key '{key}': {e}")
            return ""
        return None

    def set(self, key: str, value: str) -> None:
        try:
            if self.compression == CompressionType.GZIP:
                target, stale = self._gz_path(key), self._plain_path(key)
                data = compress_text(value)
            else:
                target, stale = self._plain_path(key), self._gz_path(key)
                data = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise StorageError(f"Cannot encode value for '{key}': {e}") from e

        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=".tmp-", suffix=target.suffix)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except PermissionError as e:
            self._discard(tmp_name)
            raise StoragePermissionError(f"Cannot write '{key}': {e}") from e
        except OSError as e:
            self._discard(tmp_name)
            if e.errno in _QUOTA_ERRNOS:
                raise StorageQuotaError(f"No space left writing '{key}': {e}") from e
            raise StorageError(f"Cannot write '{key}': {e}") from e

        # The new value is committed; get() prefers it over any leftover.
        try:
            stale.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove stale copy of '{key}': {e}")

    @staticmethod
    def _discard(tmp_name: str) -> None:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass

    def delete(self, key: str) -> bool:
        deleted = False
        for path in (self._plain_path(key), self._gz_path(key)):
            if path.exists():
                try:
                    path.unlink()
                except PermissionError as e:
                    raise StoragePermissionError(f"Cannot delete '{key}': {e}") from e
                deleted = True
        return deleted

    def keys(self, prefix: str = "") -> Iterator[str]:
        seen: set[str] = set()
        for path in sorted(self.base_path.iterdir()):
            name = path.name
            if name.startswith(".tmp-") or not path.is_file():
                continue
            if name.endswith(_GZ_SUFFIX):
                key = name[: -len(_GZ_SUFFIX)]
            elif name.endswith(_SUFFIX):
                key = name[: -len(_SUFFIX)]
            else:
                continue
            if key in seen or not key.startswith(prefix):
                continue
            seen.add(key)
            yield key
