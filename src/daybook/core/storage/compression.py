"""
Compression utilities for storage backends.

Gzip only; the local backend uses it for optional on-disk compression.
"""

import gzip
from enum import Enum
from io import BytesIO


class CompressionType(Enum):
    """Supported compression types."""

    NONE = "none"
    GZIP = "gzip"


def compress_bytes(data: bytes, compression: CompressionType = CompressionType.GZIP) -> bytes:
    """Compress binary data."""
    if compression == CompressionType.NONE:
        return data
    if compression == CompressionType.GZIP:
        buffer = BytesIO()
        with gzip.GzipFile(fileobj=buffer, mode="wb", compresslevel=6) as gz:
            gz.write(data)
        return buffer.getvalue()
    raise ValueError(f"Unsupported compression type: {compression}")


def decompress_bytes(data: bytes, compression: CompressionType = CompressionType.GZIP) -> bytes:
    """Decompress binary data."""
    if compression == CompressionType.NONE:
        return data
    if compression == CompressionType.GZIP:
        return gzip.decompress(data)
    raise ValueError(f"Unsupported compression type: {compression}")


def compress_text(text: str) -> bytes:
    """UTF-8 encode and gzip-compress a string."""
    return compress_bytes(text.encode("utf-8"))


def decompress_text(data: bytes) -> str:
    """Decompress gzip data and decode it as UTF-8."""
    return decompress_bytes(data).decode("utf-8")
