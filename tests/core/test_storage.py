"""Tests for daybook.core.storage."""

import os
from pathlib import Path

import pytest

from daybook.core.config import Config
from daybook.core.exceptions import ConfigurationError
from daybook.core.storage import (
    CompressionType,
    LocalKeyValueStore,
    MemoryKeyValueStore,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageQuotaError,
    compress_bytes,
    decompress_bytes,
    open_store,
)

pytestmark = pytest.mark.smoke


class TestMemoryKeyValueStore:
    def test_get_set_delete(self):
        store = MemoryKeyValueStore()
        assert store.get("a") is None
        store.set("a", "1")
        assert store.get("a") == "1"
        assert store.exists("a")
        assert store.delete("a") is True
        assert store.delete("a") is False

    def test_load_missing_raises(self):
        with pytest.raises(StorageKeyError):
            MemoryKeyValueStore().load("missing")

    def test_keys_prefix(self):
        store = MemoryKeyValueStore({"journal_tags": "[]", "journal_entries": "[]", "other": "x"})
        assert sorted(store.keys("journal_")) == ["journal_entries", "journal_tags"]

    def test_quota_rejects_oversized_write(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set("k", "12345")
        with pytest.raises(StorageQuotaError):
            store.set("j", "123456789")
        assert store.get("j") is None
        assert store.used_bytes == 6

    def test_quota_counts_replacement(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set("k", "123456789")
        store.set("k", "987654321")
        assert store.get("k") == "987654321"

    def test_quota_counts_utf8_bytes(self):
        store = MemoryKeyValueStore(quota_bytes=4)
        with pytest.raises(StorageQuotaError):
            store.set("k", "😀")

    def test_lone_surrogate_rejected(self):
        store = MemoryKeyValueStore()
        with pytest.raises(StorageError):
            store.set("k", "broken \ud83d")
        assert store.get("k") is None


class TestLocalKeyValueStore:
    def test_round_trip(self, tmp_dir):
        store = LocalKeyValueStore(base_path=tmp_dir)
        store.set("journal_entries", '[{"id": "1"}]')
        assert store.get("journal_entries") == '[{"id": "1"}]'
        assert os.path.exists(os.path.join(tmp_dir, "journal_entries.json"))

    def test_missing_key(self, tmp_dir):
        assert LocalKeyValueStore(base_path=tmp_dir).get("nope") is None

    def test_survives_new_instance(self, tmp_dir):
        LocalKeyValueStore(base_path=tmp_dir).set("k", "ü")
        assert LocalKeyValueStore(base_path=tmp_dir).get("k") == "ü"

    def test_gzip(self, tmp_dir):
        store = LocalKeyValueStore(base_path=tmp_dir, compress=True)
        store.set("k", "hello " * 100)
        assert store.get("k") == "hello " * 100
        assert os.path.exists(os.path.join(tmp_dir, "k.json.gz"))
        assert not os.path.exists(os.path.join(tmp_dir, "k.json"))

    def test_switching_compression_removes_stale_file(self, tmp_dir):
        LocalKeyValueStore(base_path=tmp_dir).set("k", "plain")
        LocalKeyValueStore(base_path=tmp_dir, compress=True).set("k", "packed")
        assert not os.path.exists(os.path.join(tmp_dir, "k.json"))
        assert LocalKeyValueStore(base_path=tmp_dir).get("k") == "packed"

    def test_stale_file_that_cannot_be_removed(self, tmp_dir, monkeypatch):
        LocalKeyValueStore(base_path=tmp_dir).set("k", "plain")

        def refuse(self, missing_ok=False):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "unlink", refuse)
        store = LocalKeyValueStore(base_path=tmp_dir, compress=True)
        store.set("k", "packed")
        assert store.get("k") == "packed"
        assert os.path.exists(os.path.join(tmp_dir, "k.json"))

    def test_lone_surrogate_rejected(self, tmp_dir):
        store = LocalKeyValueStore(base_path=tmp_dir)
        store.set("k", "good")
        with pytest.raises(StorageError):
            store.set("k", "broken \ud83d")
        assert store.get("k") == "good"
        assert list(store.keys()) == ["k"]

    def test_delete(self, tmp_dir):
        store = LocalKeyValueStore(base_path=tmp_dir)
        store.set("k", "v")
        assert store.delete("k") is True
        assert store.delete("k") is False
        assert store.get("k") is None

    def test_keys_skip_temp_files(self, tmp_dir):
        store = LocalKeyValueStore(base_path=tmp_dir)
        store.set("a", "1")
        store.set("b", "2")
        with open(os.path.join(tmp_dir, ".tmp-abc.json"), "w") as f:
            f.write("partial")
        assert list(store.keys()) == ["a", "b"]

    @pytest.mark.parametrize("key", ["", "   ", "../escape", "a/b", "..", "~home", "nul\x00"])
    def test_unsafe_keys_rejected(self, tmp_dir, key):
        with pytest.raises(StoragePermissionError):
            LocalKeyValueStore(base_path=tmp_dir).set(key, "x")

    def test_corrupt_gzip_reads_as_empty(self, tmp_dir):
        with open(os.path.join(tmp_dir, "k.json.gz"), "wb") as f:
            f.write(b"not gzip at all")
        assert LocalKeyValueStore(base_path=tmp_dir).get("k") == ""


class TestCompression:
    def test_gzip_round_trip(self):
        data = b"daybook " * 50
        packed = compress_bytes(data)
        assert len(packed) < len(data)
        assert decompress_bytes(packed) == data

    def test_none_is_passthrough(self):
        assert compress_bytes(b"x", CompressionType.NONE) == b"x"


class TestOpenStore:
    def test_memory_backend(self, tmp_dir):
        config = Config(data_dir=tmp_dir, defaults={"storage": {"backend": "memory", "quota_bytes": 100}})
        store = open_store(config)
        assert isinstance(store, MemoryKeyValueStore)
        assert store.quota_bytes == 100

    def test_local_backend(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("storage.compress", "true")
        store = open_store(config)
        assert isinstance(store, LocalKeyValueStore)
        assert store.compression == CompressionType.GZIP

    def test_unknown_backend(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("storage.backend", "cloud")
        with pytest.raises(ConfigurationError):
            open_store(config)
