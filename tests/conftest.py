"""Shared test fixtures for daybook."""

import os
import tempfile
from datetime import datetime

import pytest

from daybook.core.storage import MemoryKeyValueStore
from daybook.journal.models import JournalEntry
from daybook.journal.store import JournalStore


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {"data_dir": os.path.join(tmp_dir, "data")},
        "storage": {"backend": "local", "dir": os.path.join(tmp_dir, "store")},
        "logging": {"level": "DEBUG"},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


class FakeClock:
    """Deterministic clock; advance it explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 9, 30))


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


@pytest.fixture
def store(backend, clock):
    return JournalStore(backend, clock=clock)


@pytest.fixture
def make_entry():
    """Factory for entries with sensible defaults."""
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> JournalEntry:
        n = next(counter)
        fields = {
            "id": f"e{n}",
            "title": f"Entry {n}",
            "content": "<p>Walked to the park</p>",
            "mood": "happy",
            "date": datetime(2024, 1, n % 28 + 1, 12, 0),
            "tags": [],
        }
        fields.update(overrides)
        return JournalEntry(**fields)

    return _make
