"""Tests for daybook.core.exceptions."""

from daybook.core.exceptions import CodecError, ConfigurationError, DaybookError, PersistenceError


def test_hierarchy():
    """All exceptions should inherit from DaybookError."""
    for exc_cls in [ConfigurationError, PersistenceError, CodecError]:
        assert issubclass(exc_cls, DaybookError)


def test_persistence_error_carries_key():
    err = PersistenceError("disk full", key="journal_entries")
    assert err.key == "journal_entries"
    assert str(err) == "disk full"


def test_persistence_error_key_optional():
    assert PersistenceError("boom").key is None
