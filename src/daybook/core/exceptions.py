"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class PersistenceError(DaybookError):
    """Raised when a journal mutation could not be written to the backing store.

    The in-memory state is left untouched when this is raised.
    """

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class CodecError(DaybookError):
    """Raised when an entity cannot be encoded for storage."""
