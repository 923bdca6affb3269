"""Configuration dataclasses for the journal store and autosave.

These are pure data containers with sensible defaults.
Override them from YAML config, env vars, or constructor args.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import AUTOSAVE_MAX_SECONDS, AUTOSAVE_MIN_SECONDS, clamp_autosave_interval


@dataclass
class StorageKeys:
    """Literal backing-store keys of the four persisted collections."""

    entries: str = "journal_entries"
    draft: str = "journal_draft"
    tags: str = "journal_tags"
    settings: str = "journal_settings"


@dataclass
class JournalConfig:
    """Settings for the journal store.

    Attributes:
        keys: Backing-store key names.
        autosave_min: Lower bound (seconds) for the user's autosave interval.
        autosave_max: Upper bound (seconds) for the user's autosave interval.
    """

    keys: StorageKeys = field(default_factory=StorageKeys)
    autosave_min: int = AUTOSAVE_MIN_SECONDS
    autosave_max: int = AUTOSAVE_MAX_SECONDS

    def clamp_interval(self, seconds) -> int:
        return clamp_autosave_interval(seconds, self.autosave_min, self.autosave_max)

    @classmethod
    def from_config(cls, config) -> JournalConfig:
        """Build from a validated :class:`~daybook.core.config.Config`."""
        validated = config.validated()
        keys = validated.journal.keys
        autosave = validated.journal.autosave
        return cls(
            keys=StorageKeys(
                entries=keys.entries,
                draft=keys.draft,
                tags=keys.tags,
                settings=keys.settings,
            ),
            autosave_min=autosave.min_interval,
            autosave_max=autosave.max_interval,
        )
