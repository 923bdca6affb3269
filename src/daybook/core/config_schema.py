"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``DaybookConfig``
instance.  Dict-based access continues to work unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PathsConfig(BaseModel):
    """File-system paths used by the application."""

    data_dir: Path
    log_dir: Path | None = None

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v


class StorageConfig(BaseModel):
    """Backing key-value store selection."""

    backend: Literal["local", "memory"] = "local"
    dir: Path | None = None
    compress: bool = False
    quota_bytes: int | None = None

    @field_validator("quota_bytes")
    @classmethod
    def _positive_quota(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError("quota_bytes must be positive")
        return v


class StorageKeysConfig(BaseModel):
    """Literal key names of the four persisted collections."""

    entries: str = "journal_entries"
    draft: str = "journal_draft"
    tags: str = "journal_tags"
    settings: str = "journal_settings"

    @model_validator(mode="after")
    def _distinct(self) -> StorageKeysConfig:
        keys = [self.entries, self.draft, self.tags, self.settings]
        if len(set(keys)) != len(keys):
            raise ValueError(f"storage keys must be distinct: {keys}")
        return self


class AutosaveConfig(BaseModel):
    """Bounds applied to the user's autosave interval (seconds)."""

    min_interval: int = 5
    max_interval: int = 300

    @model_validator(mode="after")
    def _ordered(self) -> AutosaveConfig:
        if self.min_interval <= 0 or self.min_interval > self.max_interval:
            raise ValueError("autosave bounds must satisfy 0 < min_interval <= max_interval")
        return self


class JournalSection(BaseModel):
    keys: StorageKeysConfig = StorageKeysConfig()
    autosave: AutosaveConfig = AutosaveConfig()


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: str = ""


class DaybookConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.daybook-data"))
    storage: StorageConfig = StorageConfig()
    journal: JournalSection = JournalSection()
    logging: LoggingConfig = LoggingConfig()
