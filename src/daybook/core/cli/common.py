"""Shared setup logic for CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import click

from daybook.core.config import Config
from daybook.core.exceptions import DaybookError
from daybook.core.storage import open_store
from daybook.core.utils.logging import setup_logging
from daybook.journal.config import JournalConfig
from daybook.journal.models import JournalEntry, Mood, mood_emoji
from daybook.journal.store import JournalStore

DAYBOOK_DIR = Path.home() / ".daybook"
DEFAULT_CONFIG_PATH = DAYBOOK_DIR / "config.yaml"

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]
MOOD_CHOICE = click.Choice([m.value for m in Mood], case_sensitive=False)


@dataclass
class CliContext:
    config: Config
    _store: JournalStore | None = None

    @property
    def store(self) -> JournalStore:
        """Open the journal lazily so ``--help`` never touches the disk."""
        if self._store is None:
            try:
                self._store = JournalStore(open_store(self.config), config=JournalConfig.from_config(self.config))
            except DaybookError as e:
                raise click.ClickException(str(e)) from e
        return self._store


def build_context(config_file: str | None, data_dir: str | None, verbose: int) -> CliContext:
    try:
        config = Config(config_file=config_file, data_dir=data_dir)
    except DaybookError as e:
        raise click.ClickException(str(e)) from e
    if data_dir:
        # An explicit data dir moves the store along with it.
        config.set("storage.dir", str(Path(data_dir).expanduser() / "store"))

    level = {0: config.get("logging.level", "WARNING"), 1: "INFO"}.get(verbose, "DEBUG")
    setup_logging(level=level, log_file=config.get("logging.file") or None)
    return CliContext(config=config)


def format_date(value: datetime) -> str:
    return f"{value:%a, %b} {value.day}, {value:%Y}"


def format_entry_line(entry: JournalEntry) -> str:
    tags = f"  [{', '.join(entry.tags)}]" if entry.tags else ""
    return f"{entry.id}  {format_date(entry.date)}  {mood_emoji(entry.mood)} {entry.title}{tags}"


def require_entry(store: JournalStore, entry_id: str) -> JournalEntry:
    entry = store.get_entry(entry_id)
    if entry is None:
        raise click.ClickException(f"No entry with id {entry_id}")
    return entry
