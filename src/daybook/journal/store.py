"""JournalStore: the owner of entries, tags, settings, and the draft slot.

The store keeps the authoritative in-memory copy of every collection and
mirrors each one to a single key of a :class:`~daybook.core.storage.KeyValueStore`.
Consumers observe ``entries``, ``tags`` and ``settings`` through
:class:`~daybook.core.events.Channel` objects: a new subscriber gets the
current snapshot immediately, then every later snapshot in mutation order.
The draft has no channel; read it with :meth:`JournalStore.get_draft`.

Every mutation follows the same cycle:

1. compute the next state without touching memory,
2. write it to the backing store,
3. commit it to memory,
4. publish the full resulting collection.

If step 2 fails the mutation raises :class:`PersistenceError` and steps 3
and 4 never happen, so memory always matches what is durable.

Construct one store at startup and pass it to whatever needs it::

    store = JournalStore(LocalKeyValueStore("~/.daybook-data/store"))
    store.entries.subscribe(render_list)
    store.add_entry(JournalEntry.create("Beach day", "<p>Sun!</p>", Mood.HAPPY))
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from loguru import logger

from daybook.core.events import (
    DRAFT_CLEARED,
    DRAFT_SAVED,
    ENTRY_ADDED,
    ENTRY_DELETED,
    ENTRY_UPDATED,
    SETTINGS_UPDATED,
    TAG_DELETED,
    Channel,
    Event,
    EventBus,
)
from daybook.core.exceptions import CodecError, PersistenceError
from daybook.core.storage import KeyValueStore, StorageError
from daybook.core.types import Clock

from . import codec
from .config import JournalConfig
from .models import JournalDraft, JournalEntry, Mood, UserSettings, content_word_count, parse_mood, unique_tags
from .search import filter_entries, sort_newest_first

EntriesSnapshot = tuple[JournalEntry, ...]
TagsSnapshot = tuple[str, ...]


class JournalStore:
    """Persisted, observable journal state.

    Args:
        backend: Durable string-keyed store. The only source of truth across restarts.
        config: Key names and autosave bounds. Defaults to :class:`JournalConfig`.
        bus: Optional event bus that receives a domain event after each mutation.
        clock: Returns "now"; injected so tests can pin time.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        *,
        config: JournalConfig | None = None,
        bus: EventBus | None = None,
        clock: Clock | None = None,
    ):
        self._backend = backend
        self.config = config or JournalConfig()
        self._keys = self.config.keys
        self._bus = bus
        self._clock = clock or datetime.now

        self._entries: list[JournalEntry] = []
        self._tags: list[str] = []
        self._settings = UserSettings.default()
        self._draft: JournalDraft | None = None

        self.entries: Channel[EntriesSnapshot] = Channel((), name="entries")
        self.tags: Channel[TagsSnapshot] = Channel((), name="tags")
        self.settings: Channel[UserSettings] = Channel(self._settings, name="settings")

        self._load()

    # ── Loading ────────────────────────────────────────────────────

    def _read(self, key: str) -> str | None:
        try:
            return self._backend.get(key)
        except StorageError as e:
            logger.warning(f"Could not read '{key}' from backing store, using empty value: {e}")
            return None

    def _load(self) -> None:
        self._entries = codec.decode_entries(self._read(self._keys.entries))
        self._tags = codec.decode_tags(self._read(self._keys.tags))
        self._settings = codec.decode_settings(self._read(self._keys.settings))
        self._settings.autosave_interval = self.config.clamp_interval(self._settings.autosave_interval)
        self._draft = codec.decode_draft(self._read(self._keys.draft))
        self._reconcile_tags()
        logger.debug(f"Loaded journal: {len(self._entries)} entries, {len(self._tags)} tags")

        self.entries.publish(self._entries_snapshot())
        self.tags.publish(tuple(self._tags))
        self.settings.publish(self._settings_copy())

    def _reconcile_tags(self) -> None:
        """Re-register tags that entries reference but the registry lost."""
        missing = [t for t in unique_tags(t for e in self._entries for t in e.tags) if t not in self._tags]
        if not missing:
            return
        logger.warning(f"Tag registry missing {len(missing)} tag(s) used by entries; restoring {missing}")
        self._tags = self._tags + missing
        try:
            self._backend.set(self._keys.tags, codec.encode_tags(self._tags))
        except StorageError as e:
            logger.warning(f"Could not persist reconciled tag registry: {e}")

    def reload(self) -> None:
        """Discard memory and re-read every collection from the backing store."""
        self._load()

    # ── Persistence helpers ────────────────────────────────────────

    def _write(self, key: str, encode: Callable[[], str]) -> None:
        try:
            payload = encode()
            self._backend.set(key, payload)
        except (StorageError, CodecError) as e:
            logger.error(f"Failed to persist '{key}': {e}")
            raise PersistenceError(f"Failed to persist '{key}': {e}", key=key) from e

    def _write_entries(self, entries: list[JournalEntry]) -> None:
        self._write(self._keys.entries, lambda: codec.encode_entries(entries))

    def _write_tags(self, tags: list[str]) -> None:
        self._write(self._keys.tags, lambda: codec.encode_tags(tags))

    def _emit(self, name: str, **payload) -> None:
        if self._bus is not None:
            self._bus.emit(Event(name=name, payload=payload, source="journal.store"))

    def _entries_snapshot(self) -> EntriesSnapshot:
        return tuple(sort_newest_first(self._entries))

    def _settings_copy(self) -> UserSettings:
        return copy.deepcopy(self._settings)

    def _commit_entries(self, entries: list[JournalEntry]) -> None:
        self._entries = entries
        self.entries.publish(self._entries_snapshot())

    def _commit_tags(self, tags: list[str]) -> None:
        self._tags = tags
        self.tags.publish(tuple(tags))

    def _register_tags(self, tags: Iterable[str]) -> None:
        """Persist and publish any tags the registry hasn't seen yet."""
        new_tags = [t for t in unique_tags(tags) if t not in self._tags]
        if not new_tags:
            return
        next_tags = self._tags + new_tags
        self._write_tags(next_tags)
        self._commit_tags(next_tags)

    def _prepare(self, entry: JournalEntry, **changes) -> JournalEntry:
        """Detach *entry* from the caller and recompute its cached word count."""
        # replace() re-runs validation and normalisation on the caller's data.
        prepared = copy.deepcopy(replace(entry, **changes))
        prepared.word_count = content_word_count(prepared.content)
        return prepared

    def _index_of(self, entry_id: str) -> int | None:
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return i
        return None

    # ── Entries ────────────────────────────────────────────────────

    def list_entries(self, newest_first: bool = True) -> list[JournalEntry]:
        """Current entries, newest first by date (or in stored order)."""
        if newest_first:
            return list(self._entries_snapshot())
        return list(self._entries)

    def get_entry(self, entry_id: str) -> JournalEntry | None:
        index = self._index_of(entry_id)
        return None if index is None else self._entries[index]

    def add_entry(self, entry: JournalEntry) -> JournalEntry:
        """Insert *entry*, register its tags, and clear the draft.

        The id is not checked for uniqueness; the entry is always inserted as
        a new record.

        Raises:
            PersistenceError: If the tags or entries could not be written. When
                ``error.key`` is the draft key, the entry itself was saved.
        """
        stored = self._prepare(entry)
        # Tags go first so the durable registry is always a superset of the
        # tags referenced by durable entries.
        self._register_tags(stored.tags)

        next_entries = [stored, *self._entries]
        self._write_entries(next_entries)
        self._commit_entries(next_entries)
        logger.info(f"Added entry {stored.id} ({stored.word_count} words)")
        self._emit(ENTRY_ADDED, id=stored.id)

        self.clear_draft()
        return stored

    def update_entry(self, entry: JournalEntry) -> JournalEntry | None:
        """Replace the stored entry with the same id and stamp ``last_edited``.

        Unknown ids are ignored and return None.
        """
        index = self._index_of(entry.id)
        if index is None:
            logger.debug(f"update_entry: no entry with id {entry.id}, ignoring")
            return None

        stored = self._prepare(entry, last_edited=self._clock())
        self._register_tags(stored.tags)

        next_entries = list(self._entries)
        next_entries[index] = stored
        self._write_entries(next_entries)
        self._commit_entries(next_entries)
        logger.info(f"Updated entry {stored.id}")
        self._emit(ENTRY_UPDATED, id=stored.id)
        return stored

    def delete_entry(self, entry_id: str) -> bool:
        """Remove the entry with *entry_id*. Returns False (and writes nothing) if absent."""
        if self._index_of(entry_id) is None:
            logger.debug(f"delete_entry: no entry with id {entry_id}, ignoring")
            return False

        next_entries = [e for e in self._entries if e.id != entry_id]
        self._write_entries(next_entries)
        self._commit_entries(next_entries)
        logger.info(f"Deleted entry {entry_id}")
        self._emit(ENTRY_DELETED, id=entry_id)
        return True

    # ── Entry queries ──────────────────────────────────────────────

    def entries_between(self, start: datetime, end: datetime) -> list[JournalEntry]:
        """Entries whose timestamp lies in ``[start, end]``, newest first."""
        return [e for e in self._entries_snapshot() if start <= e.date <= end]

    def entries_with_tag(self, tag: str) -> list[JournalEntry]:
        return [e for e in self._entries_snapshot() if tag in e.tags]

    def entries_with_mood(self, mood: Mood | str) -> list[JournalEntry]:
        wanted = str(parse_mood(mood))
        return [e for e in self._entries_snapshot() if str(e.mood) == wanted]

    def search(self, query: str) -> list[JournalEntry]:
        """Case-insensitive substring search over title, content and tags."""
        return filter_entries(self._entries, query=query)

    # ── Tags ───────────────────────────────────────────────────────

    def list_tags(self) -> list[str]:
        return list(self._tags)

    def add_tags(self, tags: Iterable[str]) -> None:
        """Register tags without attaching them to any entry."""
        self._register_tags(tags)

    def delete_tag(self, tag: str) -> bool:
        """Remove *tag* from the registry and from every entry that uses it.

        Two independent writes: entries first, then the registry. A crash in
        between leaves the tag registered but unused, which keeps the registry
        a superset of the tags in use. Returns False if the tag was unknown.
        """
        in_registry = tag in self._tags
        next_entries: list[JournalEntry] = []
        changed = 0
        for entry in self._entries:
            if tag in entry.tags:
                next_entries.append(replace(entry, tags=[t for t in entry.tags if t != tag]))
                changed += 1
            else:
                next_entries.append(entry)

        if not in_registry and not changed:
            return False

        if changed:
            self._write_entries(next_entries)
            self._commit_entries(next_entries)

        if in_registry:
            next_tags = [t for t in self._tags if t != tag]
            self._write_tags(next_tags)
            self._commit_tags(next_tags)

        logger.info(f"Deleted tag '{tag}' (stripped from {changed} entries)")
        self._emit(TAG_DELETED, tag=tag, entries_changed=changed)
        return True

    # ── Settings ───────────────────────────────────────────────────

    def get_settings(self) -> UserSettings:
        return self._settings_copy()

    def update_settings(self, settings: UserSettings) -> UserSettings:
        """Replace the settings wholesale (no merging) and publish them."""
        stored = copy.deepcopy(settings)
        stored.autosave_interval = self.config.clamp_interval(stored.autosave_interval)
        self._write(self._keys.settings, lambda: codec.encode_settings(stored))
        self._settings = stored
        self.settings.publish(self._settings_copy())
        logger.debug(f"Settings updated: theme={stored.theme}, autosave={stored.autosave_interval}s")
        self._emit(SETTINGS_UPDATED)
        return self._settings_copy()

    # ── Draft ──────────────────────────────────────────────────────

    def get_draft(self) -> JournalDraft | None:
        return copy.deepcopy(self._draft)

    def save_draft(self, draft: JournalDraft) -> JournalDraft:
        """Store *draft* in the single draft slot, stamping ``last_saved`` to now."""
        stored = copy.deepcopy(draft)
        stored.last_saved = self._clock()
        self._write(self._keys.draft, lambda: codec.encode_draft(stored))
        self._draft = stored
        logger.debug(f"Draft {stored.id} saved")
        self._emit(DRAFT_SAVED, id=stored.id)
        return copy.deepcopy(stored)

    def clear_draft(self) -> None:
        """Empty the draft slot. Safe to call when it is already empty."""
        try:
            self._backend.delete(self._keys.draft)
        except StorageError as e:
            logger.error(f"Failed to clear draft: {e}")
            raise PersistenceError(f"Failed to clear draft: {e}", key=self._keys.draft) from e
        had_draft = self._draft is not None
        self._draft = None
        if had_draft:
            self._emit(DRAFT_CLEARED)
