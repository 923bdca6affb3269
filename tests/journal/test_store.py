"""Tests for daybook.journal.store."""

import json
import os
from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from daybook.core.events import DRAFT_CLEARED, ENTRY_ADDED, ENTRY_DELETED, ENTRY_UPDATED, TAG_DELETED, EventBus
from daybook.core.exceptions import PersistenceError
from daybook.core.storage import LocalKeyValueStore, MemoryKeyValueStore, StorageError
from daybook.journal import codec
from daybook.journal.calendar import build_month
from daybook.journal.config import JournalConfig, StorageKeys
from daybook.journal.models import JournalDraft, Mood, UserSettings
from daybook.journal.search import filter_entries
from daybook.journal.store import JournalStore

pytestmark = pytest.mark.smoke


class FailingStore(MemoryKeyValueStore):
    """Memory store whose writes to selected keys fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing: set[str] = set()
        self.writes: list[str] = []

    def set(self, key, value):
        if key in self.failing:
            raise StorageError(f"disk full writing {key}")
        self.writes.append(key)
        super().set(key, value)

    def delete(self, key):
        if key in self.failing:
            raise StorageError(f"cannot delete {key}")
        return super().delete(key)


def _stored(backend, key):
    return json.loads(backend.get(key))


def _edited(entry, **changes):
    return replace(entry, **changes)


class TestLoading:
    def test_empty_backend(self, store):
        assert store.list_entries() == []
        assert store.list_tags() == []
        assert store.get_settings() == UserSettings.default()
        assert store.get_draft() is None

    def test_loads_persisted_state(self, backend, make_entry, clock):
        entry = make_entry(tags=["a"])
        backend.set("journal_entries", codec.encode_entries([entry]))
        backend.set("journal_tags", codec.encode_tags(["a", "b"]))
        backend.set("journal_settings", '{"theme": "dark"}')
        backend.set("journal_draft", codec.encode_draft(JournalDraft(id="draft-x", title="half")))

        store = JournalStore(backend, clock=clock)
        assert store.list_entries() == [entry]
        assert store.list_tags() == ["a", "b"]
        assert store.get_settings().theme == "dark"
        assert store.get_draft().title == "half"

    def test_corrupt_payloads_load_as_defaults(self, backend, clock):
        for key in ("journal_entries", "journal_tags", "journal_settings", "journal_draft"):
            backend.set(key, "{corrupt")
        store = JournalStore(backend, clock=clock)
        assert store.list_entries() == []
        assert store.list_tags() == []
        assert store.get_settings() == UserSettings.default()
        assert store.get_draft() is None

    def test_non_finite_settings_load_as_defaults(self, backend, clock):
        backend.set("journal_settings", '{"autosaveInterval": NaN, "writingGoals": {"daily": Infinity}}')
        store = JournalStore(backend, clock=clock)
        assert store.get_settings().autosave_interval == 30
        assert store.get_settings().writing_goals.daily == 500

    def test_out_of_range_entry_dates_are_skipped(self, backend, make_entry, clock):
        good = codec.entry_to_dict(make_entry())
        bad = {**good, "id": "ancient", "date": "0001-01-01T00:00:00+14:00"}
        backend.set("journal_entries", json.dumps([bad, good]))
        store = JournalStore(backend, clock=clock)
        assert [e.id for e in store.list_entries()] == [good["id"]]

    def test_restores_tags_missing_from_registry(self, backend, make_entry, clock):
        backend.set("journal_entries", codec.encode_entries([make_entry(tags=["x", "y"])]))
        backend.set("journal_tags", codec.encode_tags(["y"]))
        store = JournalStore(backend, clock=clock)
        assert store.list_tags() == ["y", "x"]
        assert _stored(backend, "journal_tags") == ["y", "x"]

    def test_out_of_bounds_interval_clamped_to_config(self, backend, clock):
        backend.set("journal_settings", '{"autosaveInterval": 200}')
        store = JournalStore(backend, config=JournalConfig(autosave_max=60), clock=clock)
        assert store.get_settings().autosave_interval == 60

    def test_custom_keys(self, backend, make_entry, clock):
        keys = StorageKeys(entries="e", draft="d", tags="t", settings="s")
        store = JournalStore(backend, config=JournalConfig(keys=keys), clock=clock)
        store.add_entry(make_entry(tags=["k"]))
        assert sorted(backend.keys()) == ["e", "t"]

    def test_reload(self, backend, make_entry, store):
        backend.set("journal_entries", codec.encode_entries([make_entry()]))
        assert store.list_entries() == []
        store.reload()
        assert len(store.list_entries()) == 1


class TestAddEntry:
    def test_add_persists_and_publishes(self, store, backend, make_entry):
        snapshots = []
        store.entries.subscribe(snapshots.append)
        entry = make_entry(content="<p>one two three</p>", word_count=99, tags=["walk"])

        stored = store.add_entry(entry)

        assert stored.word_count == 3
        assert store.get_entry(entry.id) == stored
        assert snapshots == [(), (stored,)]
        assert [e["id"] for e in _stored(backend, "journal_entries")] == [entry.id]
        assert _stored(backend, "journal_tags") == ["walk"]
        assert store.list_tags() == ["walk"]

    def test_add_detaches_from_caller(self, store, make_entry):
        entry = make_entry(tags=["a"])
        store.add_entry(entry)
        entry.tags.append("mutated")
        assert store.get_entry(entry.id).tags == ["a"]

    def test_add_clears_draft(self, store, make_entry):
        store.save_draft(JournalDraft(title="wip"))
        store.add_entry(make_entry())
        assert store.get_draft() is None

    def test_add_does_not_reject_duplicate_ids(self, store, make_entry):
        store.add_entry(make_entry(id="same"))
        store.add_entry(make_entry(id="same"))
        assert len(store.list_entries()) == 2

    def test_entries_sorted_newest_first(self, store, make_entry):
        old = store.add_entry(make_entry(date=datetime(2024, 1, 1)))
        new = store.add_entry(make_entry(date=datetime(2024, 2, 1)))
        mid = store.add_entry(make_entry(date=datetime(2024, 1, 15)))
        assert store.list_entries() == [new, mid, old]
        assert store.entries.value == (new, mid, old)

    def test_existing_tags_not_rewritten(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        store.add_entry(make_entry(tags=["a"]))
        backend.writes.clear()
        store.add_entry(make_entry(tags=["a"]))
        assert backend.writes == ["journal_entries"]

    def test_write_failure_leaves_memory_untouched(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        seen = []
        store.entries.subscribe(seen.append)
        backend.failing.add("journal_entries")

        with pytest.raises(PersistenceError) as exc_info:
            store.add_entry(make_entry())

        assert exc_info.value.key == "journal_entries"
        assert store.list_entries() == []
        assert seen == [()]

    @pytest.mark.parametrize("compress", [False, True])
    def test_unencodable_text_is_a_persistence_error(self, tmp_dir, make_entry, clock, compress):
        broken = codec.entry_to_dict(make_entry(content="<p>\ud83d</p>"))
        with open(os.path.join(tmp_dir, "journal_entries.json"), "w") as f:
            json.dump([broken], f)
        backend = LocalKeyValueStore(base_path=tmp_dir, compress=compress)
        store = JournalStore(backend, clock=clock)
        assert len(store.list_entries()) == 1

        with pytest.raises(PersistenceError) as exc_info:
            store.add_entry(make_entry())

        assert exc_info.value.key == "journal_entries"
        assert [e.id for e in store.list_entries()] == [broken["id"]]
        assert json.loads(backend.get("journal_entries")) == [broken]

    def test_unencodable_text_in_memory_backend(self, make_entry, clock):
        store = JournalStore(MemoryKeyValueStore(), clock=clock)
        with pytest.raises(PersistenceError):
            store.add_entry(make_entry(title="\ud83d"))
        assert store.list_entries() == []

    def test_tag_write_failure_aborts_before_entries(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        backend.failing.add("journal_tags")
        with pytest.raises(PersistenceError):
            store.add_entry(make_entry(tags=["new"]))
        assert backend.get("journal_entries") is None
        assert store.list_tags() == []

    def test_draft_clear_failure_reports_draft_key(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        backend.failing.add("journal_draft")
        entry = make_entry()
        with pytest.raises(PersistenceError) as exc_info:
            store.add_entry(entry)
        assert exc_info.value.key == "journal_draft"
        # The entry itself was saved.
        assert store.get_entry(entry.id) is not None

    def test_quota_exceeded(self, make_entry, clock):
        store = JournalStore(MemoryKeyValueStore(quota_bytes=50), clock=clock)
        with pytest.raises(PersistenceError):
            store.add_entry(make_entry(content="x" * 500))
        assert store.list_entries() == []

    def test_emits_event(self, backend, make_entry, clock):
        bus = EventBus()
        names = []
        bus.on_all(lambda e: names.append(e.name))
        store = JournalStore(backend, bus=bus, clock=clock)
        store.add_entry(make_entry())
        assert names == [ENTRY_ADDED]


class TestUpdateAndDelete:
    def test_update_stamps_last_edited(self, store, backend, make_entry, clock):
        entry = store.add_entry(make_entry(content="one"))
        clock.now += timedelta(hours=1)

        updated = store.update_entry(_edited(entry, content="<p>one two</p>"))

        assert updated.last_edited == clock.now
        assert updated.word_count == 2
        assert store.get_entry(entry.id).content == "<p>one two</p>"
        assert _stored(backend, "journal_entries")[0]["lastEdited"] == clock.now.isoformat()

    def test_update_keeps_position(self, store, make_entry):
        a = store.add_entry(make_entry(date=datetime(2024, 1, 1)))
        b = store.add_entry(make_entry(date=datetime(2024, 1, 2)))
        store.update_entry(_edited(a, title="changed"))
        assert [e.id for e in store.list_entries(newest_first=False)] == [b.id, a.id]

    def test_update_unknown_id_is_ignored(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        assert store.update_entry(make_entry(id="ghost")) is None
        assert backend.writes == []

    def test_update_registers_new_tags(self, store, make_entry):
        entry = store.add_entry(make_entry())
        store.update_entry(_edited(entry, tags=["fresh"]))
        assert store.list_tags() == ["fresh"]

    def test_update_failure_keeps_old_version(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        entry = store.add_entry(make_entry(title="before"))
        backend.failing.add("journal_entries")
        with pytest.raises(PersistenceError):
            store.update_entry(_edited(entry, title="after"))
        assert store.get_entry(entry.id).title == "before"

    def test_delete(self, backend, make_entry, clock):
        bus = EventBus()
        names = []
        bus.on_all(lambda e: names.append(e.name))
        store = JournalStore(backend, bus=bus, clock=clock)
        entry = store.add_entry(make_entry())
        assert store.delete_entry(entry.id) is True
        assert store.list_entries() == []
        assert _stored(backend, "journal_entries") == []
        assert names == [ENTRY_ADDED, ENTRY_DELETED]

    def test_delete_unknown_writes_nothing(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        store.add_entry(make_entry())
        backend.writes.clear()
        assert store.delete_entry("ghost") is False
        assert backend.writes == []

    def test_update_event(self, backend, make_entry, clock):
        bus = EventBus()
        names = []
        bus.on(ENTRY_UPDATED, lambda e: names.append(e.payload["id"]))
        store = JournalStore(backend, bus=bus, clock=clock)
        entry = store.add_entry(make_entry())
        store.update_entry(entry)
        assert names == [entry.id]


class TestQueries:
    @pytest.fixture
    def populated(self, store, make_entry):
        store.add_entry(make_entry(id="a", title="Beach", mood="happy", date=datetime(2024, 3, 1, 9), tags=["sun"]))
        store.add_entry(make_entry(id="b", title="Rain", mood="sad", date=datetime(2024, 3, 2, 18), tags=["home"]))
        store.add_entry(make_entry(id="c", title="Work", mood="tired", date=datetime(2024, 3, 3, 23), tags=["sun"]))
        return store

    def test_entries_between_is_inclusive(self, populated):
        found = populated.entries_between(datetime(2024, 3, 1, 9), datetime(2024, 3, 2, 18))
        assert [e.id for e in found] == ["b", "a"]

    def test_entries_with_tag(self, populated):
        assert [e.id for e in populated.entries_with_tag("sun")] == ["c", "a"]
        assert populated.entries_with_tag("Sun") == []

    def test_entries_with_mood(self, populated):
        assert [e.id for e in populated.entries_with_mood("SAD")] == ["b"]

    def test_search(self, populated):
        assert [e.id for e in populated.search("beach")] == ["a"]
        assert [e.id for e in populated.search("")] == ["c", "b", "a"]


class TestTags:
    def test_add_tags(self, store):
        store.add_tags(["x", "y", "x"])
        store.add_tags(["y", "z"])
        assert store.list_tags() == ["x", "y", "z"]

    def test_tags_channel(self, store):
        seen = []
        store.tags.subscribe(seen.append)
        store.add_tags(["x"])
        assert seen == [(), ("x",)]

    def test_delete_tag_strips_entries(self, backend, make_entry, clock):
        bus = EventBus()
        events = []
        bus.on(TAG_DELETED, lambda e: events.append(e.payload))
        store = JournalStore(backend, bus=bus, clock=clock)
        store.add_entry(make_entry(id="a", tags=["x", "y"]))
        store.add_entry(make_entry(id="b", tags=["y"]))

        assert store.delete_tag("y") is True

        assert store.list_tags() == ["x"]
        assert store.get_entry("a").tags == ["x"]
        assert store.get_entry("b").tags == []
        assert _stored(backend, "journal_tags") == ["x"]
        assert all("y" not in e["tags"] for e in _stored(backend, "journal_entries"))
        assert events == [{"tag": "y", "entries_changed": 2}]

    def test_delete_unknown_tag(self, store):
        assert store.delete_tag("nope") is False

    def test_delete_tag_writes_entries_before_registry(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        store.add_entry(make_entry(tags=["y"]))
        backend.writes.clear()
        store.delete_tag("y")
        assert backend.writes == ["journal_entries", "journal_tags"]

    def test_registry_failure_keeps_registry_superset(self, make_entry, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        entry = store.add_entry(make_entry(tags=["y"]))
        backend.failing.add("journal_tags")
        with pytest.raises(PersistenceError):
            store.delete_tag("y")
        assert store.get_entry(entry.id).tags == []
        assert store.list_tags() == ["y"]
        assert _stored(backend, "journal_tags") == ["y"]


class TestSettings:
    def test_update_replaces_and_publishes(self, store, backend):
        seen = []
        store.settings.subscribe(seen.append)
        new = UserSettings(theme="sepia", autosave_interval=1000)

        saved = store.update_settings(new)

        assert saved.theme == "sepia"
        assert saved.autosave_interval == 300
        assert seen[-1].theme == "sepia"
        assert _stored(backend, "journal_settings")["autosaveInterval"] == 300

    def test_returned_settings_are_copies(self, store):
        settings = store.get_settings()
        settings.writing_goals.daily = 1
        assert store.get_settings().writing_goals.daily == 500

    def test_failed_write_keeps_previous(self, clock):
        backend = FailingStore()
        store = JournalStore(backend, clock=clock)
        backend.failing.add("journal_settings")
        with pytest.raises(PersistenceError):
            store.update_settings(UserSettings(theme="dark"))
        assert store.get_settings().theme == "light"


class TestDraft:
    def test_save_stamps_last_saved(self, store, backend, clock):
        saved = store.save_draft(JournalDraft(id="draft-1", title="wip"))
        assert saved.last_saved == clock.now
        assert _stored(backend, "journal_draft")["title"] == "wip"
        assert store.get_draft() == saved

    def test_single_slot(self, store):
        store.save_draft(JournalDraft(id="draft-1", title="first"))
        store.save_draft(JournalDraft(id="draft-2", title="second"))
        assert store.get_draft().id == "draft-2"

    def test_clear(self, backend, clock):
        bus = EventBus()
        names = []
        bus.on(DRAFT_CLEARED, lambda e: names.append(e.name))
        store = JournalStore(backend, bus=bus, clock=clock)
        store.clear_draft()
        assert names == []
        store.save_draft(JournalDraft(title="wip"))
        store.clear_draft()
        assert store.get_draft() is None
        assert backend.get("journal_draft") is None
        assert names == [DRAFT_CLEARED]

    def test_survives_restart(self, tmp_dir, clock):
        store = JournalStore(LocalKeyValueStore(base_path=tmp_dir), clock=clock)
        store.save_draft(JournalDraft(id="draft-1", title="wip", mood="anxious"))
        reopened = JournalStore(LocalKeyValueStore(base_path=tmp_dir), clock=clock)
        assert reopened.get_draft().title == "wip"
        assert reopened.get_draft().last_saved == clock.now


class TestPersistenceAcrossInstances:
    def test_everything_round_trips(self, tmp_dir, make_entry, clock):
        store = JournalStore(LocalKeyValueStore(base_path=tmp_dir, compress=True), clock=clock)
        a = store.add_entry(make_entry(tags=["t1"], is_gratitude_entry=True, gratitude_items=["tea"]))
        store.update_settings(UserSettings(theme="ocean", show_prompts=False))

        reopened = JournalStore(LocalKeyValueStore(base_path=tmp_dir, compress=True), clock=clock)
        assert reopened.list_entries() == [a]
        assert reopened.list_tags() == ["t1"]
        assert reopened.get_settings() == store.get_settings()


class TestJanuaryWalkthrough:
    def test_calendar_and_filter_over_stored_entries(self, store, make_entry):
        store.add_entry(make_entry(id="jan5", mood="happy", date=datetime(2024, 1, 5, 8, 15)))
        store.add_entry(make_entry(id="jan20", mood="sad", date=datetime(2024, 1, 20, 21, 40)))

        grid = build_month(store.list_entries(), 2024, 1, today=date(2024, 1, 20))
        assert len(grid) == 35
        assert grid[0].other_month and grid[0].date == date(2023, 12, 31)

        days = {cell.date: cell for cell in grid}
        assert [e.id for e in days[date(2024, 1, 5)].entries] == ["jan5"]
        assert days[date(2024, 1, 5)].moods == [Mood.HAPPY]
        assert days[date(2024, 1, 20)].moods == [Mood.SAD]
        assert days[date(2024, 1, 20)].is_today
        assert [cell.day for cell in grid if cell.has_entries] == [5, 20]

        sad = filter_entries(store.list_entries(), mood="sad")
        assert [e.id for e in sad] == ["jan20"]
        assert [e.id for e in filter_entries(store.list_entries(), start_date=date(2024, 1, 6))] == ["jan20"]
