"""Draft autosave: periodic and on-blur capture of the entry being composed.

The controller is either **idle** or **composing**. :meth:`DraftAutosaveController.begin`
opens a :class:`ComposeSession` with a fresh draft id and arms a repeating
timer. While composing, a timer tick or :meth:`~DraftAutosaveController.blur`
writes the current fields to the store's draft slot if anything changed
since the last save. :meth:`~DraftAutosaveController.submit` and
:meth:`~DraftAutosaveController.discard` end the session: the timer is
cancelled and the session is retired before the draft is cleared, and a
retired session never writes again.

Timers are pluggable through :class:`TimerFactory`:

* :class:`AsyncioTimerFactory`: ``loop.call_later`` on the running loop.
* :class:`APSchedulerTimerFactory`: an APScheduler ``AsyncIOScheduler``
  interval job. APScheduler is imported lazily.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol

from loguru import logger

from daybook.core.exceptions import PersistenceError

from .models import JournalDraft, JournalEntry, Mood, UserSettings, new_draft_id
from .store import JournalStore

# ── Timers ─────────────────────────────────────────────────────────


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerFactory(Protocol):
    def every(self, seconds: float, callback: Callable[[], None]) -> TimerHandle:
        """Call *callback* every *seconds* until the returned handle is cancelled."""
        ...


class _AsyncioRepeatingTimer:
    def __init__(self, loop: asyncio.AbstractEventLoop, seconds: float, callback: Callable[[], None]):
        self._loop = loop
        self._seconds = seconds
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.cancelled = False
        self._arm()

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._seconds, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        try:
            self._callback()
        except Exception as exc:
            logger.warning(f"Autosave timer callback failed: {exc}")
        if not self.cancelled:
            self._arm()

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioTimerFactory:
    """Repeating timers on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def every(self, seconds: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioRepeatingTimer(loop, seconds, callback)


class _APSchedulerJob:
    def __init__(self, job: Any):
        self._job = job

    def cancel(self) -> None:
        from apscheduler.jobstores.base import JobLookupError

        if self._job is None:
            return
        try:
            self._job.remove()
        except JobLookupError:
            pass
        self._job = None


class APSchedulerTimerFactory:
    """Repeating timers backed by an APScheduler ``AsyncIOScheduler``.

    The scheduler is created and started on first use, which must happen
    inside a running asyncio event loop. Ticks run on that loop's thread.
    Call :meth:`shutdown` at exit.
    """

    def __init__(self, timezone: str = "UTC"):
        self._timezone = timezone
        self._scheduler: Any = None

    def _ensure_started(self) -> Any:
        if self._scheduler is None:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler

            self._scheduler = AsyncIOScheduler(timezone=self._timezone)
            self._scheduler.start()
            logger.debug("Autosave scheduler started")
        return self._scheduler

    def every(self, seconds: float, callback: Callable[[], None]) -> TimerHandle:
        from apscheduler.triggers.interval import IntervalTrigger

        scheduler = self._ensure_started()

        # Coroutine jobs run on the loop thread; plain functions go to a thread pool.
        async def _tick() -> None:
            callback()

        job = scheduler.add_job(
            _tick,
            trigger=IntervalTrigger(seconds=seconds, timezone=self._timezone),
            max_instances=1,
            coalesce=True,
        )
        return _APSchedulerJob(job)

    def shutdown(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.debug("Autosave scheduler shut down")


# ── Session ────────────────────────────────────────────────────────


class ComposeState(StrEnum):
    IDLE = "idle"
    COMPOSING = "composing"


_FIELDS = ("title", "content", "mood", "activities", "tags", "date", "is_gratitude_entry", "gratitude_items")


@dataclass
class ComposeSession:
    """Field values of the entry being composed, tied to one draft id."""

    draft_id: str = field(default_factory=new_draft_id)
    title: str = ""
    content: str = ""
    mood: Mood | str | None = None
    activities: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    date: datetime | None = None
    is_gratitude_entry: bool = False
    gratitude_items: list[str] = field(default_factory=list)
    dirty: bool = False
    closed: bool = False
    saves: int = 0
    _timer: TimerHandle | None = field(default=None, init=False, repr=False)
    _submitting: bool = field(default=False, init=False, repr=False)

    def apply(self, **changes) -> None:
        for name, value in changes.items():
            if name not in _FIELDS:
                raise ValueError(f"Unknown compose field: {name}")
            if getattr(self, name) != value:
                setattr(self, name, value)
                self.dirty = True

    def reset(self) -> None:
        """Blank every field, keeping the draft id."""
        blank = ComposeSession(draft_id=self.draft_id)
        for name in _FIELDS:
            setattr(self, name, getattr(blank, name))
        self.dirty = False

    def to_draft(self) -> JournalDraft:
        return JournalDraft(
            id=self.draft_id,
            title=self.title,
            content=self.content,
            mood=self.mood,
            activities=list(self.activities),
            tags=list(self.tags),
        )

    def to_entry(self) -> JournalEntry:
        """Build the entry to submit. Raises ValueError if a required field is blank."""
        if not self.content.strip():
            raise ValueError("Entry content is required")
        return JournalEntry.create(
            title=self.title,
            content=self.content,
            mood=self.mood or "",
            date=self.date,
            activities=list(self.activities),
            tags=list(self.tags),
            is_gratitude_entry=self.is_gratitude_entry,
            gratitude_items=list(self.gratitude_items),
        )

    def _retire(self) -> None:
        self.closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


# ── Controller ─────────────────────────────────────────────────────


class DraftAutosaveController:
    """Feeds the store's draft slot from the entry form.

    Args:
        store: The journal store; its settings supply the autosave interval.
        timers: Timer source. Defaults to :class:`AsyncioTimerFactory`.
    """

    def __init__(self, store: JournalStore, timers: TimerFactory | None = None):
        self._store = store
        self._timers = timers or AsyncioTimerFactory()
        self._session: ComposeSession | None = None
        self._interval = store.config.clamp_interval(store.get_settings().autosave_interval)
        self._settings_sub = store.settings.subscribe(self._on_settings)

    @property
    def state(self) -> ComposeState:
        return ComposeState.COMPOSING if self._session is not None else ComposeState.IDLE

    @property
    def session(self) -> ComposeSession | None:
        return self._session

    @property
    def interval(self) -> int:
        return self._interval

    # -- lifecycle ----------------------------------------------------------

    def begin(self) -> ComposeSession:
        """Start composing a new entry with a freshly minted draft id."""
        if self._session is not None:
            logger.debug(f"Replacing open compose session {self._session.draft_id}")
            self._session._retire()
        session = ComposeSession()
        self._open(session)
        return session

    def resume(self) -> ComposeSession | None:
        """Start a session seeded from the persisted draft, if there is one."""
        draft = self._store.get_draft()
        if draft is None:
            return None
        session = self.begin()
        session.title = draft.title
        session.content = draft.content
        session.mood = draft.mood
        session.activities = list(draft.activities)
        session.tags = list(draft.tags)
        logger.info(f"Recovered draft last saved {draft.last_saved}")
        return session

    def _open(self, session: ComposeSession) -> None:
        self._session = session
        session._timer = self._timers.every(self._interval, lambda: self._autosave(session))
        logger.debug(f"Compose session {session.draft_id} started, autosave every {self._interval}s")

    def _end(self, session: ComposeSession) -> None:
        session._retire()
        if self._session is session:
            self._session = None

    def dispose(self) -> None:
        """Tear down: cancel the timer and stop watching settings. The draft is kept."""
        if self._session is not None:
            self._end(self._session)
        self._settings_sub.close()

    # -- field input --------------------------------------------------------

    def update(self, **changes) -> None:
        self._require_session().apply(**changes)

    def blur(self) -> bool:
        """Focus left the form: save now if anything changed."""
        if self._session is None:
            return False
        return self._autosave(self._session)

    def save_now(self) -> JournalDraft | None:
        session = self._require_session()
        session.dirty = True
        self._autosave(session)
        return self._store.get_draft()

    def _autosave(self, session: ComposeSession) -> bool:
        if session.closed or session._submitting or session is not self._session:
            return False
        if not session.dirty:
            return False
        try:
            self._store.save_draft(session.to_draft())
        except PersistenceError as e:
            logger.warning(f"Autosave failed, will retry on next tick: {e}")
            return False
        session.dirty = False
        session.saves += 1
        return True

    # -- endings ------------------------------------------------------------

    def submit(self) -> JournalEntry:
        """Turn the session into an entry, add it to the store, and go idle.

        Raises:
            ValueError: If a required field is blank. The session stays open.
            PersistenceError: If the entry could not be saved. The session
                stays open unless only the draft clear failed.
        """
        session = self._require_session()
        entry = session.to_entry()
        session._submitting = True
        try:
            stored = self._store.add_entry(entry)
        except PersistenceError as e:
            if e.key == self._store.config.keys.draft:
                self._end(session)
            else:
                session._submitting = False
            raise
        self._end(session)
        logger.info(f"Submitted entry {stored.id} from draft {session.draft_id}")
        return stored

    def discard(self) -> None:
        """Drop the composition: retire the session, then clear the draft."""
        session = self._require_session()
        self._end(session)
        self._store.clear_draft()
        session.reset()

    # -- internals ----------------------------------------------------------

    def _require_session(self) -> ComposeSession:
        if self._session is None:
            raise RuntimeError("No compose session is open; call begin() first")
        return self._session

    def _on_settings(self, settings: UserSettings) -> None:
        interval = self._store.config.clamp_interval(settings.autosave_interval)
        if interval == self._interval:
            return
        self._interval = interval
        session = self._session
        if session is not None and not session.closed:
            if session._timer is not None:
                session._timer.cancel()
            session._timer = self._timers.every(interval, lambda: self._autosave(session))
            logger.debug(f"Autosave interval changed to {interval}s")
