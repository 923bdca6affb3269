"""Journal data layer.

Provides the entry/draft/settings models, the persisted and observable
:class:`JournalStore`, draft autosave, and pure projections (calendar grid,
search/filter, mood trend) over store snapshots.
"""

from .autosave import (
    APSchedulerTimerFactory,
    AsyncioTimerFactory,
    ComposeSession,
    ComposeState,
    DraftAutosaveController,
)
from .calendar import CalendarDay, MonthCursor, build_month
from .config import JournalConfig, StorageKeys
from .models import FontSettings, JournalDraft, JournalEntry, Mood, UserSettings, WritingGoals
from .prompts import PromptLibrary, Quote
from .search import FilterSpec, filter_entries
from .store import JournalStore
from .themes import ThemeController
from .trends import MoodPoint, mood_trend, writing_progress

__all__ = [
    "APSchedulerTimerFactory",
    "AsyncioTimerFactory",
    "CalendarDay",
    "ComposeSession",
    "ComposeState",
    "DraftAutosaveController",
    "FilterSpec",
    "FontSettings",
    "JournalConfig",
    "JournalDraft",
    "JournalEntry",
    "JournalStore",
    "Mood",
    "MonthCursor",
    "MoodPoint",
    "PromptLibrary",
    "Quote",
    "StorageKeys",
    "ThemeController",
    "UserSettings",
    "WritingGoals",
    "build_month",
    "filter_entries",
    "mood_trend",
    "writing_progress",
]
