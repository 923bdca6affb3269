"""Core data models for the journal.

Entries, the single in-progress draft, and the user settings singleton.
These are plain dataclasses; persistence lives in :mod:`daybook.journal.codec`
and ownership in :class:`daybook.journal.store.JournalStore`.
"""

from __future__ import annotations

import secrets
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import NamedTuple

from daybook.core.utils.text import count_words, strip_html

AUTOSAVE_MIN_SECONDS = 5
AUTOSAVE_MAX_SECONDS = 300
DEFAULT_AUTOSAVE_SECONDS = 30


class Mood(StrEnum):
    HAPPY = "happy"
    CONTENT = "content"
    NEUTRAL = "neutral"
    SAD = "sad"
    ANGRY = "angry"
    MOTIVATED = "motivated"
    ANXIOUS = "anxious"
    GRATEFUL = "grateful"
    TIRED = "tired"
    EXCITED = "excited"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def emoji(self) -> str:
        return _MOOD_STYLE[self].emoji

    @property
    def color(self) -> str:
        return _MOOD_STYLE[self].color

    @property
    def score(self) -> int:
        """Position on the 1 (low) to 5 (high) scale used by the mood trend."""
        return _MOOD_STYLE[self].score


class _MoodStyle(NamedTuple):
    emoji: str
    color: str
    score: int


_MOOD_STYLE: dict[Mood, _MoodStyle] = {
    Mood.HAPPY: _MoodStyle("😀", "#4CAF50", 5),
    Mood.CONTENT: _MoodStyle("😊", "#8BC34A", 4),
    Mood.NEUTRAL: _MoodStyle("😐", "#FFC107", 3),
    Mood.SAD: _MoodStyle("😔", "#FF9800", 1),
    Mood.ANGRY: _MoodStyle("😡", "#F44336", 1),
    Mood.MOTIVATED: _MoodStyle("💪", "#3F51B5", 4),
    Mood.ANXIOUS: _MoodStyle("😰", "#9C27B0", 2),
    Mood.GRATEFUL: _MoodStyle("🙏", "#009688", 4),
    Mood.TIRED: _MoodStyle("😴", "#795548", 2),
    Mood.EXCITED: _MoodStyle("🤩", "#E91E63", 5),
}

UNKNOWN_MOOD_EMOJI = "❓"
UNKNOWN_MOOD_COLOR = "#CCCCCC"
NEUTRAL_SCORE = 3


def parse_mood(value: str | Mood) -> Mood | str:
    """Return the matching Mood, or the raw string if it isn't a known mood.

    Unknown moods survive a load/save cycle unchanged.
    """
    if isinstance(value, Mood):
        return value
    try:
        return Mood(str(value).strip().lower())
    except ValueError:
        return str(value)


def mood_emoji(mood: str) -> str:
    parsed = parse_mood(mood)
    return parsed.emoji if isinstance(parsed, Mood) else UNKNOWN_MOOD_EMOJI


def mood_color(mood: str) -> str:
    parsed = parse_mood(mood)
    return parsed.color if isinstance(parsed, Mood) else UNKNOWN_MOOD_COLOR


def mood_score(mood: str) -> int:
    parsed = parse_mood(mood)
    return parsed.score if isinstance(parsed, Mood) else NEUTRAL_SCORE


def as_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through.

    All journal timestamps are naive local times, so calendar-day matching and
    ordering never compare aware with naive values.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def new_entry_id() -> str:
    """Millisecond timestamp plus a short random suffix. Sorts roughly by creation."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def new_draft_id() -> str:
    return f"draft-{uuid.uuid4().hex}"


def unique_tags(tags) -> list[str]:
    """De-duplicate tags keeping first occurrence. Case-sensitive, blanks dropped."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def clean_gratitude_items(is_gratitude_entry: bool, items) -> list[str] | None:
    if not is_gratitude_entry:
        return None
    cleaned = [str(item).strip() for item in items or [] if str(item).strip()]
    return cleaned or None


def content_word_count(content: str) -> int:
    """Word count of rich-text content, measured on its visible text."""
    return count_words(strip_html(content))


@dataclass
class JournalEntry:
    """A single dated journal record.

    ``word_count`` is a cache derived from ``content``; the store recomputes
    it on every add and update. ``last_edited`` is only ever set by an update.
    """

    id: str
    title: str
    content: str
    mood: Mood | str
    date: datetime
    activities: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    word_count: int = 0
    is_gratitude_entry: bool = False
    gratitude_items: list[str] | None = None
    last_edited: datetime | None = None

    def __post_init__(self):
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("Entry title must be a non-empty string")
        if not self.mood:
            raise ValueError("Entry mood is required")
        if not isinstance(self.date, datetime):
            raise ValueError("Entry date must be a datetime")
        self.date = as_local_naive(self.date)
        if self.last_edited is not None:
            self.last_edited = as_local_naive(self.last_edited)
        self.mood = parse_mood(self.mood)
        self.content = self.content or ""
        self.activities = [str(a).strip() for a in self.activities or [] if str(a).strip()]
        self.tags = unique_tags(self.tags)
        self.gratitude_items = clean_gratitude_items(self.is_gratitude_entry, self.gratitude_items)

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        mood: Mood | str,
        *,
        date: datetime | None = None,
        activities: list[str] | None = None,
        tags: list[str] | None = None,
        is_gratitude_entry: bool = False,
        gratitude_items: list[str] | None = None,
    ) -> JournalEntry:
        """Build a brand-new entry with a fresh id and a computed word count."""
        return cls(
            id=new_entry_id(),
            title=title,
            content=content,
            mood=mood,
            date=date or datetime.now(),
            activities=activities or [],
            tags=tags or [],
            word_count=content_word_count(content),
            is_gratitude_entry=is_gratitude_entry,
            gratitude_items=gratitude_items,
        )

    @property
    def plain_text(self) -> str:
        return strip_html(self.content)

    def __repr__(self) -> str:
        return f"JournalEntry(id='{self.id}', date='{self.date.isoformat()}', mood='{self.mood}', title='{self.title}')"


@dataclass
class JournalDraft:
    """The single in-progress, not-yet-submitted entry."""

    id: str = field(default_factory=new_draft_id)
    title: str = ""
    content: str = ""
    mood: Mood | str | None = None
    activities: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    last_saved: datetime | None = None

    def __post_init__(self):
        if self.mood:
            self.mood = parse_mood(self.mood)
        else:
            self.mood = None
        if self.last_saved is not None:
            self.last_saved = as_local_naive(self.last_saved)

    @property
    def is_empty(self) -> bool:
        return not (self.title.strip() or strip_html(self.content) or self.mood or self.activities or self.tags)


@dataclass
class FontSettings:
    family: str = "Segoe UI, sans-serif"
    size: str = "medium"


@dataclass
class WritingGoals:
    """Word-count targets."""

    daily: int = 500
    weekly: int = 3000
    monthly: int = 12000


def clamp_autosave_interval(
    seconds, low: int = AUTOSAVE_MIN_SECONDS, high: int = AUTOSAVE_MAX_SECONDS
) -> int:
    try:
        value = int(seconds)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_AUTOSAVE_SECONDS
    return max(low, min(high, value))


@dataclass
class UserSettings:
    """User preferences. Exactly one instance is owned by the store."""

    theme: str = "light"
    font: FontSettings = field(default_factory=FontSettings)
    writing_goals: WritingGoals = field(default_factory=WritingGoals)
    show_prompts: bool = True
    autosave_interval: int = DEFAULT_AUTOSAVE_SECONDS

    def __post_init__(self):
        self.autosave_interval = clamp_autosave_interval(self.autosave_interval)

    @classmethod
    def default(cls) -> UserSettings:
        return cls()

    @property
    def is_dark(self) -> bool:
        return self.theme == "dark"
