"""Multi-criterion search and filtering over journal entries.

Pure functions over an entry snapshot. Every criterion in a
:class:`FilterSpec` is optional, and all criteria present must match
(logical AND). Results are always newest-first.

Example::

    spec = FilterSpec(query="beach", mood=Mood.HAPPY, start_date=date(2024, 6, 1))
    results = filter_entries(store.list_entries(), spec)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from daybook.core.utils.text import strip_html

from .models import JournalEntry, Mood, parse_mood

PREVIEW_LENGTH = 150


@dataclass
class FilterSpec:
    """Search criteria.

    Attributes:
        query: Case-insensitive substring matched against title, visible
            content text, and tags.
        mood: Exact mood.
        tag: Exact (case-sensitive) tag.
        start_date: First day included. Time of day is ignored.
        end_date: Last day included. Time of day is ignored.
    """

    query: str = ""
    mood: Mood | str | None = None
    tag: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def last_days(cls, days: int = 30, today: date | None = None, **criteria) -> FilterSpec:
        """Criteria covering the last *days* days up to and including *today*."""
        today = _as_date(today or datetime.now())
        return cls(start_date=today - timedelta(days=days), end_date=today, **criteria)

    @property
    def is_empty(self) -> bool:
        return not (
            (self.query or "").strip() or self.mood or (self.tag or "").strip() or self.start_date or self.end_date
        )


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_start(value: date | datetime) -> datetime:
    """00:00:00.000000 on the calendar day of *value*."""
    return datetime.combine(_as_date(value), time.min)


def day_end(value: date | datetime) -> datetime:
    """23:59:59.999999 on the calendar day of *value*."""
    return datetime.combine(_as_date(value), time.max)


def matches_query(entry: JournalEntry, query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    if needle in entry.title.lower():
        return True
    if needle in strip_html(entry.content).lower():
        return True
    return any(needle in tag.lower() for tag in entry.tags)


def sort_newest_first(entries: Iterable[JournalEntry]) -> list[JournalEntry]:
    """Sort by date descending. Entries with equal dates keep their relative order."""
    return sorted(entries, key=lambda e: e.date, reverse=True)


def filter_entries(entries: Iterable[JournalEntry], spec: FilterSpec | None = None, **criteria) -> list[JournalEntry]:
    """Apply *spec* (or keyword criteria) to *entries* and return matches newest-first.

    Never raises on odd criteria: a range whose end precedes its start just
    matches nothing.
    """
    if spec is None:
        spec = FilterSpec(**criteria)
    elif criteria:
        raise TypeError("Pass either a FilterSpec or keyword criteria, not both")

    results = list(entries)

    query = (spec.query or "").strip()
    if query:
        results = [e for e in results if matches_query(e, query)]

    if spec.mood:
        mood = str(parse_mood(spec.mood))
        results = [e for e in results if str(e.mood) == mood]

    tag = (spec.tag or "").strip()
    if tag:
        results = [e for e in results if tag in e.tags]

    if spec.start_date:
        start = day_start(spec.start_date)
        results = [e for e in results if e.date >= start]

    if spec.end_date:
        end = day_end(spec.end_date)
        results = [e for e in results if e.date <= end]

    return sort_newest_first(results)


def content_preview(html: str, max_length: int = PREVIEW_LENGTH) -> str:
    """First *max_length* characters of the visible text of *html*."""
    text = strip_html(html)
    return text[:max_length] if len(text) > max_length else text
