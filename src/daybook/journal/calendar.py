"""Month-grid projection of journal entries.

:func:`build_month` is a pure function: give it an entry snapshot and a
(year, month) and it returns the day cells of a calendar grid. Months are
1-based (January is 1). The grid starts on ``first_weekday`` (Sunday by
default), begins with the trailing days of the previous month, and ends
with enough days of the next month to complete the last week.

:class:`MonthCursor` holds the navigation state of a calendar view.
"""

from __future__ import annotations

import calendar as _calendar
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .models import JournalEntry, Mood

SUNDAY = _calendar.SUNDAY
MONDAY = _calendar.MONDAY
GRID_CELLS = 42


@dataclass
class CalendarDay:
    """One cell of the month grid."""

    day: int
    date: date
    other_month: bool
    is_today: bool
    entries: list[JournalEntry] = field(default_factory=list)
    moods: list[Mood | str] = field(default_factory=list)

    @property
    def has_entries(self) -> bool:
        return bool(self.entries)


def weekday_headers(first_weekday: int = SUNDAY) -> list[str]:
    """Abbreviated weekday names in grid column order."""
    return [_calendar.day_abbr[(first_weekday + i) % 7] for i in range(7)]


def _distinct_moods(entries: Iterable[JournalEntry]) -> list[Mood | str]:
    moods: list[Mood | str] = []
    for entry in entries:
        if entry.mood not in moods:
            moods.append(entry.mood)
    return moods


def entries_by_day(entries: Iterable[JournalEntry]) -> dict[date, list[JournalEntry]]:
    """Group entries by calendar date, each day's list in chronological order."""
    buckets: dict[date, list[JournalEntry]] = defaultdict(list)
    for entry in sorted(entries, key=lambda e: e.date):
        buckets[entry.date.date()].append(entry)
    return buckets


def build_month(
    entries: Iterable[JournalEntry],
    year: int,
    month: int,
    *,
    today: date | None = None,
    first_weekday: int = SUNDAY,
    fill_six_rows: bool = False,
) -> list[CalendarDay]:
    """Project *entries* onto the grid for *year*/*month*.

    The result length is always a multiple of 7, and every day of the month
    appears exactly once with ``other_month=False``. With ``fill_six_rows``
    the grid is padded to 42 cells so every month has the same height.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    first = date(year, month, 1)
    days_in_month = _calendar.monthrange(year, month)[1]
    leading = (first.weekday() - first_weekday) % 7
    cells = leading + days_in_month
    cells += -cells % 7
    if fill_six_rows:
        cells = max(cells, GRID_CELLS)

    buckets = entries_by_day(entries)
    start = first - timedelta(days=leading)
    grid: list[CalendarDay] = []
    for offset in range(cells):
        current = start + timedelta(days=offset)
        day_entries = buckets.get(current, [])
        grid.append(
            CalendarDay(
                day=current.day,
                date=current,
                other_month=(current.year, current.month) != (year, month),
                is_today=current == today,
                entries=list(day_entries),
                moods=_distinct_moods(day_entries),
            )
        )
    return grid


@dataclass
class MonthCursor:
    """The month a calendar view shows, plus its selected day.

    Moving to another month drops the selection.
    """

    year: int
    month: int
    selected: CalendarDay | None = None

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")

    @classmethod
    def for_date(cls, value: date | None = None) -> MonthCursor:
        value = value or date.today()
        return cls(year=value.year, month=value.month)

    @property
    def month_name(self) -> str:
        return _calendar.month_name[self.month]

    @property
    def title(self) -> str:
        return f"{self.month_name} {self.year}"

    def next(self) -> MonthCursor:
        if self.month == 12:
            self.month = 1
            self.year += 1
        else:
            self.month += 1
        self.selected = None
        return self

    def previous(self) -> MonthCursor:
        if self.month == 1:
            self.month = 12
            self.year -= 1
        else:
            self.month -= 1
        self.selected = None
        return self

    def grid(self, entries: Iterable[JournalEntry], **options) -> list[CalendarDay]:
        return build_month(entries, self.year, self.month, **options)

    def select(self, day: CalendarDay | None) -> None:
        self.selected = day
