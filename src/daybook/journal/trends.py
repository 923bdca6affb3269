"""Mood trend series and writing-goal progress.

Chart rendering happens elsewhere; these functions only shape the data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .models import JournalEntry, Mood, WritingGoals, mood_score

MIN_TREND_POINTS = 2


@dataclass
class MoodPoint:
    label: str
    date: datetime
    mood: Mood | str
    score: int


def mood_trend(entries: Iterable[JournalEntry]) -> list[MoodPoint]:
    """One point per entry, oldest first, scored on the 1-5 mood scale.

    Returns an empty list when there are fewer than two entries, since a
    single point draws no trend.
    """
    ordered = sorted(entries, key=lambda e: e.date)
    if len(ordered) < MIN_TREND_POINTS:
        return []
    return [
        MoodPoint(
            label=f"{e.date:%b} {e.date.day}",
            date=e.date,
            mood=e.mood,
            score=mood_score(e.mood),
        )
        for e in ordered
    ]


def average_mood(entries: Iterable[JournalEntry]) -> float | None:
    scores = [mood_score(e.mood) for e in entries]
    if not scores:
        return None
    return sum(scores) / len(scores)


@dataclass
class GoalProgress:
    period: str
    words: int
    target: int

    @property
    def ratio(self) -> float:
        if self.target <= 0:
            return 1.0
        return min(1.0, self.words / self.target)

    @property
    def met(self) -> bool:
        return self.words >= self.target


def writing_progress(
    entries: Iterable[JournalEntry], goals: WritingGoals, today: date | None = None
) -> dict[str, GoalProgress]:
    """Words written today, this week (Monday start) and this month against *goals*."""
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    week_start = today - timedelta(days=today.weekday())

    daily = weekly = monthly = 0
    for entry in entries:
        day = entry.date.date()
        if day > today:
            continue
        if day == today:
            daily += entry.word_count
        if week_start <= day:
            weekly += entry.word_count
        if (day.year, day.month) == (today.year, today.month):
            monthly += entry.word_count

    return {
        "daily": GoalProgress("daily", daily, goals.daily),
        "weekly": GoalProgress("weekly", weekly, goals.weekly),
        "monthly": GoalProgress("monthly", monthly, goals.monthly),
    }
