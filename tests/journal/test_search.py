"""Tests for daybook.journal.search."""

from datetime import date, datetime

import pytest

from daybook.journal.models import Mood
from daybook.journal.search import (
    FilterSpec,
    content_preview,
    day_end,
    day_start,
    filter_entries,
    matches_query,
    sort_newest_first,
)


@pytest.fixture
def entries(make_entry):
    return [
        make_entry(id="beach", title="Beach Day", content="<p>Sand <b>castles</b></p>", mood="happy",
                   date=datetime(2024, 6, 1, 10), tags=["Summer"]),
        make_entry(id="rain", title="Rainy", content="<p>Stayed in with a book</p>", mood="sad",
                   date=datetime(2024, 6, 3, 23, 59), tags=["home"]),
        make_entry(id="gym", title="Workout", content="<p>Leg day</p>", mood="motivated",
                   date=datetime(2024, 6, 5, 0, 0), tags=["health", "Summer"]),
    ]


def _ids(results):
    return [e.id for e in results]


class TestFilterEntries:
    def test_no_criteria_returns_all_newest_first(self, entries):
        assert _ids(filter_entries(entries)) == ["gym", "rain", "beach"]

    def test_query_matches_title_case_insensitive(self, entries):
        assert _ids(filter_entries(entries, query="beach")) == ["beach"]

    def test_query_matches_visible_content_only(self, entries):
        assert _ids(filter_entries(entries, query="castles")) == ["beach"]
        # Markup is not searchable text.
        assert filter_entries(entries, query="<b>") == []

    def test_query_matches_tags(self, entries):
        assert _ids(filter_entries(entries, query="summer")) == ["gym", "beach"]

    def test_mood(self, entries):
        assert _ids(filter_entries(entries, mood=Mood.SAD)) == ["rain"]
        assert _ids(filter_entries(entries, mood="Motivated")) == ["gym"]

    def test_tag_is_exact(self, entries):
        assert _ids(filter_entries(entries, tag="Summer")) == ["gym", "beach"]
        assert filter_entries(entries, tag="summer") == []

    def test_date_range_covers_whole_days(self, entries):
        spec = FilterSpec(start_date=date(2024, 6, 3), end_date=date(2024, 6, 3))
        assert _ids(filter_entries(entries, spec)) == ["rain"]

    def test_open_ended_ranges(self, entries):
        assert _ids(filter_entries(entries, start_date=date(2024, 6, 4))) == ["gym"]
        assert _ids(filter_entries(entries, end_date=date(2024, 6, 1))) == ["beach"]

    def test_inverted_range_matches_nothing(self, entries):
        assert filter_entries(entries, start_date=date(2024, 6, 5), end_date=date(2024, 6, 1)) == []

    def test_criteria_combine_with_and(self, entries):
        spec = FilterSpec(query="day", tag="Summer", mood="happy")
        assert _ids(filter_entries(entries, spec)) == ["beach"]

    def test_blank_criteria_are_ignored(self, entries):
        assert len(filter_entries(entries, query="   ", tag=" ")) == 3

    def test_spec_and_kwargs_conflict(self, entries):
        with pytest.raises(TypeError):
            filter_entries(entries, FilterSpec(), query="x")


class TestFilterSpec:
    def test_is_empty(self):
        assert FilterSpec().is_empty
        assert FilterSpec(query="  ").is_empty
        assert not FilterSpec(mood="sad").is_empty

    def test_last_days(self):
        spec = FilterSpec.last_days(7, today=date(2024, 6, 10), tag="x")
        assert spec.start_date == date(2024, 6, 3)
        assert spec.end_date == date(2024, 6, 10)
        assert spec.tag == "x"


class TestHelpers:
    def test_day_bounds(self):
        assert day_start(datetime(2024, 1, 2, 15)) == datetime(2024, 1, 2)
        assert day_end(date(2024, 1, 2)) == datetime(2024, 1, 2, 23, 59, 59, 999999)

    def test_matches_empty_query(self, make_entry):
        assert matches_query(make_entry(), "")

    def test_sort_is_stable(self, make_entry):
        same = datetime(2024, 1, 1)
        a, b = make_entry(date=same), make_entry(date=same)
        assert sort_newest_first([a, b]) == [a, b]

    def test_content_preview(self):
        text = "<p>" + "word " * 100 + "</p>"
        preview = content_preview(text)
        assert len(preview) == 150
        assert "<" not in preview
        assert content_preview("<p>short</p>") == "short"
