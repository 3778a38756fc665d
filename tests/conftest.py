"""
Shared test configuration.

Adds both the project root and src/ to sys.path so that flat modules
(insight_service, correlation_engine, ...) import with plain `import x`,
and provides entry factories plus an in-memory store.
"""

import os
import sys
from datetime import date, datetime, timedelta

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

if _src_dir not in sys.path:
    sys.path.insert(1, _src_dir)

from models import Entry  # noqa: E402


def make_entry(
    day="2025-03-04",
    bedtime=None,
    wake=None,
    hours=None,
    quality=7,
    rating=7,
    mood="Neutral",
    entry_id=None,
    user_id="user-1",
):
    """Build an Entry for `day`; sleep defaults to 23:00 -> 07:00 the next morning."""
    d = date.fromisoformat(day)
    bedtime = bedtime or datetime(d.year, d.month, d.day, 23, 0) - timedelta(days=1)
    wake = wake or datetime(d.year, d.month, d.day, 7, 0)
    return Entry(
        id=entry_id or f"e-{day}-{quality}-{rating}",
        user_id=user_id,
        bedtime=bedtime,
        wake_up_time=wake,
        duration_hours=hours,
        quality_rating=quality,
        entry_date=d,
        day_rating=rating,
        mood=mood,
    )


class FakeStore:
    """In-memory EntryStore that records every query."""

    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.calls = []

    def query_by_user_and_window(self, user_id, start=None, end=None):
        self.calls.append((user_id, start, end))
        return [
            e for e in self.entries
            if e.user_id == user_id
            and (start is None or e.entry_date >= start)
            and (end is None or e.entry_date <= end)
        ]


class FakeNarrator:
    def __init__(self, text="Longer nights line up with better days.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def narrate(self, entries):
        self.calls.append(("correlation", list(entries)))
        if self.error is not None:
            raise self.error
        return self.text

    def narrate_overview(self, entries):
        self.calls.append(("overview", list(entries)))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def week_of_entries():
    return [
        make_entry("2025-03-01", hours=6.0, quality=5, rating=4, mood="Tired"),
        make_entry("2025-03-02", hours=7.0, quality=8, rating=6, mood="Neutral"),
        make_entry("2025-03-03", hours=8.0, quality=8, rating=8, mood="Happy"),
        make_entry("2025-03-04", hours=7.5, quality=3, rating=None, mood=None),
    ]
