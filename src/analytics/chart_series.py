"""Reshape entries into the three time-ordered series the dashboard charts."""

from __future__ import annotations

from typing import List, Optional, Sequence

from analytics.duration import effective_duration_hours
from models import MOOD_VALUES, ChartSeries, CorrelationResult, Entry, Mood, MoodChartItem, SleepChartItem

NEUTRAL_MOOD_VALUE = MOOD_VALUES[Mood.NEUTRAL.value]


def mood_value(mood: Optional[str]) -> int:
    """Numeric weight for a mood label; missing or unknown counts as Neutral."""
    if mood is None:
        return NEUTRAL_MOOD_VALUE
    return MOOD_VALUES.get(mood, NEUTRAL_MOOD_VALUE)


def month_day_label(entry: Entry) -> str:
    # "Mar 4", no zero padding
    d = entry.entry_date
    return f"{d.strftime('%b')} {d.day}"


def weekday_label(entry: Entry) -> str:
    return entry.entry_date.strftime("%a")


def _chronological(entries: Sequence[Entry]) -> List[Entry]:
    # sorted() is stable, so same-day entries keep store order
    return sorted(entries, key=lambda e: e.entry_date)


def build_mood_series(entries: Sequence[Entry]) -> List[MoodChartItem]:
    return [
        MoodChartItem(date=month_day_label(e), mood_value=mood_value(e.mood), mood=e.mood)
        for e in _chronological(entries)
    ]


def build_sleep_duration_series(entries: Sequence[Entry]) -> List[SleepChartItem]:
    return [
        SleepChartItem(date=weekday_label(e), sleep_duration=round(effective_duration_hours(e), 2))
        for e in _chronological(entries)
    ]


def build_chart_series(entries: Sequence[Entry], correlation: CorrelationResult) -> ChartSeries:
    """Build all three series; the correlation series reuses the engine's points."""
    return ChartSeries(
        mood_chart_data=build_mood_series(entries),
        sleep_duration_chart_data=build_sleep_duration_series(entries),
        correlation_chart_data=list(correlation.data_points),
    )
