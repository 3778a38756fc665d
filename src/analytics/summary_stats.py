"""
Per-period summary statistics
=============================
Average sleep duration, average day rating and best/worst sleep-quality
days for one user's entries.

Ties at the best or worst quality are all kept: a strictly better (or worse)
rating resets the list, an equal rating appends to it.
"""

from __future__ import annotations

from typing import List, Sequence

from analytics.duration import effective_duration_hours
from models import Entry, SleepSummaryDay, Summary

# Outside the 1-10 rating range so the first entry always replaces them.
_BEST_START = 0
_WORST_START = 11


def summarize(entries: Sequence[Entry]) -> Summary:
    if not entries:
        return Summary()

    total_hours = 0.0
    best_quality = _BEST_START
    worst_quality = _WORST_START
    best_days: List[SleepSummaryDay] = []
    worst_days: List[SleepSummaryDay] = []
    rating_total = 0
    rating_count = 0

    for entry in entries:
        total_hours += effective_duration_hours(entry)

        day = SleepSummaryDay(date=entry.entry_date.isoformat(), quality_rating=entry.quality_rating)
        if entry.quality_rating > best_quality:
            best_quality = entry.quality_rating
            best_days = [day]
        elif entry.quality_rating == best_quality:
            best_days.append(day)

        if entry.quality_rating < worst_quality:
            worst_quality = entry.quality_rating
            worst_days = [day]
        elif entry.quality_rating == worst_quality:
            worst_days.append(day)

        if entry.day_rating is not None:
            rating_total += entry.day_rating
            rating_count += 1

    return Summary(
        average_sleep_duration_hours=total_hours / len(entries),
        average_day_rating=(rating_total / rating_count) if rating_count else None,
        best_sleep_days=best_days,
        worst_sleep_days=worst_days,
    )
