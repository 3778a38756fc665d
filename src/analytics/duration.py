"""Sleep-duration derivation shared by the summary, correlation and chart layers."""

from __future__ import annotations

from models import Entry

HOURS_PER_DAY = 24.0


def effective_duration_hours(entry: Entry) -> float:
    """Stored duration if present, else wake minus bedtime.

    A negative difference means the wake-up happened on the next calendar
    day with only the clock time stored, so one day is added.
    """
    if entry.duration_hours is not None:
        return float(entry.duration_hours)
    hours = (entry.wake_up_time - entry.bedtime).total_seconds() / 3600.0
    if hours < 0:
        hours += HOURS_PER_DAY
    return hours
