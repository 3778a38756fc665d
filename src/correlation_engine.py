"""
Sleep / Day-Rating Correlation Engine
=====================================
Pairs each day's sleep duration with that day's rating and computes the
Pearson correlation coefficient over the pairs.

Degenerate inputs are output states, never exceptions:
  • fewer than 2 finite pairs  -> r = 0, no data points
  • zero variance in either axis -> r = 0, data points kept

Two input shapes are supported:
  • combined entries (one record per day, keyed by entry_date)
  • the legacy two-table shape (separate sleep and wellbeing records),
    merged on calendar date. Sleep records are keyed on the wake-up date.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from analytics.duration import effective_duration_hours
from models import CorrelationDataPoint, CorrelationResult, Entry

log = logging.getLogger("correlation_engine")


# ═══════════════════════════════════════════════════════════
#  CONSTANTS
# ═══════════════════════════════════════════════════════════

MIN_PAIRS = 2
COEFFICIENT_PRECISION = 4
DURATION_PRECISION = 2


# ═══════════════════════════════════════════════════════════
#  PEARSON
# ═══════════════════════════════════════════════════════════

def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def pearson(points: Iterable[CorrelationDataPoint], precision: int = COEFFICIENT_PRECISION) -> CorrelationResult:
    """Pearson r between sleep_duration (x) and day_rating (y)."""
    valid = [
        p for p in points
        if _is_finite_number(p.sleep_duration) and _is_finite_number(p.day_rating)
    ]
    n = len(valid)
    if n < MIN_PAIRS:
        log.debug("Correlation undefined: %d valid pair(s)", n)
        return CorrelationResult(correlation_coefficient=0.0, data_points=[])

    mean_x = sum(p.sleep_duration for p in valid) / n
    mean_y = sum(p.day_rating for p in valid) / n

    num = 0.0
    den_x = 0.0
    den_y = 0.0
    for p in valid:
        dx = p.sleep_duration - mean_x
        dy = p.day_rating - mean_y
        num += dx * dy
        den_x += dx * dx
        den_y += dy * dy

    std_x = math.sqrt(den_x)
    std_y = math.sqrt(den_y)
    if std_x == 0 or std_y == 0:
        log.debug("Correlation undefined: zero variance over %d pairs", n)
        return CorrelationResult(correlation_coefficient=0.0, data_points=valid)

    r = num / (std_x * std_y)
    return CorrelationResult(correlation_coefficient=round(r, precision), data_points=valid)


# ═══════════════════════════════════════════════════════════
#  LEGACY TWO-TABLE PAIRING
# ═══════════════════════════════════════════════════════════

def _field(record: Any, *names: str) -> Any:
    for name in names:
        if isinstance(record, Mapping):
            if record.get(name) is not None:
                return record[name]
        elif getattr(record, name, None) is not None:
            return getattr(record, name)
    return None


def pair_legacy_series(
    sleep_records: Sequence[Any], wellbeing_records: Sequence[Any]
) -> List[CorrelationDataPoint]:
    """Merge separate sleep and wellbeing series on calendar date.

    A date present in only one series yields no point. When a series has
    several records for one date, the last record with a value wins and
    the date keeps the position of its first appearance. A later record
    with a missing rating does not erase an earlier one.
    """
    if not sleep_records or not wellbeing_records:
        return []

    sleep = pd.DataFrame({
        "bedtime": pd.to_datetime([_field(r, "bedtime") for r in sleep_records], utc=True),
        "wake": pd.to_datetime([_field(r, "wakeUpTime", "wake_up_time") for r in sleep_records], utc=True),
    })
    hours = (sleep["wake"] - sleep["bedtime"]).dt.total_seconds() / 3600.0
    sleep["sleep_duration"] = hours.where(hours >= 0, hours + 24.0).round(DURATION_PRECISION)
    sleep["date"] = sleep["wake"].dt.strftime("%Y-%m-%d")

    wellbeing = pd.DataFrame({
        "date": pd.to_datetime(
            [_field(r, "entryDate", "entry_date") for r in wellbeing_records], utc=True
        ).strftime("%Y-%m-%d"),
        "day_rating": pd.to_numeric(
            pd.Series([_field(r, "dayRating", "day_rating") for r in wellbeing_records], dtype="object"),
            errors="coerce",
        ),
    })

    left = sleep[["date", "sleep_duration"]].groupby("date", sort=False).last()
    right = wellbeing.groupby("date", sort=False).last()
    merged = left.merge(right, left_index=True, right_index=True, how="inner")

    return [
        CorrelationDataPoint(sleep_duration=float(row.sleep_duration), day_rating=float(row.day_rating), date=day)
        for day, row in merged.iterrows()
    ]


# ═══════════════════════════════════════════════════════════
#  ENGINE
# ═══════════════════════════════════════════════════════════

class CorrelationEngine:
    """
    Stateless correlation computation over one user's entries.
    Never queries storage; callers pass the list they already loaded.
    """

    def __init__(self, precision: int = COEFFICIENT_PRECISION):
        self.precision = precision

    def pair_entries(self, entries: Sequence[Entry]) -> List[CorrelationDataPoint]:
        """One point per entry_date, in first-seen order; later entries overwrite."""
        by_day: Dict[str, CorrelationDataPoint] = {}
        for entry in entries:
            if entry.day_rating is None:
                continue
            day = entry.entry_date.isoformat()
            by_day[day] = CorrelationDataPoint(
                sleep_duration=round(effective_duration_hours(entry), DURATION_PRECISION),
                day_rating=entry.day_rating,
                date=day,
            )
        return list(by_day.values())

    def correlate(self, entries: Sequence[Entry]) -> CorrelationResult:
        points = self.pair_entries(entries)
        result = pearson(points, precision=self.precision)
        log.info(
            "Correlation computed: r=%.4f over %d point(s)",
            result.correlation_coefficient,
            len(result.data_points),
        )
        return result

    def correlate_legacy(
        self, sleep_records: Sequence[Any], wellbeing_records: Sequence[Any]
    ) -> CorrelationResult:
        """Correlation for data still in the separate sleep/wellbeing shape."""
        return pearson(pair_legacy_series(sleep_records, wellbeing_records), precision=self.precision)


def interpret(r: Optional[float]) -> str:
    """Coarse strength label for a coefficient."""
    if r is None:
        return "negligible"
    a = abs(r)
    return (
        "strong" if a > 0.7 else
        "moderate" if a > 0.4 else
        "weak" if a > 0.2 else "negligible"
    )
