"""
Tests for the correlation engine mathematical computations.

Covers: Pearson on known data, too-few-points, zero variance, finite
filtering, rounding, per-day pairing, and the legacy two-table merge.
"""

import math
from datetime import datetime

import pytest

from conftest import make_entry
from correlation_engine import (
    COEFFICIENT_PRECISION,
    CorrelationEngine,
    interpret,
    pair_legacy_series,
    pearson,
)
from models import CorrelationDataPoint


def _points(pairs):
    return [
        CorrelationDataPoint(sleep_duration=x, day_rating=y, date=f"2025-03-{i + 1:02d}")
        for i, (x, y) in enumerate(pairs)
    ]


# ─── pearson ─────────────────────────────────────────────────


class TestPearson:

    def test_perfect_positive(self):
        result = pearson(_points([(6, 4), (7, 6), (8, 8)]))
        assert result.correlation_coefficient == 1.0
        assert len(result.data_points) == 3

    def test_perfect_negative(self):
        result = pearson(_points([(6, 8), (7, 6), (8, 4)]))
        assert result.correlation_coefficient == -1.0

    def test_no_points(self):
        result = pearson([])
        assert result.correlation_coefficient == 0
        assert result.data_points == []

    def test_single_point(self):
        result = pearson(_points([(7, 6)]))
        assert result.correlation_coefficient == 0
        assert result.data_points == []

    def test_zero_variance_keeps_points(self):
        result = pearson(_points([(7.0, 4), (7.0, 6), (7.0, 9)]))
        assert result.correlation_coefficient == 0
        assert len(result.data_points) == 3

    def test_zero_variance_in_ratings(self):
        result = pearson(_points([(5.0, 6), (7.0, 6), (9.0, 6)]))
        assert result.correlation_coefficient == 0
        assert len(result.data_points) == 3

    def test_non_finite_pairs_are_dropped(self):
        pts = _points([(6, 4), (7, 6), (8, 8), (float("nan"), 5), (7.5, float("inf"))])
        result = pearson(pts)
        assert result.correlation_coefficient == 1.0
        assert [p.date for p in result.data_points] == ["2025-03-01", "2025-03-02", "2025-03-03"]

    def test_non_finite_filter_can_leave_too_few(self):
        result = pearson(_points([(6, 4), (float("nan"), 6)]))
        assert result.correlation_coefficient == 0
        assert result.data_points == []

    def test_rounded_to_four_places(self):
        result = pearson(_points([(5.5, 4), (6.0, 7), (7.25, 5), (8.0, 9)]))
        r = result.correlation_coefficient
        assert r == round(r, COEFFICIENT_PRECISION)
        assert -1.0 <= r <= 1.0
        assert math.isfinite(r)

    def test_matches_textbook_value(self):
        xs = [5.5, 6.0, 7.25, 8.0]
        ys = [4, 7, 5, 9]
        mx, my = sum(xs) / 4, sum(ys) / 4
        num = sum((x - mx) * (y - my) for x, y in zip(xs, ys))
        den = math.sqrt(sum((x - mx) ** 2 for x in xs) * sum((y - my) ** 2 for y in ys))
        result = pearson(_points(list(zip(xs, ys))))
        assert result.correlation_coefficient == pytest.approx(round(num / den, 4))


# ─── CorrelationEngine.correlate ─────────────────────────────


class TestCorrelateEntries:

    def test_known_linear_entries(self):
        entries = [
            make_entry("2025-03-01", hours=6.0, rating=4),
            make_entry("2025-03-02", hours=7.0, rating=6),
            make_entry("2025-03-03", hours=8.0, rating=8),
        ]
        result = CorrelationEngine().correlate(entries)
        assert result.correlation_coefficient == 1.0
        assert [p.date for p in result.data_points] == ["2025-03-01", "2025-03-02", "2025-03-03"]

    def test_points_keep_insertion_order(self):
        entries = [
            make_entry("2025-03-03", hours=8.0, rating=8),
            make_entry("2025-03-01", hours=6.0, rating=4),
            make_entry("2025-03-02", hours=7.0, rating=6),
        ]
        result = CorrelationEngine().correlate(entries)
        assert [p.date for p in result.data_points] == ["2025-03-03", "2025-03-01", "2025-03-02"]

    def test_entries_without_day_rating_yield_no_point(self):
        entries = [
            make_entry("2025-03-01", hours=6.0, rating=4),
            make_entry("2025-03-02", hours=7.0, rating=None),
        ]
        result = CorrelationEngine().correlate(entries)
        assert result.correlation_coefficient == 0
        assert result.data_points == []

    def test_one_point_per_date(self):
        entries = [
            make_entry("2025-03-01", hours=6.0, rating=4, entry_id="a"),
            make_entry("2025-03-01", hours=9.0, rating=9, entry_id="b"),
            make_entry("2025-03-02", hours=7.0, rating=6),
        ]
        points = CorrelationEngine().pair_entries(entries)
        assert [p.date for p in points] == ["2025-03-01", "2025-03-02"]
        assert points[0].sleep_duration == 9.0

    def test_derived_duration_rounded_to_two_places(self):
        entry = make_entry(
            "2025-03-01",
            bedtime=datetime(2025, 2, 28, 23, 10),
            wake=datetime(2025, 3, 1, 6, 0),
        )
        points = CorrelationEngine().pair_entries([entry])
        assert points[0].sleep_duration == 6.83

    def test_all_same_duration(self):
        entries = [make_entry(f"2025-03-0{i}", hours=7.0, rating=r) for i, r in ((1, 3), (2, 6), (3, 9))]
        result = CorrelationEngine().correlate(entries)
        assert result.correlation_coefficient == 0
        assert len(result.data_points) == 3

    def test_wire_form(self):
        entries = [make_entry("2025-03-01", hours=6.0, rating=4), make_entry("2025-03-02", hours=8.0, rating=8)]
        out = CorrelationEngine().correlate(entries).to_json()
        assert set(out) == {"correlationCoefficient", "dataPoints"}
        assert set(out["dataPoints"][0]) == {"sleepDuration", "dayRating", "date"}


# ─── Legacy two-table merge ──────────────────────────────────


class TestLegacyMerge:

    SLEEP = [
        {"bedtime": datetime(2025, 3, 1, 23, 0), "wakeUpTime": datetime(2025, 3, 2, 5, 0)},
        {"bedtime": datetime(2025, 3, 2, 23, 0), "wakeUpTime": datetime(2025, 3, 3, 6, 0)},
        {"bedtime": datetime(2025, 3, 3, 23, 0), "wakeUpTime": datetime(2025, 3, 4, 7, 0)},
        {"bedtime": datetime(2025, 3, 9, 23, 0), "wakeUpTime": datetime(2025, 3, 10, 8, 0)},
    ]
    WELLBEING = [
        {"entryDate": datetime(2025, 3, 2), "dayRating": 4},
        {"entryDate": datetime(2025, 3, 3), "dayRating": 6},
        {"entryDate": datetime(2025, 3, 4), "dayRating": 8},
        {"entryDate": datetime(2025, 3, 20), "dayRating": 2},
    ]

    def test_dates_in_only_one_series_are_dropped(self):
        points = pair_legacy_series(self.SLEEP, self.WELLBEING)
        assert [p.date for p in points] == ["2025-03-02", "2025-03-03", "2025-03-04"]
        assert [p.sleep_duration for p in points] == [6.0, 7.0, 8.0]
        assert [p.day_rating for p in points] == [4, 6, 8]

    def test_clock_time_wrap_in_legacy_sleep(self):
        sleep = [{"bedtime": datetime(2025, 3, 2, 23, 0), "wake_up_time": datetime(2025, 3, 2, 6, 0)}]
        wellbeing = [{"entry_date": "2025-03-02", "day_rating": 5}]
        points = pair_legacy_series(sleep, wellbeing)
        assert len(points) == 1
        assert points[0].sleep_duration == 7.0

    def test_correlate_legacy(self):
        result = CorrelationEngine().correlate_legacy(self.SLEEP, self.WELLBEING)
        assert result.correlation_coefficient == 1.0
        assert len(result.data_points) == 3

    def test_later_missing_rating_keeps_earlier_value(self):
        sleep = [{"bedtime": datetime(2025, 3, 1, 23, 0), "wakeUpTime": datetime(2025, 3, 2, 7, 0)}]
        wellbeing = [
            {"entryDate": "2025-03-02", "dayRating": 4},
            {"entryDate": "2025-03-02", "dayRating": None},
        ]
        points = pair_legacy_series(sleep, wellbeing)
        assert [(p.date, p.day_rating) for p in points] == [("2025-03-02", 4.0)]

    def test_empty_series(self):
        assert pair_legacy_series([], self.WELLBEING) == []
        assert pair_legacy_series(self.SLEEP, []) == []


class TestInterpret:

    @pytest.mark.parametrize("r,label", [
        (0.9, "strong"), (-0.8, "strong"), (0.5, "moderate"),
        (0.3, "weak"), (0.1, "negligible"), (0, "negligible"), (None, "negligible"),
    ])
    def test_labels(self, r, label):
        assert interpret(r) == label
