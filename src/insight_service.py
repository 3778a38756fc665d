"""
Insight orchestration
=====================
One query per request, then the pure computations over the same entry list:

  Step 1: validate / resolve the window selector
  Step 2: query the entry store once
  Step 3: summary, correlation and chart series (pure, synchronous)
  Step 4: narrated insight (remote, fallible, degraded to a placeholder)

Validation and data-integrity errors propagate to the caller. Narration
failures never abort the numeric sections.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

from analytics.chart_series import build_chart_series
from analytics.summary_stats import summarize
from correlation_engine import CorrelationEngine, interpret
from entry_store import EntryStore
from models import ChartsData, CorrelationResult, Entry, InsightReport, Summary
from narrator import Narrator
from pipeline.window import WindowSelector

log = logging.getLogger("insight_service")

NARRATION_UNAVAILABLE_TEXT = "AI insight is unavailable right now. Your charts and statistics are still up to date."
NO_ENTRIES_TEXT = "No journal entries in this period yet."

WindowArg = Union[WindowSelector, str, None]


class InsightService:
    """Combines summary, correlation, chart series and narration per request."""

    def __init__(
        self,
        store: EntryStore,
        narrator: Optional[Narrator] = None,
        engine: Optional[CorrelationEngine] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.narrator = narrator
        self.engine = engine or CorrelationEngine()
        self.clock = clock

    # ─── Loading ───────────────────────────────────────────

    @staticmethod
    def _selector(window: WindowArg) -> WindowSelector:
        if isinstance(window, WindowSelector):
            return window
        return WindowSelector.parse(period=window)

    def _load(self, user_id: str, window: WindowArg) -> List[Entry]:
        selector = self._selector(window)
        start, end = selector.resolve(self.clock())
        entries = list(self.store.query_by_user_and_window(user_id, start, end))
        log.info("Loaded %d entries for user=%s window=%s", len(entries), user_id, selector.describe())
        return entries

    # ─── Narration ─────────────────────────────────────────

    def _narrate(self, entries: Sequence[Entry], overview: bool = False) -> Tuple[str, str]:
        """Return ``(text, status)``; status is ``ok``, ``empty`` or ``unavailable``."""
        if not entries:
            return NO_ENTRIES_TEXT, "empty"
        if self.narrator is None:
            log.warning("No narrator configured; using placeholder insight.")
            return NARRATION_UNAVAILABLE_TEXT, "unavailable"
        try:
            if overview:
                text = self.narrator.narrate_overview(entries)
            else:
                text = self.narrator.narrate(entries)
        except Exception as e:
            log.warning("Narration unavailable (%s): %s", type(e).__name__, e)
            return NARRATION_UNAVAILABLE_TEXT, "unavailable"
        if not isinstance(text, str) or not text.strip():
            log.warning("Narrator returned unusable output of type %s", type(text).__name__)
            return NARRATION_UNAVAILABLE_TEXT, "unavailable"
        return text.strip(), "ok"

    # ─── Public operations ─────────────────────────────────

    def get_summary(self, user_id: str, window: WindowArg = None) -> Summary:
        return summarize(self._load(user_id, window))

    def get_correlation(self, user_id: str, window: WindowArg = None) -> CorrelationResult:
        return self.engine.correlate(self._load(user_id, window))

    def get_charts_data(self, user_id: str, window: WindowArg = None) -> ChartsData:
        entries = self._load(user_id, window)
        series = build_chart_series(entries, self.engine.correlate(entries))
        text, _status = self._narrate(entries)
        return ChartsData(**dict(series), narrated_insight=text)

    def get_narrated_insight(self, user_id: str, window: WindowArg = None) -> str:
        text, _status = self._narrate(self._load(user_id, window))
        return text

    def get_overview_insight(self, user_id: str, window: WindowArg = None) -> str:
        text, _status = self._narrate(self._load(user_id, window), overview=True)
        return text

    def get_insights(self, user_id: str, window: WindowArg = None) -> InsightReport:
        """Everything for one window from a single store round trip."""
        entries = self._load(user_id, window)
        summary = summarize(entries)
        correlation = self.engine.correlate(entries)
        charts = build_chart_series(entries, correlation)
        text, status = self._narrate(entries)
        return InsightReport(
            summary=summary,
            correlation=correlation,
            correlation_strength=interpret(correlation.correlation_coefficient),
            charts=charts,
            narrated_insight=text,
            narration_status=status,
        )
