"""
Narrated insights
=================
Natural-language sentence about the sleep / day-rating relationship,
generated by Gemini through crewai's LLM wrapper.

The narrator is the only remote call in the insight pipeline. It is
isolated behind the ``Narrator`` protocol, runs with an explicit timeout,
and signals every failure as ``NarrationUnavailable``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from crewai import LLM

import config
from errors import NarrationUnavailable
from models import Entry
from pipeline.insight_text import concise_insight, parse_insight_payload

log = logging.getLogger("narrator")

# Fields sent to the model; ids and timestamps add tokens without signal.
_PROMPT_FIELDS = (
    "entry_date", "bedtime", "wake_up_time", "duration_hours", "quality_rating",
    "day_rating", "mood", "sleep_comments", "day_comments",
)

CORRELATION_PROMPT = """
Analyze the following combined sleep and well-being journal entries to find a correlation.
Entries: {entries}
Provide the analysis as a JSON object with a single key "insight" containing a concise,
one-sentence analysis of the correlation between sleep duration and day rating.
For example: {{"insight": "There appears to be a positive correlation between sleep duration and day rating, as longer sleep durations generally coincide with higher day ratings."}}
"""

OVERVIEW_PROMPT = """
Analyze the following combined sleep and well-being journal entries to provide an overview of the user's recent patterns.
Entries: {entries}
Provide the analysis as a JSON object with a single key "insight" containing a concise,
one-sentence overview of the user's recent sleep patterns, mood, and day ratings.
"""


class Narrator(Protocol):
    def narrate(self, entries: Sequence[Entry]) -> str:
        """One-to-two sentence insight; raises on failure."""
        ...

    def narrate_overview(self, entries: Sequence[Entry]) -> str:
        ...


def entries_for_prompt(entries: Sequence[Entry]) -> str:
    rows: List[Dict[str, Any]] = [
        e.model_dump(mode="json", by_alias=True, include=set(_PROMPT_FIELDS)) for e in entries
    ]
    return json.dumps(rows, ensure_ascii=False)


class GeminiNarrator:
    """Narrator backed by a Gemini model; one lazily built LLM per instance."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        llm: Optional[Any] = None,
    ) -> None:
        self.model = model or config.NARRATOR_MODEL
        self.api_key = api_key if api_key is not None else config.GOOGLE_API_KEY
        self.timeout = timeout if timeout is not None else config.NARRATOR_TIMEOUT_SECONDS
        self.temperature = temperature if temperature is not None else config.NARRATOR_TEMPERATURE
        self._llm = llm

    def _get_llm(self) -> Any:
        if self._llm is None:
            if not self.api_key:
                raise NarrationUnavailable("GOOGLE_API_KEY is not set")
            self._llm = LLM(
                model=self.model,
                api_key=self.api_key,
                temperature=self.temperature,
                timeout=self.timeout,
            )
        return self._llm

    def _generate(self, prompt: str) -> str:
        llm = self._get_llm()
        try:
            raw = llm.call(prompt)
        except NarrationUnavailable:
            raise
        except Exception as e:
            raise NarrationUnavailable(f"Narrator call failed: {e}", details=type(e).__name__) from e

        insight = concise_insight(parse_insight_payload(raw))
        if not insight:
            raise NarrationUnavailable("Narrator returned an empty insight.")
        return insight

    def narrate(self, entries: Sequence[Entry]) -> str:
        log.info("Requesting correlation insight for %d entries (model=%s)", len(entries), self.model)
        return self._generate(CORRELATION_PROMPT.format(entries=entries_for_prompt(entries)))

    def narrate_overview(self, entries: Sequence[Entry]) -> str:
        log.info("Requesting overview insight for %d entries (model=%s)", len(entries), self.model)
        return self._generate(OVERVIEW_PROMPT.format(entries=entries_for_prompt(entries)))
