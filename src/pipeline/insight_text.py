"""Helpers for turning raw narrator output into a short insight for UI cards."""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from errors import NarrationUnavailable

MAX_INSIGHT_CHARS = 280
MAX_SENTENCES = 2

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class InsightPayload(BaseModel):
    insight: str


def strip_wrappers(raw: str) -> str:
    """Drop surrounding single quotes and markdown code fences."""
    text = raw.strip()
    if len(text) >= 2 and text.startswith("'") and text.endswith("'"):
        text = text[1:-1].strip()
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def parse_insight_payload(raw: Any) -> str:
    """Extract ``insight`` from a ``{"insight": "..."}`` reply."""
    if not isinstance(raw, str) or not raw.strip():
        raise NarrationUnavailable("Narrator returned no text.")
    try:
        parsed = json.loads(strip_wrappers(raw))
    except json.JSONDecodeError as e:
        raise NarrationUnavailable("Narrator reply is not valid JSON.", details=str(e)) from e
    try:
        return InsightPayload.model_validate(parsed).insight
    except PydanticValidationError as e:
        raise NarrationUnavailable("Narrator reply has no insight string.", details=e.errors()) from e


def concise_insight(text: str) -> str:
    """Collapse whitespace and keep at most two sentences, clipped for a card."""
    flat = " ".join((text or "").split())
    sentences = [s for s in _SENTENCE_END.split(flat) if s]
    short = " ".join(sentences[:MAX_SENTENCES])
    if len(short) <= MAX_INSIGHT_CHARS:
        return short
    return short[: MAX_INSIGHT_CHARS - 3].rstrip() + "..."
