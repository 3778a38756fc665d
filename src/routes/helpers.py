"""
Shared helpers for API routes.
Contains: service wiring, caller identity, window parsing, error shaping.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, Request

import config
from entry_store import PostgresEntryStore
from errors import InsightError
from insight_service import InsightService
from narrator import GeminiNarrator
from pipeline.window import WindowSelector

log = logging.getLogger("api")


# ─── Service wiring ────────────────────────────────────────

def build_insight_service(conn_str: Optional[str] = None) -> InsightService:
    """Production wiring: Postgres store + Gemini narrator."""
    return InsightService(
        store=PostgresEntryStore(conn_str or config.POSTGRES_CONNECTION_STRING, table=config.ENTRIES_TABLE),
        narrator=GeminiNarrator(),
    )


def get_insight_service(request: Request) -> InsightService:
    service = getattr(request.app.state, "insight_service", None)
    if service is None:
        service = build_insight_service()
        request.app.state.insight_service = service
    return service


# ─── Request parsing ───────────────────────────────────────

def _text(value: Any) -> str:
    return str(value) if value is not None else ""


def _require_user(user_id: Optional[str]) -> str:
    uid = _text(user_id).strip()
    if not uid:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return uid


def _window(period: Optional[str], start_date: Optional[str], end_date: Optional[str]) -> WindowSelector:
    return WindowSelector.parse(period=period, start_date=start_date, end_date=end_date)


# ─── Error shaping ─────────────────────────────────────────

def _error_payload(error: Exception) -> Tuple[int, Dict[str, Any]]:
    """Map an exception to (status_code, structured body)."""
    if isinstance(error, InsightError):
        if error.status_code >= 500:
            log.error("%s: %s", error.error_type, error.message)
        return error.status_code, error.to_dict()

    log.exception("Unexpected error: %s", error)
    return 500, {
        "statusCode": 500,
        "message": f"An unexpected error occurred: {error}",
        "errorType": "UnknownError",
    }
