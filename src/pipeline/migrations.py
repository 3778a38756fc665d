"""Startup migration and audit helpers, including the legacy two-table merge."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from db_utils import get_conn_str
from entry_store import DEFAULT_TABLE, ENTRY_COLUMNS, PostgresEntryStore
from errors import ValidationError
from models import EntryCreate, validate_submission

log = logging.getLogger("pipeline.migrations")

LEGACY_SLEEP_TABLE = "legacy_sleep_entries"
LEGACY_WELLBEING_TABLE = "legacy_wellbeing_entries"

_NOT_CONFIGURED = "POSTGRES_CONNECTION_STRING (or DATABASE_URL) is not configured"


def _resolve_conn_str(conn_str: Optional[str]) -> str:
    cs = get_conn_str(conn_str)
    if not cs:
        raise RuntimeError(_NOT_CONFIGURED)
    return cs


def ensure_startup_schema(conn_str: Optional[str] = None, table: str = DEFAULT_TABLE) -> None:
    """Create the entries table and index; safe to run on every start."""
    PostgresEntryStore(_resolve_conn_str(conn_str), table=table).bootstrap_schema()
    log.info("Entries table %s is ready.", table)


def schema_audit(conn_str: Optional[str] = None, table: str = DEFAULT_TABLE) -> Dict[str, Any]:
    """Compare the live entries table against ENTRY_COLUMNS."""
    cs = get_conn_str(conn_str)
    if not cs:
        return {"ok": False, "error": _NOT_CONFIGURED, "table": table, "exists": False, "missing_columns": []}

    conn = psycopg2.connect(cs)
    try:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT column_name FROM information_schema.columns "
                "WHERE table_schema = 'public' AND table_name = %s",
                (table,),
            )
            present = {row[0] for row in cur.fetchall()}
    finally:
        conn.close()

    missing = [c for c in ENTRY_COLUMNS if c not in present] if present else list(ENTRY_COLUMNS)
    return {
        "ok": bool(present) and not missing,
        "table": table,
        "exists": bool(present),
        "missing_columns": missing,
    }


# ─── Legacy sleep + wellbeing merge ────────────────────────

def _day_key(value: Any) -> Optional[str]:
    """UTC calendar date for datetimes, plain ISO date otherwise."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def merge_legacy_records(
    sleep_rows: List[Dict[str, Any]], wellbeing_rows: List[Dict[str, Any]]
) -> Tuple[List[EntryCreate], Dict[str, int]]:
    """Combine legacy per-user sleep and wellbeing rows into single entries.

    Sleep rows are keyed on their wake-up date, wellbeing rows on entry_date.
    A (user, date) present in only one table is skipped, as is any merged
    record that fails submission validation.
    """
    stats = {"merged": 0, "sleep_only": 0, "wellbeing_only": 0, "invalid": 0}

    sleep_by_key: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for row in sleep_rows:
        sleep_by_key[(str(row.get("user_id")), _day_key(row.get("wake_up_time")))] = row

    wellbeing_by_key: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for row in wellbeing_rows:
        wellbeing_by_key[(str(row.get("user_id")), _day_key(row.get("entry_date")))] = row

    merged: List[EntryCreate] = []
    for key, sleep in sleep_by_key.items():
        wellbeing = wellbeing_by_key.get(key)
        if wellbeing is None:
            stats["sleep_only"] += 1
            continue
        payload = {
            "user_id": key[0],
            "bedtime": sleep.get("bedtime"),
            "wake_up_time": sleep.get("wake_up_time"),
            "duration_hours": sleep.get("duration_hours"),
            "quality_rating": sleep.get("quality_rating"),
            "sleep_comments": sleep.get("comments"),
            "entry_date": key[1],
            "day_rating": wellbeing.get("day_rating"),
            "mood": wellbeing.get("mood"),
            "day_comments": wellbeing.get("comments"),
        }
        try:
            merged.append(validate_submission(payload))
        except ValidationError as e:
            stats["invalid"] += 1
            log.warning("Skipping legacy record %s on %s: invalid %s", key[0], key[1], ", ".join(e.fields))
            continue
        stats["merged"] += 1

    stats["wellbeing_only"] = sum(1 for key in wellbeing_by_key if key not in sleep_by_key)
    return merged, stats


def _select_all(table: str, order_by: str) -> sql.Composed:
    return sql.SQL("SELECT * FROM {table} ORDER BY {col} ASC").format(
        table=sql.Identifier(table), col=sql.Identifier(order_by)
    )


def migrate_legacy_entries(
    conn_str: Optional[str] = None,
    sleep_table: str = LEGACY_SLEEP_TABLE,
    wellbeing_table: str = LEGACY_WELLBEING_TABLE,
    table: str = DEFAULT_TABLE,
) -> Dict[str, int]:
    """Copy legacy two-table data into the combined entries table in one transaction."""
    cs = _resolve_conn_str(conn_str)
    store = PostgresEntryStore(cs, table=table)
    store.bootstrap_schema()

    conn = psycopg2.connect(cs)
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(_select_all(sleep_table, "wake_up_time"))
            sleep_rows = [dict(r) for r in cur.fetchall()]
            cur.execute(_select_all(wellbeing_table, "entry_date"))
            wellbeing_rows = [dict(r) for r in cur.fetchall()]

        entries, stats = merge_legacy_records(sleep_rows, wellbeing_rows)
        with conn:
            with conn.cursor() as cur:
                for entry in entries:
                    store.insert_entry(entry, cur=cur)
    finally:
        conn.close()

    log.info(
        "Legacy merge: %d merged, %d sleep-only, %d wellbeing-only, %d invalid",
        stats["merged"], stats["sleep_only"], stats["wellbeing_only"], stats["invalid"],
    )
    return stats
