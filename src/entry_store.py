"""
Entry store
===========
Read access to the combined sleep + wellbeing journal, plus the single
insert used by the legacy migration.

Standalone: uses psycopg2 directly. The connection string is injected
(or resolved from the environment once, at construction), never looked up
through a module-level client.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor
from pydantic import ValidationError as PydanticValidationError

from db_utils import get_conn_str
from errors import DataIntegrityError
from models import Entry, EntryCreate

log = logging.getLogger("entry_store")

DEFAULT_TABLE = "sleep_entries"

ENTRY_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id         TEXT NOT NULL,
    bedtime         TIMESTAMPTZ NOT NULL,
    wake_up_time    TIMESTAMPTZ NOT NULL,
    duration_hours  DOUBLE PRECISION,
    quality_rating  INTEGER NOT NULL CHECK (quality_rating BETWEEN 1 AND 10),
    sleep_comments  TEXT,
    entry_date      DATE NOT NULL,
    day_rating      INTEGER CHECK (day_rating BETWEEN 1 AND 10),
    mood            TEXT,
    day_comments    TEXT,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS {index} ON {table} (user_id, entry_date);
"""

ENTRY_COLUMNS = (
    "id", "user_id", "bedtime", "wake_up_time", "duration_hours",
    "quality_rating", "sleep_comments", "entry_date", "day_rating",
    "mood", "day_comments", "created_at", "updated_at",
)


class EntryStore(Protocol):
    def query_by_user_and_window(
        self, user_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Entry]:
        """Entries for one user, bounded inclusively on entry_date. No ordering guarantee."""
        ...


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


_COLUMN_BY_ALIAS = {field.alias or name: name for name, field in Entry.model_fields.items()}


def _column(loc: Any) -> str:
    return _COLUMN_BY_ALIAS.get(str(loc), str(loc))


def entry_from_row(row: Dict[str, Any]) -> Entry:
    """Validate one stored row; shape mismatches are integrity faults, not bad input."""
    try:
        return Entry.model_validate({k: _plain(v) for k, v in dict(row).items()})
    except PydanticValidationError as e:
        fields = sorted({_column(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise DataIntegrityError(
            f"Stored entry {row.get('id')!r} does not match the entry shape.",
            fields=fields,
            details=[{"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]} for err in e.errors()],
        ) from e


class PostgresEntryStore:
    """EntryStore backed by one PostgreSQL table."""

    def __init__(self, conn_str: Optional[str] = None, table: str = DEFAULT_TABLE):
        self.conn_str = get_conn_str(conn_str)
        self.table = table

    def _connect(self):
        if not self.conn_str:
            raise RuntimeError("POSTGRES_CONNECTION_STRING is not set")
        return psycopg2.connect(self.conn_str)

    # ─── Schema bootstrap ──────────────────────────────────

    def bootstrap_schema(self) -> None:
        """Create the entries table and its lookup index if they don't exist."""
        conn = self._connect()
        conn.autocommit = True
        try:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL(ENTRY_SCHEMA_SQL).format(
                        table=sql.Identifier(self.table),
                        index=sql.Identifier(f"idx_{self.table}_user_date"),
                    )
                )
        finally:
            conn.close()

    # ─── Reads ─────────────────────────────────────────────

    def query_by_user_and_window(
        self, user_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Entry]:
        clauses = [sql.SQL("user_id = %s")]
        params: List[Any] = [user_id]
        if start is not None:
            clauses.append(sql.SQL("entry_date >= %s"))
            params.append(start)
        if end is not None:
            clauses.append(sql.SQL("entry_date <= %s"))
            params.append(end)

        query = sql.SQL("SELECT {cols} FROM {table} WHERE {where}").format(
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in ENTRY_COLUMNS),
            table=sql.Identifier(self.table),
            where=sql.SQL(" AND ").join(clauses),
        )

        conn = self._connect()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, tuple(params))
                rows = cur.fetchall()
        finally:
            conn.close()

        log.debug("Fetched %d entries for user=%s window=%s..%s", len(rows), user_id, start, end)
        return [entry_from_row(row) for row in rows]

    # ─── Writes ────────────────────────────────────────────

    def insert_entry(self, entry: EntryCreate, cur=None) -> str:
        """Insert one validated submission and return its id.

        Pass an open cursor to take part in the caller's transaction.
        """
        columns = (
            "user_id", "bedtime", "wake_up_time", "duration_hours", "quality_rating",
            "sleep_comments", "entry_date", "day_rating", "mood", "day_comments",
        )
        values = (
            entry.user_id, entry.bedtime, entry.wake_up_time, entry.duration_hours,
            entry.quality_rating, entry.sleep_comments, entry.entry_date, entry.day_rating,
            entry.mood.value if entry.mood is not None else None, entry.day_comments,
        )
        query = sql.SQL("INSERT INTO {table} ({cols}) VALUES ({vals}) RETURNING id").format(
            table=sql.Identifier(self.table),
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            vals=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )

        if cur is not None:
            cur.execute(query, values)
            return str(cur.fetchone()[0])

        conn = self._connect()
        try:
            with conn:
                with conn.cursor() as own_cur:
                    own_cur.execute(query, values)
                    return str(own_cur.fetchone()[0])
        finally:
            conn.close()
