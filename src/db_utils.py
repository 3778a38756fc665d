"""
Shared database utilities.
Single source of truth for PostgreSQL connection-string resolution.
"""

from __future__ import annotations

import os
from typing import Optional


def normalize_db_url(value: Optional[str]) -> str:
    """Normalise postgres:// to postgresql:// for psycopg2."""
    url = (value or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


def get_conn_str(explicit: Optional[str] = None) -> str:
    """Return PostgreSQL connection string.

    An explicit value wins; otherwise checks POSTGRES_CONNECTION_STRING,
    then falls back to DATABASE_URL (Heroku standard).
    """
    return normalize_db_url(
        explicit or os.getenv("POSTGRES_CONNECTION_STRING") or os.getenv("DATABASE_URL") or ""
    )
