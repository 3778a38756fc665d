"""
Database maintenance CLI
========================
Usage:
    python maintenance.py --bootstrap         # create the entries table + index
    python maintenance.py --audit             # print a schema audit as JSON
    python maintenance.py --migrate-legacy    # merge legacy sleep + wellbeing tables
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("maintenance")

import config  # noqa: E402
from pipeline.migrations import (  # noqa: E402
    LEGACY_SLEEP_TABLE,
    LEGACY_WELLBEING_TABLE,
    ensure_startup_schema,
    migrate_legacy_entries,
    schema_audit,
)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Sleep insights database maintenance")
    parser.add_argument("--bootstrap", action="store_true",
                        help="Create the entries table if missing")
    parser.add_argument("--audit", action="store_true",
                        help="Print table/column audit")
    parser.add_argument("--migrate-legacy", action="store_true",
                        help="Merge legacy sleep + wellbeing rows into combined entries")
    parser.add_argument("--table", default=config.ENTRIES_TABLE,
                        help="Combined entries table")
    parser.add_argument("--sleep-table", default=LEGACY_SLEEP_TABLE)
    parser.add_argument("--wellbeing-table", default=LEGACY_WELLBEING_TABLE)
    parser.add_argument("--conn-str", default=None,
                        help="Overrides POSTGRES_CONNECTION_STRING / DATABASE_URL")
    args = parser.parse_args(argv)

    if not (args.bootstrap or args.audit or args.migrate_legacy):
        parser.print_help()
        return 2

    try:
        if args.bootstrap:
            ensure_startup_schema(args.conn_str, table=args.table)
        if args.migrate_legacy:
            stats = migrate_legacy_entries(
                args.conn_str,
                sleep_table=args.sleep_table,
                wellbeing_table=args.wellbeing_table,
                table=args.table,
            )
            print(json.dumps(stats, indent=2))
        if args.audit:
            audit = schema_audit(args.conn_str, table=args.table)
            print(json.dumps(audit, indent=2))
            if not audit.get("ok"):
                return 1
    except Exception as e:
        log.error("Maintenance failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
