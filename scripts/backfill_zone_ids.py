#!/usr/bin/env python3
"""
Backfill zone ids on stored logs from their hostname fields

Run after a zone sync to attribute records that arrived before their zone
was known:

    python scripts/backfill_zone_ids.py --limit 5000
    python scripts/backfill_zone_ids.py --limit 5000 --after-id 123456
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from nimbus.db import init_db  # noqa: E402
from nimbus.logging_config import setup_logging  # noqa: E402
from nimbus.services.backfill import DEFAULT_BACKFILL_LIMIT, backfill_zone_ids  # noqa: E402


def main(argv=None):
    parser = argparse.ArgumentParser(description='Backfill zone_id on zone-scoped logs')
    parser.add_argument('--limit', type=int, default=DEFAULT_BACKFILL_LIMIT,
                        help=f'Maximum logs to examine (default: {DEFAULT_BACKFILL_LIMIT})')
    parser.add_argument('--after-id', type=int, default=0,
                        help='Only examine logs with a larger id (resume from a previous run)')
    args = parser.parse_args(argv)

    if not os.getenv("DATABASE_URL"):
        print("DATABASE_URL environment variable not set", file=sys.stderr)
        return 1

    setup_logging()
    init_db()
    try:
        result = backfill_zone_ids(limit=args.limit, after_id=args.after_id)
    except Exception:
        logging.getLogger("nimbus.backfill").exception("Backfill failed")
        return 1

    print(f"Updated {result['updated']} logs, skipped {result['skipped']}")
    if result['updated'] + result['skipped'] >= args.limit:
        print(f"More logs may remain; continue with --after-id {result['lastId']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
