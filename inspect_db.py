# inspect_db.py
from __future__ import annotations

import argparse
from datetime import date as _date
from typing import List, Optional

from event_store import SqlEventStore
from scheduler.config import load_config
from scheduler.timeutil import parse_date, to_local

# a fresh in-memory database is always empty
IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _date_arg(s: str) -> _date:
    try:
        return parse_date(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print stored events in local time, optionally for one date."
    )
    parser.add_argument("--date", type=_date_arg, help="Local date (YYYY-MM-DD)")
    parser.add_argument("--db", dest="url", help="SQLAlchemy URL (default: SCHEDULER_DATABASE_URL)")
    parser.add_argument("--limit", type=int, default=200, help="Max rows (default 200)")
    args = parser.parse_args(argv)

    config = load_config()
    url = args.url or config.database_url
    if url in IN_MEMORY_URLS:
        parser.error("no database to inspect: pass --db or set SCHEDULER_DATABASE_URL to a file URL")
    store = SqlEventStore(config.utc_offset_minutes, url=url)
    rows = store.events_on_date(args.date) if args.date else store.all_events()
    rows = rows[: args.limit]

    if not rows:
        suffix = f" on {args.date.isoformat()}" if args.date else ""
        print(f"No events found{suffix}.")
        return 0

    off = config.utc_offset_minutes
    print(f"{'ID':<28}  {'DATE':<10}  {'START–END':<13}  {'TITLE'}")
    print("-" * 70)
    for e in rows:
        s, en = to_local(e.start_time, off), to_local(e.end_time, off)
        when = f"{s.strftime('%H:%M')}–{en.strftime('%H:%M')}"
        print(f"{e.id:<28}  {s.date().isoformat():<10}  {when:<13}  {e.title}")
    print("-" * 70)
    print(f"{len(rows)} row(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
