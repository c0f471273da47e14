# scheduler/config.py
"""
Tunables for the slot solver and the event store.

Every threshold the solver uses lives here so callers can shift the working
day, the local offset or the buffer policy without touching the algorithm.
Defaults: IST working day 09:00-18:00, 2 PM anchor for an empty day.
"""

from __future__ import annotations
import os
import re
from dataclasses import dataclass, field
from datetime import time as _time
from typing import Optional


@dataclass
class SchedulerConfig:
    utc_offset_minutes: int = 330                 # UTC+05:30
    work_day_start: _time = field(default_factory=lambda: _time(9, 0))
    work_day_end: _time = field(default_factory=lambda: _time(18, 0))
    afternoon_anchor: _time = field(default_factory=lambda: _time(14, 0))
    today_lead_minutes: int = 15

    # continuous-block policy
    continuous_gap_minutes: int = 30
    continuous_min_span_minutes: int = 120
    recovery_buffer_minutes: int = 60
    post_block_window_minutes: int = 60

    default_duration_minutes: int = 60
    database_url: str = "sqlite://"

    def __post_init__(self):
        if not (self.work_day_end > self.work_day_start):
            raise ValueError("work_day_end must be after work_day_start")
        if not -24 * 60 < self.utc_offset_minutes < 24 * 60:
            raise ValueError("utc_offset_minutes must be within +/-24h")


def parse_offset(s: str) -> int:
    """'+05:30' -> 330, '-04:00' -> -240, 'Z' / 'UTC' -> 0."""
    t = (s or "").strip().upper()
    if t in ("Z", "UTC", "GMT"):
        return 0
    m = re.match(r"^([+-])(\d{1,2}):?(\d{2})$", t)
    if not m:
        raise ValueError(f"Invalid UTC offset: {s!r}")
    sign = -1 if m.group(1) == "-" else 1
    hh, mm = int(m.group(2)), int(m.group(3))
    if hh > 23 or mm > 59:
        raise ValueError(f"Invalid UTC offset: {s!r}")
    return sign * (hh * 60 + mm)


def parse_clock(s: str) -> _time:
    """'HH:MM' (24h) -> datetime.time"""
    m = re.match(r"^(\d{1,2}):(\d{2})$", (s or "").strip())
    if not m:
        raise ValueError(f"Invalid clock time: {s!r} (expected HH:MM)")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        raise ValueError(f"Invalid clock time: {s!r}")
    return _time(hh, mm)


def load_config(environ: Optional[dict] = None) -> SchedulerConfig:
    """
    Build a config from environment variables, falling back to defaults:
      SCHEDULER_UTC_OFFSET       '+05:30'
      SCHEDULER_WORK_START       '09:00'
      SCHEDULER_WORK_END         '18:00'
      SCHEDULER_AFTERNOON_ANCHOR '14:00'
      SCHEDULER_DATABASE_URL     'sqlite://'
    """
    env = os.environ if environ is None else environ
    kwargs = {}

    offset = env.get("SCHEDULER_UTC_OFFSET", "").strip()
    if offset:
        kwargs["utc_offset_minutes"] = parse_offset(offset)

    for var, key in (
        ("SCHEDULER_WORK_START", "work_day_start"),
        ("SCHEDULER_WORK_END", "work_day_end"),
        ("SCHEDULER_AFTERNOON_ANCHOR", "afternoon_anchor"),
    ):
        raw = env.get(var, "").strip()
        if raw:
            kwargs[key] = parse_clock(raw)

    db_url = env.get("SCHEDULER_DATABASE_URL", "").strip()
    if db_url:
        kwargs["database_url"] = db_url

    return SchedulerConfig(**kwargs)
