# scheduler/timeutil.py
"""
Fixed-offset time helpers.

Stored timestamps are always timezone-aware UTC. Working hours and user
preferences are reasoned about in one fixed local offset; converting between
the two is a pure shift by that offset (no DST rules).
"""

from __future__ import annotations
import re
from datetime import date as _date, time as _time, datetime as _dt, timedelta, timezone as _tz
from typing import Optional, Union

UTC = _tz.utc


def local_tz(offset_minutes: int) -> _tz:
    return _tz(timedelta(minutes=offset_minutes))


def ensure_utc(ts: _dt) -> _dt:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalise aware ones."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def parse_iso_utc(value: Union[str, _dt]) -> _dt:
    """
    '2025-01-15T14:00:00.000Z' / '2025-01-15T19:30:00+05:30' -> aware UTC datetime.
    Naive strings are taken as UTC. Raises ValueError when unparseable.
    """
    if isinstance(value, _dt):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}")
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return ensure_utc(_dt.fromisoformat(s))
    except ValueError:
        raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}") from None


def to_iso_utc(ts: _dt) -> str:
    """Millisecond-precision UTC string with a trailing 'Z'."""
    u = ensure_utc(ts)
    return u.strftime("%Y-%m-%dT%H:%M:%S.") + f"{u.microsecond // 1000:03d}Z"


def parse_date(value: Union[str, _date]) -> _date:
    if isinstance(value, _dt):
        return value.date()
    if isinstance(value, _date):
        return value
    try:
        return _date.fromisoformat((value or "").strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None


def parse_hhmm(value: Union[str, _time, None]) -> Optional[_time]:
    """'14:30' -> time(14, 30); None passes through."""
    if value is None:
        return None
    if isinstance(value, _time):
        return value.replace(second=0, microsecond=0)
    m = re.match(r"^(\d{1,2}):(\d{2})$", str(value).strip())
    if not m:
        raise ValueError(f"Invalid time: {value!r} (expected HH:mm)")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return _time(hh, mm)


def local_to_utc(d: _date, t: _time, offset_minutes: int) -> _dt:
    """Local wall-clock (d, t) in the fixed offset -> aware UTC instant."""
    return _dt.combine(d, t, tzinfo=local_tz(offset_minutes)).astimezone(UTC)


def to_local(ts: _dt, offset_minutes: int) -> _dt:
    return ensure_utc(ts).astimezone(local_tz(offset_minutes))


def local_date(ts: _dt, offset_minutes: int) -> _date:
    return to_local(ts, offset_minutes).date()


def local_day_bounds(d: _date, offset_minutes: int) -> tuple[_dt, _dt]:
    """UTC [start, end) covering local calendar day d."""
    start = local_to_utc(d, _time(0, 0), offset_minutes)
    return start, start + timedelta(days=1)


def local_hour(ts: _dt, offset_minutes: int) -> float:
    """Fractional local hour, e.g. 13:30 -> 13.5"""
    loc = to_local(ts, offset_minutes)
    return loc.hour + loc.minute / 60.0


def format_clock_12h(ts: _dt, offset_minutes: int) -> str:
    """'2:00 PM' style local time for user-facing text."""
    return format_time_12h(to_local(ts, offset_minutes).time())


def format_time_12h(t: _time) -> str:
    hh = t.hour % 12 or 12
    mer = "AM" if t.hour < 12 else "PM"
    return f"{hh}:{t.minute:02d} {mer}"


def minutes_between(start: _dt, end: _dt) -> float:
    return (end - start).total_seconds() / 60.0
