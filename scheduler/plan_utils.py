from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime as _dt, timedelta
from typing import Iterable, List, Optional, Sequence

from .timeutil import minutes_between

# Events are anything with aware-UTC .start_time / .end_time (CalendarEvent,
# ORM rows in tests, simple namespaces).


@dataclass
class Gap:
    """A free interval inside the working day, after buffers."""
    start: _dt
    end: _dt
    duration_minutes: float


@dataclass
class ContinuousBlock:
    """A run of events separated by short breaks, long enough to be tiring."""
    start: _dt
    end: _dt
    duration_minutes: float


def overlaps(a_start: _dt, a_end: _dt, b_start: _dt, b_end: _dt) -> bool:
    """Positive-length overlap only; touching boundaries do not conflict."""
    return max(a_start, b_start) < min(a_end, b_end)


def find_conflicts(start: _dt, end: _dt, events: Iterable) -> List:
    return [e for e in events if overlaps(start, end, e.start_time, e.end_time)]


def sort_events(events: Iterable) -> List:
    return sorted(events, key=lambda e: (e.start_time, e.end_time))


def detect_continuous_blocks(
    events: Sequence,
    max_gap_minutes: int = 30,
    min_span_minutes: int = 120,
) -> List[ContinuousBlock]:
    """
    Merge sorted events whose break is <= max_gap_minutes into runs and keep
    the runs spanning at least min_span_minutes.
    """
    blocks: List[ContinuousBlock] = []
    if not events:
        return blocks

    def _close(s: _dt, e: _dt):
        span = minutes_between(s, e)
        if span >= min_span_minutes:
            blocks.append(ContinuousBlock(s, e, span))

    block_start = events[0].start_time
    block_end = events[0].end_time
    for ev in events[1:]:
        if minutes_between(block_end, ev.start_time) <= max_gap_minutes:
            block_end = max(block_end, ev.end_time)
        else:
            _close(block_start, block_end)
            block_start, block_end = ev.start_time, ev.end_time
    _close(block_start, block_end)
    return blocks


def ends_block(ts: _dt, blocks: Iterable[ContinuousBlock]) -> bool:
    """True when ts is (within a minute of) the end of a continuous block."""
    return any(abs((b.end - ts).total_seconds()) < 60 for b in blocks)


def follows_block(ts: _dt, blocks: Iterable[ContinuousBlock], window_minutes: int = 60) -> bool:
    """True when ts falls in [block.end, block.end + window)."""
    for b in blocks:
        since = minutes_between(b.end, ts)
        if 0 <= since < window_minutes:
            return True
    return False


def enumerate_gaps(
    events: Sequence,
    *,
    day_start: _dt,
    day_end: _dt,
    duration_minutes: int,
    not_before: Optional[_dt] = None,
    blocks: Sequence[ContinuousBlock] = (),
    buffer_minutes: int = 60,
    is_fatigued: bool = False,
) -> List[Gap]:
    """
    Free intervals of [day_start, day_end) around sorted `events`, in order:
    before the first event, between events, after the last one.

    A break that follows the end of a continuous block (or any break when the
    user is fatigued) only becomes usable `buffer_minutes` after that event.
    Every gap is clipped to the working day; only the gap before the first
    event is also floored at `not_before`. Later gaps keep their real start so
    the scorer can reject the ones already in the past. Gaps shorter than
    `duration_minutes` are dropped.
    """
    gaps: List[Gap] = []
    if not events:
        return gaps

    first_floor = day_start if not_before is None else max(day_start, not_before)

    def emit(start: _dt, end: _dt, floor: _dt = day_start):
        s = max(start, floor)
        e = min(end, day_end)
        if e <= s:
            return
        mins = minutes_between(s, e)
        if mins >= duration_minutes:
            gaps.append(Gap(s, e, mins))

    emit(day_start, events[0].start_time, first_floor)

    busy_until = events[0].end_time
    for ev in events[1:]:
        if ev.start_time > busy_until:
            needs_rest = is_fatigued or ends_block(busy_until, blocks)
            buffer = timedelta(minutes=buffer_minutes if needs_rest else 0)
            emit(busy_until + buffer, ev.start_time)
        busy_until = max(busy_until, ev.end_time)

    emit(busy_until, day_end)
    return gaps
