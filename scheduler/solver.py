# scheduler/solver.py
"""
Best-slot solver.

Given a target date, a duration, optional preferences and the events already
booked that day, pick one non-conflicting interval:

  1. an explicit preferred time is taken as-is when it is free;
  2. otherwise runs of back-to-back meetings are detected,
  3. free gaps in the working day are enumerated (with recovery buffers),
  4. each gap is scored (afternoon > morning > late afternoon, lunch and
     post-meeting-marathon slots penalised, fatigue biases earlier),
  5. the best positive-scoring gap wins and its start is booked.

"No slot" is a normal outcome returned as SolveResult(success=False); only
malformed input raises ValueError.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date as _date, datetime as _dt, time as _time, timedelta
from typing import List, Optional, Sequence, Union

from schemas import SolveResult

from .config import SchedulerConfig
from .plan_utils import (
    ContinuousBlock,
    Gap,
    detect_continuous_blocks,
    enumerate_gaps,
    find_conflicts,
    follows_block,
    sort_events,
)
from .timeutil import (
    UTC,
    ensure_utc,
    format_clock_12h,
    format_time_12h,
    local_date,
    local_hour,
    local_to_utc,
    parse_date,
    parse_hhmm,
    to_local,
)

PAST_SCORE = -1000.0


@dataclass
class ScoredGap:
    gap: Gap
    score: float


def score_gap(
    gap: Gap,
    *,
    duration_minutes: int,
    blocks: Sequence[ContinuousBlock],
    is_fatigued: bool,
    now: _dt,
    is_today: bool,
    config: SchedulerConfig,
) -> float:
    if is_today and gap.start < now:
        return PAST_SCORE

    h = local_hour(gap.start, config.utc_offset_minutes)
    score = 0.0

    if follows_block(gap.start, blocks, config.post_block_window_minutes):
        score -= 50

    if is_fatigued and h >= 18:
        score -= 100
    if is_fatigued and h < 16:
        score += 20

    if 14 <= h < 17:
        score += 30     # afternoon
    elif 9 <= h < 12:
        score += 20     # morning
    elif 12 <= h < 13:
        score -= 10     # lunch
    elif 17 <= h < 18:
        score += 15     # late afternoon

    slack = gap.duration_minutes - duration_minutes
    score += min(slack / 5.0, 20.0)
    return score


def rank_gaps(gaps: Sequence[Gap], **kwargs) -> List[ScoredGap]:
    """Highest score first; equal scores keep chronological order."""
    scored = [ScoredGap(g, score_gap(g, **kwargs)) for g in gaps]
    scored.sort(key=lambda sg: -sg.score)
    return scored


def _justify(score: float) -> str:
    if score > 25:
        return "optimal afternoon time with good buffer between meetings"
    if score > 15:
        return "suitable time slot with adequate spacing"
    return "available time slot that fits your schedule"


def _booked(start: _dt, duration_minutes: int, reasoning: str, config: SchedulerConfig,
            score: Optional[float] = None) -> SolveResult:
    end = start + timedelta(minutes=duration_minutes)
    off = config.utc_offset_minutes
    return SolveResult(
        success=True,
        start_time=start,
        end_time=end,
        start_time_local=to_local(start, off).isoformat(timespec="milliseconds"),
        end_time_local=to_local(end, off).isoformat(timespec="milliseconds"),
        score=score,
        reasoning=reasoning,
    )


def _fail(reasoning: str) -> SolveResult:
    return SolveResult(success=False, reasoning=reasoning)


def _note_conflict(result: SolveResult, pref: _time, d: _date) -> SolveResult:
    hhmm = pref.strftime("%H:%M")
    if not result.success:
        return _fail(
            f"Preferred time {hhmm} conflicts with an existing event "
            f"and no alternative slot was found on {d.isoformat()}"
        )
    return result.model_copy(
        update={"reasoning": f"Preferred time {hhmm} conflicts with an existing event. {result.reasoning}"}
    )


def _solve_empty_day(
    d: _date,
    duration_minutes: int,
    now: _dt,
    is_today: bool,
    config: SchedulerConfig,
) -> SolveResult:
    off = config.utc_offset_minutes
    work_start = local_to_utc(d, config.work_day_start, off)
    work_end = local_to_utc(d, config.work_day_end, off)
    anchor = max(local_to_utc(d, config.afternoon_anchor, off), work_start)
    lead = timedelta(minutes=config.today_lead_minutes)
    need = timedelta(minutes=duration_minutes)

    past_anchor = is_today and now > anchor
    start = now + lead if past_anchor else anchor

    if start >= work_end:
        return _fail("No available time slots today - all working hours have passed")

    if start + need > work_end:
        earliest = max(work_start, now + lead) if is_today else work_start
        if earliest < start and earliest + need <= work_end:
            return _booked(
                earliest, duration_minutes,
                f"No events scheduled - chose {format_clock_12h(earliest, off)} "
                f"(earliest slot long enough for {duration_minutes} minutes)",
                config,
            )
        return _fail(
            f"No {duration_minutes}-minute slot fits in the remaining working hours "
            f"({format_time_12h(config.work_day_start)} - {format_time_12h(config.work_day_end)})"
        )

    if past_anchor:
        reasoning = f"No events scheduled - chose next available slot at {format_clock_12h(start, off)}"
    else:
        reasoning = (
            f"No events scheduled - chose {format_clock_12h(start, off)} "
            f"(preferred afternoon slot for meetings)"
        )
    return _booked(start, duration_minutes, reasoning, config)


def find_best_slot(
    date: Union[str, _date],
    duration_minutes: int,
    events: Sequence,
    *,
    preferred_time: Union[str, _time, None] = None,
    is_fatigued: bool = False,
    now: Optional[_dt] = None,
    config: Optional[SchedulerConfig] = None,
    next_day_events: Sequence = (),
) -> SolveResult:
    """
    Pick the best interval of `duration_minutes` on local `date`.

    `events` are the bookings for that date; `now` is read once by the caller
    (defaults to the wall clock) and used for every "is this in the past" test.
    `next_day_events` only matter for a preferred time that runs past local
    midnight.
    """
    config = config or SchedulerConfig()
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ValueError("duration_minutes must be a positive integer")
    d = parse_date(date)
    pref = parse_hhmm(preferred_time)
    now = ensure_utc(now) if now is not None else _dt.now(UTC)
    is_fatigued = bool(is_fatigued)

    off = config.utc_offset_minutes
    is_today = d == local_date(now, off)
    events = sort_events(events)
    need = timedelta(minutes=duration_minutes)

    # 1) explicit time
    pref_conflict = False
    if pref is not None:
        start = local_to_utc(d, pref, off)
        if not find_conflicts(start, start + need, [*events, *next_day_events]):
            return _booked(
                start, duration_minutes,
                f"Preferred time {pref.strftime('%H:%M')} is available - no conflicts found",
                config,
            )
        pref_conflict = True

    work_end = local_to_utc(d, config.work_day_end, off)
    if is_today and now >= work_end:
        return _fail("No available time slots today - all working hours have passed")

    if not events:
        result = _solve_empty_day(d, duration_minutes, now, is_today, config)
        return _note_conflict(result, pref, d) if pref_conflict else result

    # 2) continuous blocks
    blocks = detect_continuous_blocks(
        events,
        max_gap_minutes=config.continuous_gap_minutes,
        min_span_minutes=config.continuous_min_span_minutes,
    )

    # 3) gaps
    gaps = enumerate_gaps(
        events,
        day_start=local_to_utc(d, config.work_day_start, off),
        day_end=work_end,
        duration_minutes=duration_minutes,
        not_before=now if is_today else None,
        blocks=blocks,
        buffer_minutes=config.recovery_buffer_minutes,
        is_fatigued=is_fatigued,
    )

    # 4) scoring
    ranked = rank_gaps(
        gaps,
        duration_minutes=duration_minutes,
        blocks=blocks,
        is_fatigued=is_fatigued,
        now=now,
        is_today=is_today,
        config=config,
    )
    eligible = [sg for sg in ranked if sg.score > 0]

    if not eligible:
        if is_today:
            result = _fail("No available time slots remaining today - all slots are either occupied or in the past")
        else:
            result = _fail("No available time slots found - all working hours are occupied")
    else:
        # 5) result
        best = eligible[0]
        result = _booked(
            best.gap.start, duration_minutes,
            f"Best available slot at {format_clock_12h(best.gap.start, off)} - {_justify(best.score)}",
            config,
            score=round(best.score, 2),
        )
    return _note_conflict(result, pref, d) if pref_conflict else result
