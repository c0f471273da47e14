# calendar_service.py
"""
Boundary operations handed to the agent / HTTP layer.

SchedulingService wires the analyzer and solver to one injected EventStore.
The clock is read once per operation so a single solve sees one "now".
solve_and_book() holds a booking lock across query -> solve -> insert, so two
concurrent callers cannot both win the same slot.
"""

from __future__ import annotations

import threading
from datetime import date as _date, datetime as _dt, time as _time, timedelta
from typing import Callable, List, Optional, Union

from event_store import EventStore, InMemoryEventStore
from schemas import (
    CalendarEvent,
    DayEvents,
    EventCreate,
    ScheduleOutcome,
    SchedulingIntent,
    SlotRequest,
    SolveResult,
)
from scheduler.analyzer import analyze_request as _analyze
from scheduler.config import SchedulerConfig
from scheduler.solver import find_best_slot as _solve
from scheduler.timeutil import UTC, ensure_utc, parse_date

Clock = Callable[[], _dt]


def _system_clock() -> _dt:
    return _dt.now(UTC)


class SchedulingService:
    def __init__(
        self,
        store: Optional[EventStore] = None,
        config: Optional[SchedulerConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or SchedulerConfig()
        self.store = store if store is not None else InMemoryEventStore(self.config.utc_offset_minutes)
        self.clock = clock or _system_clock
        self._booking_lock = threading.RLock()

    def _now(self, now: Optional[_dt]) -> _dt:
        return ensure_utc(now) if now is not None else ensure_utc(self.clock())

    # ---------- analysis ----------
    def analyze_request(self, text: str, now: Optional[_dt] = None) -> SchedulingIntent:
        intent = _analyze(text, now=self._now(now), config=self.config)
        print("[scheduler] ANALYZE_DEBUG:", intent.model_dump(mode="json"))
        return intent

    # ---------- reads ----------
    def events_for_date(self, date: Union[str, _date]) -> DayEvents:
        d = parse_date(date)
        events = self.store.events_on_date(d)
        count = len(events)
        return DayEvents(
            date=d,
            count=count,
            events=events,
            is_empty=count == 0,
            reasoning=(
                f"No events scheduled for {d.isoformat()} - entire day is available"
                if count == 0
                else f"Found {count} event(s) scheduled for {d.isoformat()}"
            ),
        )

    def list_events(self) -> List[CalendarEvent]:
        return self.store.all_events()

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        return self.store.get_by_id(event_id)

    # ---------- solving ----------
    def find_best_slot(
        self,
        date: Union[str, _date],
        duration_minutes: int,
        preferred_time: Union[str, _time, None] = None,
        is_fatigued: bool = False,
        now: Optional[_dt] = None,
    ) -> SolveResult:
        req = SlotRequest(
            date=date,
            duration_minutes=duration_minutes,
            preferred_time=preferred_time,
            is_fatigued=is_fatigued,
        )
        return self._solve(req, self._now(now))

    def _solve(self, req: SlotRequest, now: _dt) -> SolveResult:
        events = self.store.events_on_date(req.date)
        # a preferred slot late in the evening can run into the next local day
        spill = self.store.events_on_date(req.date + timedelta(days=1)) if req.preferred_time else []
        result = _solve(
            req.date,
            req.duration_minutes,
            events,
            preferred_time=req.preferred_time,
            is_fatigued=req.is_fatigued,
            now=now,
            config=self.config,
            next_day_events=spill,
        )
        print("[scheduler] SOLVE_DEBUG:", {
            "date": req.date.isoformat(),
            "duration": req.duration_minutes,
            "preferred_time": req.preferred_time,
            "fatigued": req.is_fatigued,
            "events": len(events),
            "success": result.success,
            "reasoning": result.reasoning,
        })
        return result

    # ---------- writes ----------
    def book_event(self, title: str, start_time: Union[str, _dt], end_time: Union[str, _dt]) -> CalendarEvent:
        """Validate the range (ValueError / ValidationError on bad input), then insert."""
        payload = EventCreate(title=title, start_time=start_time, end_time=end_time)
        with self._booking_lock:
            event = self.store.add(payload.title, payload.start_time, payload.end_time)
        print("[scheduler] BOOK_DEBUG:", {"id": event.id, "title": event.title})
        return event

    def delete_event(self, event_id: str) -> bool:
        deleted = self.store.delete_by_id(event_id)
        print("[scheduler] DELETE_DEBUG:", {"id": event_id, "deleted": deleted})
        return deleted

    def clear(self) -> None:
        self.store.clear()

    # ---------- atomic ----------
    def solve_and_book(
        self,
        title: str,
        date: Union[str, _date],
        duration_minutes: int,
        preferred_time: Union[str, _time, None] = None,
        is_fatigued: bool = False,
        now: Optional[_dt] = None,
    ) -> tuple[SolveResult, Optional[CalendarEvent]]:
        req = SlotRequest(
            date=date,
            duration_minutes=duration_minutes,
            preferred_time=preferred_time,
            is_fatigued=is_fatigued,
        )
        now = self._now(now)
        with self._booking_lock:
            result = self._solve(req, now)
            if not result.success:
                return result, None
            event = self.book_event(title, result.start_time, result.end_time)
        return result, event

    def schedule_request(self, text: str, now: Optional[_dt] = None) -> ScheduleOutcome:
        """Free text in, booked event (or a reasoned refusal) out."""
        now = self._now(now)
        intent = self.analyze_request(text, now=now)
        result, event = self.solve_and_book(
            intent.title,
            intent.date,
            intent.duration_minutes,
            preferred_time=intent.preferred_time,
            is_fatigued=intent.is_fatigued,
            now=now,
        )
        return ScheduleOutcome(intent=intent, result=result, event=event)
