# event_store.py
"""
Interval stores: where booked events live.

The solver never touches storage directly; it is handed a store through the
EventStore interface below. Two implementations ship:

- InMemoryEventStore: a list guarded by a lock (the default).
- SqlEventStore: the same contract over a SQLAlchemy session factory.

Mutations are serialised; reads return a snapshot copy, so a reader never
sees a half-finished insert. Validation of time ranges is the caller's job
(see SchedulingService.book_event); stores accept what they are given.
"""

from __future__ import annotations

import threading
import time
import uuid
from datetime import date as _date, datetime as _dt
from typing import List, Optional, Protocol

from sqlalchemy.orm import sessionmaker

import crud
from database import db_session
from models import Event, make_session_factory
from schemas import CalendarEvent
from scheduler.timeutil import UTC, local_date


def new_event_id() -> str:
    """'evt_<epoch ms>_<9 hex>'"""
    return f"evt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class EventStore(Protocol):
    def add(self, title: str, start_time: _dt, end_time: _dt) -> CalendarEvent: ...
    def all_events(self) -> List[CalendarEvent]: ...
    def events_on_date(self, target_date: _date) -> List[CalendarEvent]: ...
    def get_by_id(self, event_id: str) -> Optional[CalendarEvent]: ...
    def delete_by_id(self, event_id: str) -> bool: ...
    def clear(self) -> None: ...


class InMemoryEventStore:
    def __init__(self, offset_minutes: int = 330):
        self.offset_minutes = offset_minutes
        self._events: List[CalendarEvent] = []
        self._lock = threading.Lock()

    def add(self, title: str, start_time: _dt, end_time: _dt) -> CalendarEvent:
        event = CalendarEvent(
            id=new_event_id(),
            title=title,
            start_time=start_time,
            end_time=end_time,
            created_at=_dt.now(UTC),
        )
        with self._lock:
            self._events.append(event)
        return event

    def all_events(self) -> List[CalendarEvent]:
        with self._lock:
            return list(self._events)

    def events_on_date(self, target_date: _date) -> List[CalendarEvent]:
        snapshot = self.all_events()
        found = [e for e in snapshot if local_date(e.start_time, self.offset_minutes) == target_date]
        found.sort(key=lambda e: e.start_time)
        return found

    def get_by_id(self, event_id: str) -> Optional[CalendarEvent]:
        with self._lock:
            return next((e for e in self._events if e.id == event_id), None)

    def delete_by_id(self, event_id: str) -> bool:
        with self._lock:
            for i, e in enumerate(self._events):
                if e.id == event_id:
                    del self._events[i]
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._events = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def _to_domain(row: Event) -> CalendarEvent:
    return CalendarEvent(
        id=row.id,
        title=row.title,
        start_time=row.start_time,
        end_time=row.end_time,
        created_at=row.created_at,
    )


class SqlEventStore:
    """EventStore over SQLAlchemy; defaults to a private in-memory SQLite."""

    def __init__(self, offset_minutes: int = 330, session_factory: Optional[sessionmaker] = None,
                 url: str = "sqlite://"):
        self.offset_minutes = offset_minutes
        self._factory = session_factory or make_session_factory(url)
        self._lock = threading.Lock()

    def add(self, title: str, start_time: _dt, end_time: _dt) -> CalendarEvent:
        with self._lock, db_session(self._factory) as db:
            row = crud.create_event(db, new_event_id(), title, start_time, end_time)
            return _to_domain(row)

    def all_events(self) -> List[CalendarEvent]:
        with self._lock, db_session(self._factory) as db:
            return [_to_domain(r) for r in crud.list_events(db)]

    def events_on_date(self, target_date: _date) -> List[CalendarEvent]:
        with self._lock, db_session(self._factory) as db:
            rows = crud.get_events_on_date(db, target_date, self.offset_minutes)
            return [_to_domain(r) for r in rows]

    def get_by_id(self, event_id: str) -> Optional[CalendarEvent]:
        with self._lock, db_session(self._factory) as db:
            row = crud.get_event_by_id(db, event_id)
            return _to_domain(row) if row else None

    def delete_by_id(self, event_id: str) -> bool:
        with self._lock, db_session(self._factory) as db:
            return crud.delete_event_by_id(db, event_id)

    def clear(self) -> None:
        with self._lock, db_session(self._factory) as db:
            crud.clear_events(db)
