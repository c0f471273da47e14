# crud.py

from datetime import date as _date, datetime as _dt
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Event
from scheduler.timeutil import UTC, ensure_utc, local_day_bounds


def _naive_utc(ts: _dt) -> _dt:
    """Columns hold naive UTC."""
    return ensure_utc(ts).replace(tzinfo=None)


# ------------------------
# Core fetch by id
# ------------------------

def get_event_by_id(db: Session, event_id: str) -> Optional[Event]:
    """Fetch a single event by its public id."""
    return db.query(Event).filter(Event.id == event_id).first()


# ------------------------
# READ operations
# ------------------------

def list_events(db: Session) -> List[Event]:
    """All events in insertion order."""
    return db.query(Event).order_by(Event.seq).all()


def get_events_on_date(db: Session, target_date: _date, offset_minutes: int) -> List[Event]:
    """Events whose start falls on local `target_date`, sorted by start."""
    start, end = local_day_bounds(target_date, offset_minutes)
    return (
        db.query(Event)
        .filter(Event.start_time >= _naive_utc(start), Event.start_time < _naive_utc(end))
        .order_by(Event.start_time, Event.end_time)
        .all()
    )


# ------------------------
# WRITE operations
# ------------------------

def create_event(
    db: Session,
    event_id: str,
    title: str,
    start_time: _dt,
    end_time: _dt,
    created_at: Optional[_dt] = None,
) -> Event:
    """Insert one event. Range validation happens at the service boundary."""
    ev = Event(
        id=event_id,
        title=title,
        start_time=_naive_utc(start_time),
        end_time=_naive_utc(end_time),
        created_at=_naive_utc(created_at or _dt.now(UTC)),
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    return ev


def delete_event_by_id(db: Session, event_id: str) -> bool:
    ev = get_event_by_id(db, event_id)
    if not ev:
        return False
    db.delete(ev)
    db.commit()
    return True


def clear_events(db: Session) -> int:
    """Delete every event; returns how many rows went."""
    n = db.query(Event).delete()
    db.commit()
    return n
