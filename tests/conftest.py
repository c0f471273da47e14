"""
Pytest configuration and fixtures.

Every test runs against a frozen clock: 2026-10-20 08:00 local (UTC+05:30),
i.e. 02:30 UTC. "Tomorrow" (2026-10-21) is used when a test must not be
affected by the "now" cut-off.
"""
from datetime import date, datetime, time, timedelta, timezone

import pytest

from calendar_service import SchedulingService
from event_store import InMemoryEventStore, SqlEventStore
from scheduler.config import SchedulerConfig

OFFSET = timedelta(hours=5, minutes=30)
TODAY = date(2026, 10, 20)
TOMORROW = date(2026, 10, 21)
DAY_AFTER = date(2026, 10, 22)


def local(d: date, hh: int, mm: int = 0) -> datetime:
    """Local wall-clock at +05:30 -> aware UTC datetime."""
    return datetime.combine(d, time(hh, mm), tzinfo=timezone(OFFSET)).astimezone(timezone.utc)


NOW = local(TODAY, 8, 0)


@pytest.fixture
def config():
    return SchedulerConfig()


@pytest.fixture
def memory_store(config):
    return InMemoryEventStore(config.utc_offset_minutes)


@pytest.fixture(params=["memory", "sql"])
def any_store(request, config):
    """Both EventStore implementations, one per test run."""
    if request.param == "memory":
        return InMemoryEventStore(config.utc_offset_minutes)
    return SqlEventStore(config.utc_offset_minutes)


@pytest.fixture
def service(memory_store, config):
    return SchedulingService(memory_store, config, clock=lambda: NOW)


@pytest.fixture
def book(memory_store):
    """book(d, (h, m), (h, m), title) -> CalendarEvent in the memory store."""
    def _book(d, start, end, title="Busy"):
        return memory_store.add(title, local(d, *start), local(d, *end))
    return _book
