"""
Contract tests run against both EventStore implementations.
"""

import threading
from datetime import datetime, timezone

from event_store import InMemoryEventStore, new_event_id

from conftest import TODAY, TOMORROW, local


def test_event_ids_are_prefixed_and_unique():
    ids = {new_event_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("evt_") for i in ids)


def test_add_returns_stored_event(any_store):
    ev = any_store.add("Standup", local(TOMORROW, 9), local(TOMORROW, 9, 15))
    assert ev.id.startswith("evt_")
    assert ev.title == "Standup"
    assert ev.start_time == local(TOMORROW, 9)
    assert ev.start_time.tzinfo is not None
    assert ev.created_at.tzinfo is not None
    assert any_store.get_by_id(ev.id) == ev


def test_all_events_in_insertion_order(any_store):
    late = any_store.add("Late", local(TOMORROW, 16), local(TOMORROW, 17))
    early = any_store.add("Early", local(TOMORROW, 9), local(TOMORROW, 10))
    assert [e.id for e in any_store.all_events()] == [late.id, early.id]


def test_events_on_date_sorted_by_start(any_store):
    any_store.add("B", local(TOMORROW, 15), local(TOMORROW, 16))
    any_store.add("A", local(TOMORROW, 9), local(TOMORROW, 10))
    any_store.add("Other day", local(TODAY, 11), local(TODAY, 12))
    assert [e.title for e in any_store.events_on_date(TOMORROW)] == ["A", "B"]
    assert [e.title for e in any_store.events_on_date(TODAY)] == ["Other day"]


def test_events_on_date_uses_local_calendar_day(any_store):
    # 2026-10-20 20:00 UTC is 2026-10-21 01:30 at +05:30
    start = datetime(2026, 10, 20, 20, 0, tzinfo=timezone.utc)
    end = datetime(2026, 10, 20, 21, 0, tzinfo=timezone.utc)
    any_store.add("Night owl", start, end)
    assert [e.title for e in any_store.events_on_date(TOMORROW)] == ["Night owl"]
    assert any_store.events_on_date(TODAY) == []


def test_get_unknown_id(any_store):
    assert any_store.get_by_id("evt_missing") is None


def test_delete_by_id(any_store):
    keep = any_store.add("Keep", local(TOMORROW, 9), local(TOMORROW, 10))
    drop = any_store.add("Drop", local(TOMORROW, 11), local(TOMORROW, 12))
    assert any_store.delete_by_id(drop.id) is True
    assert any_store.delete_by_id(drop.id) is False
    assert [e.id for e in any_store.all_events()] == [keep.id]


def test_clear(any_store):
    any_store.add("A", local(TOMORROW, 9), local(TOMORROW, 10))
    any_store.add("B", local(TOMORROW, 11), local(TOMORROW, 12))
    any_store.clear()
    assert any_store.all_events() == []
    assert any_store.events_on_date(TOMORROW) == []


def test_snapshot_is_not_live(any_store):
    any_store.add("A", local(TOMORROW, 9), local(TOMORROW, 10))
    snapshot = any_store.all_events()
    any_store.add("B", local(TOMORROW, 11), local(TOMORROW, 12))
    assert len(snapshot) == 1


def test_concurrent_adds_are_all_kept():
    store = InMemoryEventStore()

    def worker(n):
        for i in range(50):
            store.add(f"w{n}-{i}", local(TOMORROW, 9), local(TOMORROW, 10))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store) == 200
    assert len({e.id for e in store.all_events()}) == 200
