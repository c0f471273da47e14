"""
HTTP tests through the Flask test client.
"""

import pytest

from app import create_app

from conftest import TOMORROW, local


@pytest.fixture
def client(service):
    app = create_app(service)
    app.config["TESTING"] = True
    return app.test_client()


def _create(client, title="Sync", start="2026-10-21T08:30:00.000Z", end="2026-10-21T09:30:00.000Z"):
    return client.post("/events", json={"title": title, "startTime": start, "endTime": end})


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


class TestEvents:

    def test_create_event(self, client):
        resp = _create(client)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["eventId"].startswith("evt_")
        assert body["message"] == 'Successfully created calendar event "Sync"'
        assert body["event"]["startTime"] == "2026-10-21T08:30:00.000Z"
        assert body["event"]["endTime"] == "2026-10-21T09:30:00.000Z"

    def test_snake_case_fields_accepted(self, client):
        resp = client.post("/events", json={
            "title": "Sync",
            "start_time": "2026-10-21T08:30:00Z",
            "end_time": "2026-10-21T09:00:00Z",
        })
        assert resp.status_code == 201

    def test_inverted_range_rejected(self, client):
        resp = _create(client, start="2026-10-21T09:30:00Z", end="2026-10-21T08:30:00Z")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid request"

    def test_missing_times_rejected(self, client):
        resp = client.post("/events", json={"title": "Sync"})
        assert resp.status_code == 400

    def test_malformed_json(self, client):
        resp = client.post("/events", data="{not json", content_type="application/json")
        assert resp.status_code == 400

    def test_non_json_body_gets_json_error(self, client):
        resp = client.post("/events", data="title=Sync", content_type="text/plain")
        assert resp.status_code == 415
        assert resp.is_json
        assert resp.get_json()["error"] == "Unsupported Media Type"

    def test_get_and_delete(self, client):
        event_id = _create(client).get_json()["eventId"]
        assert client.get(f"/events/{event_id}").get_json()["title"] == "Sync"

        resp = client.delete(f"/events/{event_id}")
        assert resp.status_code == 200
        assert resp.get_json()["deleted"] is True

        assert client.get(f"/events/{event_id}").status_code == 404
        assert client.delete(f"/events/{event_id}").status_code == 404

    def test_events_for_date(self, client):
        _create(client)
        body = client.get("/events?date=2026-10-21").get_json()
        assert body["count"] == 1
        assert body["isEmpty"] is False
        assert body["reasoning"] == "Found 1 event(s) scheduled for 2026-10-21"

        empty = client.get("/events?date=2026-10-22").get_json()
        assert empty["isEmpty"] is True

    def test_events_bad_date(self, client):
        assert client.get("/events?date=tomorrow").status_code == 400

    def test_list_and_clear(self, client):
        _create(client, title="A")
        _create(client, title="B", start="2026-10-21T10:00:00Z", end="2026-10-21T11:00:00Z")
        body = client.get("/events").get_json()
        assert body["count"] == 2
        assert [e["title"] for e in body["events"]] == ["A", "B"]

        assert client.delete("/events").get_json() == {"cleared": True}
        assert client.get("/events").get_json()["count"] == 0


class TestSlots:

    def test_best_slot_on_empty_day(self, client):
        resp = client.post("/slots/best", json={"date": "2026-10-21", "duration": 60})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["startTime"] == "2026-10-21T08:30:00.000Z"
        assert body["endTime"] == "2026-10-21T09:30:00.000Z"
        assert body["startTimeLocal"] == "2026-10-21T14:00:00.000+05:30"
        assert "2:00 PM" in body["reasoning"]

    def test_best_slot_with_preferences(self, client, book):
        book(TOMORROW, (10, 0), (11, 0))
        resp = client.post("/slots/best", json={
            "date": "2026-10-21",
            "durationMinutes": 30,
            "preferredTime": "10:15",
            "isFatigued": False,
        })
        body = resp.get_json()
        assert body["success"] is True
        assert body["startTime"] == "2026-10-21T05:30:00.000Z"
        assert "score" in body

    def test_no_slot_is_not_an_error(self, client, book):
        book(TOMORROW, (9, 0), (12, 0))
        book(TOMORROW, (12, 30), (15, 0))
        book(TOMORROW, (15, 30), (18, 0))
        resp = client.post("/slots/best", json={"date": "2026-10-21", "duration": 60})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is False
        assert "startTime" not in body
        assert body["reasoning"]

    @pytest.mark.parametrize("payload", [
        {"date": "2026-10-21", "duration": 0},
        {"date": "2026-10-21"},
        {"date": "not-a-date", "duration": 30},
        {"date": "2026-10-21", "duration": 30, "preferredTime": "25:99"},
    ])
    def test_invalid_input(self, client, payload):
        resp = client.post("/slots/best", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid request"


class TestNaturalLanguage:

    def test_analyze(self, client):
        resp = client.post("/analyze", json={"request": "Book a 2 hour workshop next week"})
        body = resp.get_json()
        assert body["title"] == "2 hour workshop"
        assert body["durationMinutes"] == 120
        assert body["date"] == "2026-10-27"
        assert body["hasSpecificTime"] is False

    def test_analyze_requires_text(self, client):
        assert client.post("/analyze", json={}).status_code == 400

    def test_schedule_books(self, client):
        resp = client.post("/schedule", json={"request": "Schedule a team sync tomorrow at 3pm for 30 minutes"})
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["event"]["title"] == "team sync"
        assert body["event"]["startTime"] == local(TOMORROW, 15).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        assert body["result"]["success"] is True

    def test_schedule_conflict(self, client, book):
        book(TOMORROW, (9, 0), (12, 0))
        book(TOMORROW, (12, 30), (15, 0))
        book(TOMORROW, (15, 30), (18, 0))
        resp = client.post("/schedule", json={"request": "Plan a retro tomorrow"})
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["result"]["success"] is False
        assert "event" not in body
