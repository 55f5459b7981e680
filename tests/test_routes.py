"""
Tests for the HTTP layer.

Drives the FastAPI app through TestClient with the event log, roster
and calendar swapped for in-memory fakes.
"""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from helpqueue.api import routes
from helpqueue.core.config import settings, SheetsConfig
from helpqueue.main import app, help_queue_exception_handler
from helpqueue.models.schemas import HelpEventKind
from helpqueue.queue.errors import DuplicateGroupError, GroupNotFoundError, HelpQueueError, QueueEmptyError
from helpqueue.storage.calendar import CalendarUnavailableError

from conftest import FakeRoster, RecordingEventLog

PREFIX = "/api/discord/v1"
VOICE_CHANNEL = 887022804183175188


class FakeCalendar:
    def __init__(self, event=None, available=True):
        self.event = event
        self.available = available

    async def next_class(self):
        if not self.available:
            raise CalendarUnavailableError("Calendar API returned 500")
        return self.event


@pytest.fixture
def events(monkeypatch) -> RecordingEventLog:
    log = RecordingEventLog()
    monkeypatch.setattr(routes, "event_log", log)
    return log


@pytest.fixture
def roster(monkeypatch) -> FakeRoster:
    fake = FakeRoster(rows=[
        (106223, "ilitteri@fi.uba.ar", 7),
        (100001, "someone@fi.uba.ar", None),
    ])
    monkeypatch.setattr(routes, "roster", fake)
    return fake


@pytest.fixture
def client(events) -> TestClient:
    return TestClient(app)


def enqueue(client, group, voice_channel=VOICE_CHANNEL):
    return client.post(f"{PREFIX}/enqueue_help", json={"group": group, "voice_channel": voice_channel})


# ──────────────────────────────────────────────────────────────
#  Help queue endpoints
# ──────────────────────────────────────────────────────────────

class TestHelpQueueEndpoints:
    def test_enqueue(self, client, events):
        response = enqueue(client, 1)
        assert response.status_code == 200
        assert response.json() == {"group": 1, "voice_channel": VOICE_CHANNEL, "position": 1}
        assert events.events == [(HelpEventKind.REQUESTED, 1, "")]

    def test_enqueue_duplicate(self, client, events):
        enqueue(client, 5)
        response = enqueue(client, 5)
        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateGroupError"
        assert client.get(f"{PREFIX}/help_queue").json() == [5]
        assert len(events.events) == 1

    def test_enqueue_validation(self, client):
        assert enqueue(client, -1).status_code == 422
        assert enqueue(client, 70000).status_code == 422
        response = client.post(f"{PREFIX}/enqueue_help", json={"group": 1})
        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    def test_full_scenario(self, client, events):
        enqueue(client, 1, 11)
        enqueue(client, 2, 22)
        assert client.get(f"{PREFIX}/help_queue").json() == [1, 2]

        response = client.request("GET", f"{PREFIX}/next", json="Ivan")
        assert response.status_code == 200
        assert response.json() == {"group": 1, "voice_channel": 11}
        assert client.get(f"{PREFIX}/help_queue").json() == [2]

        response = client.post(f"{PREFIX}/dismiss_help", json=2)
        assert response.status_code == 200
        assert response.json() == {"group": 2, "voice_channel": 22, "dismissed": True}
        assert client.get(f"{PREFIX}/help_queue").json() == []

        response = client.post(f"{PREFIX}/next", json="Ivan")
        assert response.status_code == 404
        assert response.json()["error"] == "QueueEmptyError"

        assert [e[0] for e in events.events] == [
            HelpEventKind.REQUESTED,
            HelpEventKind.REQUESTED,
            HelpEventKind.PROVIDED,
            HelpEventKind.DISMISSED,
        ]
        assert events.events[2] == (HelpEventKind.PROVIDED, 1, "Ivan")

    def test_next_requires_helper(self, client):
        enqueue(client, 1)
        assert client.post(f"{PREFIX}/next").status_code == 422
        assert client.get(f"{PREFIX}/help_queue").json() == [1]

    def test_dismiss_absent_group_is_not_an_error(self, client, events):
        response = client.request("GET", f"{PREFIX}/dismiss_help", json=9)
        assert response.status_code == 200
        assert response.json() == {"group": 9, "voice_channel": None, "dismissed": False}
        assert events.events == []

    def test_dismiss_twice(self, client):
        enqueue(client, 3)
        enqueue(client, 4)
        assert client.post(f"{PREFIX}/dismiss_help", json=3).json()["dismissed"] is True
        assert client.post(f"{PREFIX}/dismiss_help", json=3).json()["dismissed"] is False
        assert client.get(f"{PREFIX}/help_queue").json() == [4]

    def test_clear(self, client, events):
        for group in range(3):
            enqueue(client, group)
        response = client.patch(f"{PREFIX}/clear_help_queue")
        assert response.status_code == 200
        assert response.json() == {"cleared": 3}
        assert client.get(f"{PREFIX}/help_queue").json() == []
        assert client.post(f"{PREFIX}/next", json="Ivan").status_code == 404
        assert events.events[-1] == (HelpEventKind.CLEARED, None, "")

    def test_health(self, client):
        enqueue(client, 1)
        body = client.get(f"{PREFIX}/health").json()
        assert body["status"] == "healthy"
        assert body["queue_length"] == 1
        assert body["event_log_enabled"] is True

    def test_root(self, client):
        body = client.get("/").json()
        assert body["endpoints"]["enqueue_help"] == f"POST {PREFIX}/enqueue_help"


# ──────────────────────────────────────────────────────────────
#  Roster enforcement
# ──────────────────────────────────────────────────────────────

class TestRosterEnforcement:
    @pytest.fixture(autouse=True)
    def enforce(self, monkeypatch):
        monkeypatch.setattr(settings, "sheets", SheetsConfig(spreadsheet_id="roster", roster_enforce=True))

    def test_known_group_is_queued(self, client, roster):
        assert enqueue(client, 7).status_code == 200

    def test_unknown_group_is_rejected(self, client, roster, events):
        response = enqueue(client, 8)
        assert response.status_code == 403
        assert client.get(f"{PREFIX}/help_queue").json() == []
        assert events.events == []

    def test_roster_unavailable(self, client, roster):
        roster.available = False
        assert enqueue(client, 7).status_code == 503
        assert client.get(f"{PREFIX}/help_queue").json() == []


# ──────────────────────────────────────────────────────────────
#  Roster & calendar endpoints
# ──────────────────────────────────────────────────────────────

class TestLookupEndpoints:
    def test_is_student(self, client, roster):
        response = client.get(f"{PREFIX}/is_student", params={"id": 106223, "email": "ILitteri@fi.uba.ar"})
        assert response.status_code == 200
        assert response.json() == {"is_student": True}

        response = client.get(f"{PREFIX}/is_student", params={"id": 106223, "email": "other@fi.uba.ar"})
        assert response.json() == {"is_student": False}

    def test_is_student_roster_unavailable(self, client, roster):
        roster.available = False
        response = client.get(f"{PREFIX}/is_student", params={"id": 1, "email": "a@b.c"})
        assert response.status_code == 503

    def test_group(self, client, roster):
        response = client.get(f"{PREFIX}/group", params={"id": 106223, "email": "ilitteri@fi.uba.ar"})
        assert response.status_code == 200
        assert response.json() == {"group": 7}

    def test_group_unknown_or_unassigned(self, client, roster):
        assert client.get(f"{PREFIX}/group", params={"id": 1, "email": "a@b.c"}).status_code == 404
        response = client.get(f"{PREFIX}/group", params={"id": 100001, "email": "someone@fi.uba.ar"})
        assert response.status_code == 404

    def test_next_class(self, client, monkeypatch):
        event = {"summary": "Clase 5", "start": "2026-10-20T19:00:00-03:00", "end": "2026-10-20T22:00:00-03:00"}
        monkeypatch.setattr(routes, "calendar_client", FakeCalendar(event))
        response = client.get(f"{PREFIX}/next_class")
        assert response.status_code == 200
        assert response.json() == event

    def test_next_class_none_scheduled(self, client, monkeypatch):
        monkeypatch.setattr(routes, "calendar_client", FakeCalendar(None))
        assert client.get(f"{PREFIX}/next_class").status_code == 404

    def test_next_class_calendar_unavailable(self, client, monkeypatch):
        monkeypatch.setattr(routes, "calendar_client", FakeCalendar(available=False))
        assert client.get(f"{PREFIX}/next_class").status_code == 503

    def test_lookup_requires_id(self, client, roster):
        response = client.get(f"{PREFIX}/is_student", params={"email": "ilitteri@fi.uba.ar"})
        assert response.status_code == 422
        response = client.get(f"{PREFIX}/group", params={"student_id": 106223, "email": "ilitteri@fi.uba.ar"})
        assert response.status_code == 422


# ──────────────────────────────────────────────────────────────
#  Queue error mapping
# ──────────────────────────────────────────────────────────────

class TestQueueErrorMapping:
    @pytest.mark.parametrize("error, status_code", [
        (DuplicateGroupError(3), 409),
        (QueueEmptyError(), 404),
        (GroupNotFoundError(3), 404),
        (HelpQueueError("enqueue", "bad request", 3), 400),
    ])
    def test_status_codes(self, error, status_code):
        response = asyncio.run(help_queue_exception_handler(None, error))
        assert response.status_code == status_code
        assert json.loads(response.body)["error"] == type(error).__name__
