"""Shared test fixtures for the help queue API."""
import pytest
from typing import Optional

from helpqueue.core.config import SheetsConfig, EventLogConfig
from helpqueue.models.schemas import HelpEventKind
from helpqueue.queue.manager import HelpQueue, help_queue


class RecordingEventLog:
    """Stands in for the event log and remembers what was recorded."""

    enabled = True
    pending = 0

    def __init__(self):
        self.events: list[tuple[HelpEventKind, Optional[int], str]] = []

    def record(self, kind: HelpEventKind, group: Optional[int] = None, helper: str = "") -> bool:
        self.events.append((kind, group, helper))
        return True


class FakeRoster:
    """Roster backed by a list of (id, email, group) rows."""

    def __init__(self, rows=None, available: bool = True):
        self.rows = rows or []
        self.available = available

    def _check(self):
        from helpqueue.storage.sheets import RosterUnavailableError
        if not self.available:
            raise RosterUnavailableError("Roster spreadsheet could not be read")

    async def is_student(self, student_id: int, email: str) -> bool:
        self._check()
        return any(r[0] == student_id and r[1] == email.lower() for r in self.rows)

    async def group_of(self, student_id: int, email: str) -> Optional[int]:
        self._check()
        for r in self.rows:
            if r[0] == student_id and r[1] == email.lower():
                return r[2]
        return None

    async def has_group(self, group_id: int) -> bool:
        self._check()
        return any(r[2] == group_id for r in self.rows)


@pytest.fixture
def queue() -> HelpQueue:
    """A fresh help queue, independent of the application's."""
    return HelpQueue()


@pytest.fixture(autouse=True)
def reset_help_queue():
    """The application queue is process-wide; start every test empty."""
    help_queue.clear()
    yield
    help_queue.clear()


@pytest.fixture
def sheets_config() -> SheetsConfig:
    return SheetsConfig(
        spreadsheet_id="roster-sheet",
        roster_sheet="Alumnos",
        roster_range="A2:C",
        helpsheet_id="help-sheet",
        help_sheet="Ayudas",
    )


@pytest.fixture
def event_log_config() -> EventLogConfig:
    return EventLogConfig(max_retries=3, retry_delay=0.0, max_pending=10)
