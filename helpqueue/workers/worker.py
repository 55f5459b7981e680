"""
Background Worker - Writes help events to the help sheet.

Request handlers record an event after every successful queue
operation and return immediately. This worker runs inside the API
process and drains those events one at a time, so that:

1. A slow or failing Sheets API never delays a queue operation
2. A failed write never undoes the queue change it describes
3. Rows reach the sheet in the order the operations happened

The buffer lives in memory: events still pending when the process
exits are lost, just like the queue itself.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..core.config import settings, EventLogConfig, SheetsConfig
from ..core.utils import get_sheet_timestamp
from ..models.schemas import HelpEventKind
from ..storage.sheets import SheetsClient, sheets_client

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HelpEvent:
    """
    One row of the help sheet.

    Attributes:
        kind: What happened
        group: Group involved (None for a queue clear)
        helper: Helper who served the group, if any
        timestamp: When it happened, formatted for the sheet
    """
    kind: HelpEventKind
    group: Optional[int] = None
    helper: str = ""
    timestamp: str = field(default_factory=get_sheet_timestamp)

    def to_row(self) -> list[str]:
        group = "" if self.group is None else str(self.group)
        return [self.timestamp, group, self.kind.value, self.helper]


class EventLog:
    """
    Fire-and-forget sink for help events.

    record() never blocks and never raises: when the buffer is full or
    no help sheet is configured the event is dropped and logged.
    """

    def __init__(
        self,
        sheets: Optional[SheetsClient] = None,
        sheets_config: Optional[SheetsConfig] = None,
        config: Optional[EventLogConfig] = None
    ):
        self.sheets = sheets or sheets_client
        self.sheets_config = sheets_config or settings.sheets
        self.config = config or settings.event_log
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=self.config.max_pending)

    @property
    def enabled(self) -> bool:
        return bool(self.sheets_config.helpsheet_id)

    @property
    def pending(self) -> int:
        return self.queue.qsize()

    def record(
        self,
        kind: HelpEventKind,
        group: Optional[int] = None,
        helper: str = ""
    ) -> bool:
        """
        Buffer an event for the worker.

        Returns:
            True if the event was buffered, False if it was dropped
        """
        event = HelpEvent(kind=kind, group=group, helper=helper)

        if not self.enabled:
            logger.debug(f"Event log disabled, dropping {kind.value} event for group {group}")
            return False

        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Event log full, dropping {kind.value} event for group {group}")
            return False
        return True

    async def write(self, event: HelpEvent) -> bool:
        """Append an event to the help sheet."""
        return await self.sheets.append_row(
            self.sheets_config.helpsheet_id,
            self.sheets_config.help_sheet,
            event.to_row()
        )


class EventLogWorker:
    """
    Single-task writer for the event log.

    The worker:
    - Waits for buffered events
    - Writes them to the help sheet one at a time
    - Retries a failed write a fixed number of times
    - Drops an event that keeps failing instead of stalling the rest
    """

    def __init__(self, event_log: EventLog, config: Optional[EventLogConfig] = None):
        self.event_log = event_log
        config = config or event_log.config
        self.max_retries = max(1, config.max_retries)
        self.retry_delay = config.retry_delay
        self.running = False
        self.events_written = 0
        self.events_dropped = 0
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        """Start the worker loop as a background task on the running loop."""
        if self._task is None or self._task.done():
            self.running = True
            self._task = asyncio.create_task(self.run(), name="event-log-worker")
            logger.info("Event log worker started")
        return self._task

    async def run(self):
        """
        Worker main loop.

        Runs until stopped, sleeping on the buffer while it is empty.
        """
        queue = self.event_log.queue

        while self.running:
            try:
                event = await queue.get()
            except asyncio.CancelledError:
                logger.info("Event log worker received cancellation signal")
                break

            try:
                await self._write_event(event)
            except Exception as e:
                # Log error but don't crash - continue with the next event
                self.events_dropped += 1
                logger.error(
                    f"Unexpected error writing {event.kind.value} event for group {event.group}: {str(e)}",
                    exc_info=True
                )
            finally:
                queue.task_done()

        logger.info(
            f"Event log worker stopped. Written: {self.events_written}, "
            f"Dropped: {self.events_dropped}"
        )

    async def stop(self, drain_timeout: float = 5.0):
        """
        Stop the worker, giving buffered events a chance to be written.

        Args:
            drain_timeout: Seconds to wait for the buffer to empty
        """
        logger.info("Event log worker stop requested")
        if self._task is None:
            self.running = False
            return

        # join() also waits for the event currently being written
        try:
            await asyncio.wait_for(self.event_log.queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Event log worker stopping with {self.event_log.pending} events unwritten")

        self.running = False
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _write_event(self, event: HelpEvent):
        """
        Write one event, retrying on failure.

        Args:
            event: The event to write
        """
        for attempt in range(1, self.max_retries + 1):
            if await self.event_log.write(event):
                self.events_written += 1
                return
            if attempt < self.max_retries:
                logger.warning(
                    f"Writing {event.kind.value} event for group {event.group} failed "
                    f"(attempt {attempt}/{self.max_retries}), retrying in {self.retry_delay}s"
                )
                await asyncio.sleep(self.retry_delay)

        self.events_dropped += 1
        logger.error(f"Dropped {event.kind.value} event for group {event.group} after {self.max_retries} attempts")


# Global event log and worker for the application
event_log = EventLog()
event_log_worker = EventLogWorker(event_log)
