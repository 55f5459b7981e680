"""
Help Queue - The operations exposed to request handlers.

Each operation is one transition on the QueueStore:
- enqueue: a group asks for help
- next: a helper takes the oldest pending group
- dismiss: a group withdraws (or is withdrawn) before being served
- clear: every pending request is dropped
- sorted: read-only listing in service order

Side effects such as spreadsheet rows or voice channel invites are the
caller's job and happen after these methods return.
"""

import logging
from typing import Optional

from .errors import GroupNotFoundError
from .store import HelpRequest, QueueStore

# Configure logging
logger = logging.getLogger(__name__)


class HelpQueue:
    """
    Process-wide help queue.

    Wraps a QueueStore and is the only way the rest of the application
    touches it.
    """

    def __init__(self, store: Optional[QueueStore] = None):
        self._store = store if store is not None else QueueStore()

    def enqueue(self, group_id: int, voice_channel: int) -> tuple[HelpRequest, int]:
        """
        Push a group's help request to the tail of the queue.

        Args:
            group_id: The group asking for help
            voice_channel: Where the helper should meet the group

        Returns:
            The stored request and its 1-based position

        Raises:
            DuplicateGroupError: The group is already waiting
        """
        request, position = self._store.insert(group_id, voice_channel)
        logger.info(f"Enqueued group {group_id} at position {position}")
        return request, position

    def next(self, helper: str) -> HelpRequest:
        """
        Hand the oldest pending request to a helper.

        The helper name is only used for logging; it plays no part in
        choosing which group is served.

        Raises:
            QueueEmptyError: Nothing is pending
        """
        request = self._store.pop_front()
        logger.info(f"{helper} helped group {request.group_id}")
        return request

    def dismiss(self, group_id: int) -> Optional[HelpRequest]:
        """
        Withdraw a group's pending request.

        Dismissing a group that is not queued is a successful no-op.

        Returns:
            The removed request, or None if the group was not queued
        """
        try:
            request = self._store.remove(group_id)
        except GroupNotFoundError:
            logger.info(f"Dismiss for group {group_id} ignored: not in queue")
            return None
        logger.info(f"Dismissed group {group_id} help request")
        return request

    def clear(self) -> int:
        """Empty the queue and return how many requests were dropped."""
        removed = self._store.clear()
        logger.info(f"Cleared help queue ({removed} pending requests dropped)")
        return removed

    def sorted(self) -> tuple[HelpRequest, ...]:
        """Pending requests in the order they will be served."""
        return self._store.snapshot()

    def group_ids(self) -> list[int]:
        return [request.group_id for request in self._store.snapshot()]

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._store


# Global help queue instance for the application
help_queue = HelpQueue()
