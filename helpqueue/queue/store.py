"""
Queue Store - The ordered, deduplicated set of pending help requests.

Requests are kept in an insertion-ordered mapping keyed by group id, so:
- The head of the mapping is always the oldest pending request (FIFO)
- A group can appear at most once
- Removing any entry leaves the relative order of the rest untouched

Every public method runs as a single critical section behind one lock.
Request handlers may call into the store from the event loop or from
worker threads, and no call ever waits on I/O while holding the lock.
"""

import itertools
import threading
from collections import OrderedDict
from dataclasses import dataclass

from ..core.utils import get_timestamp
from .errors import DuplicateGroupError, GroupNotFoundError, QueueEmptyError


@dataclass(frozen=True)
class HelpRequest:
    """
    A pending help request.

    Attributes:
        group_id: The group asking for help (unique while pending)
        voice_channel: Contact handle handed to the helper unchanged
        enqueued_at: Monotonic sequence number that fixes FIFO order
        requested_at: ISO timestamp of the request, for display only
    """
    group_id: int
    voice_channel: int
    enqueued_at: int
    requested_at: str


class QueueStore:
    """
    Lock-guarded FIFO of help requests.

    The store owns the sequence counter, so sequence numbers are handed
    out in exactly the order entries are inserted.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: "OrderedDict[int, HelpRequest]" = OrderedDict()
        self._sequence = itertools.count()

    def insert(self, group_id: int, voice_channel: int) -> tuple[HelpRequest, int]:
        """
        Append a request for the group to the tail of the queue.

        Args:
            group_id: The group asking for help
            voice_channel: Contact handle for the group

        Returns:
            The stored request and its 1-based position in the queue

        Raises:
            DuplicateGroupError: The group is already queued. The existing
                entry is left as it was.
        """
        with self._lock:
            if group_id in self._entries:
                raise DuplicateGroupError(group_id)
            request = HelpRequest(
                group_id=group_id,
                voice_channel=voice_channel,
                enqueued_at=next(self._sequence),
                requested_at=get_timestamp()
            )
            self._entries[group_id] = request
            return request, len(self._entries)

    def pop_front(self) -> HelpRequest:
        """
        Remove and return the oldest request.

        Raises:
            QueueEmptyError: Nothing is pending
        """
        with self._lock:
            if not self._entries:
                raise QueueEmptyError()
            _, request = self._entries.popitem(last=False)
            return request

    def remove(self, group_id: int) -> HelpRequest:
        """
        Remove the request of a group wherever it sits in the queue.

        Raises:
            GroupNotFoundError: The group has no pending request
        """
        with self._lock:
            try:
                return self._entries.pop(group_id)
            except KeyError:
                raise GroupNotFoundError(group_id) from None

    def clear(self) -> int:
        """Drop every pending request and return how many there were."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def snapshot(self) -> tuple[HelpRequest, ...]:
        """Point-in-time copy of the queue, oldest first."""
        with self._lock:
            return tuple(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, group_id: object) -> bool:
        with self._lock:
            return group_id in self._entries
