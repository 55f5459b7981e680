"""
Help queue errors.

Every failure the queue can report is a subclass of HelpQueueError so the
HTTP layer can map them to status codes in one place. None of them are
fatal: the queue is never left half-mutated when one is raised.
"""

from typing import Optional


class HelpQueueError(Exception):
    """
    Base class for help queue failures.

    Attributes:
        operation: Name of the queue operation that failed
        group_id: Group involved in the failure, if any
    """

    def __init__(self, operation: str, message: str, group_id: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.group_id = group_id


class DuplicateGroupError(HelpQueueError):
    """The group already has a pending help request."""

    def __init__(self, group_id: int):
        super().__init__("enqueue", f"Group {group_id} already in queue", group_id)


class QueueEmptyError(HelpQueueError):
    """There is no pending help request to hand out."""

    def __init__(self):
        super().__init__("next", "No group in queue")


class GroupNotFoundError(HelpQueueError):
    """The group has no pending help request."""

    def __init__(self, group_id: int):
        super().__init__("remove", f"Group {group_id} not in queue", group_id)
