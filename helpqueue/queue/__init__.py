"""
Queue module for help request operations.
"""

from .errors import HelpQueueError, DuplicateGroupError, QueueEmptyError, GroupNotFoundError
from .store import HelpRequest, QueueStore
from .manager import help_queue, HelpQueue

__all__ = [
    "help_queue",
    "HelpQueue",
    "HelpRequest",
    "QueueStore",
    "HelpQueueError",
    "DuplicateGroupError",
    "QueueEmptyError",
    "GroupNotFoundError",
]
