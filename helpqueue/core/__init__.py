"""
Core module containing configuration and utilities.
"""

from .config import settings
from .utils import get_timestamp, get_sheet_timestamp, truncate_string

__all__ = ["settings", "get_timestamp", "get_sheet_timestamp", "truncate_string"]
