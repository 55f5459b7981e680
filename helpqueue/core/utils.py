"""
Shared utility functions for the help queue API.

Timestamp helpers used by the queue, the event log and the API responses.
"""

from datetime import datetime, timezone


def get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO-formatted UTC timestamp string
    """
    return datetime.now(timezone.utc).isoformat()


def get_sheet_timestamp() -> str:
    """
    Get current UTC time formatted for a spreadsheet cell.

    Sheets parses "YYYY-MM-DD HH:MM:SS" as a date-time when rows are
    appended with USER_ENTERED input.

    Returns:
        Timestamp string such as "2026-01-01 12:00:00"
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def truncate_string(s: str, max_length: int = 100) -> str:
    """
    Truncate a string to a maximum length for logging.

    Args:
        s: String to truncate
        max_length: Maximum allowed length

    Returns:
        Original string if short enough, otherwise truncated with ellipsis
    """
    if len(s) <= max_length:
        return s
    return s[:max_length - 3] + "..."
