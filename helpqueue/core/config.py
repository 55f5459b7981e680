"""
Configuration module for the help queue API.

Manages environment variables for the HTTP server and the Google
services the API logs to and reads from. Google access is granted
through a service account key file whose path comes from the
environment; the key itself never lives in the code.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Sheets is read (roster) and written (help events); the calendar is only read
GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/calendar.readonly",
)


@dataclass(frozen=True)
class GoogleConfig:
    """
    Immutable configuration for the Google REST APIs.

    Attributes:
        credentials_file: Path to the service account JSON key
        scopes: OAuth scopes requested for the service account
        sheets_url: Base URL of the Sheets v4 API
        calendar_url: Base URL of the Calendar v3 API
        timeout: Request timeout in seconds
    """
    credentials_file: str = ""
    scopes: tuple[str, ...] = GOOGLE_SCOPES
    sheets_url: str = "https://sheets.googleapis.com/v4"
    calendar_url: str = "https://www.googleapis.com/calendar/v3"
    timeout: float = 10.0


@dataclass(frozen=True)
class SheetsConfig:
    """
    Where the roster lives and where help events are written.

    Attributes:
        spreadsheet_id: Spreadsheet holding the student roster
        roster_sheet: Sheet (tab) name of the roster
        roster_range: A1 range of the roster rows (id, email, group)
        helpsheet_id: Spreadsheet that receives help events
        help_sheet: Sheet (tab) name for help events
        roster_enforce: Reject help requests from groups not in the roster
    """
    spreadsheet_id: str = ""
    roster_sheet: str = "Alumnos"
    roster_range: str = "A2:C"
    helpsheet_id: str = ""
    help_sheet: str = "Ayudas"
    roster_enforce: bool = False


@dataclass(frozen=True)
class CalendarConfig:
    """
    Attributes:
        calendar_id: Calendar holding the class schedule
    """
    calendar_id: str = ""


@dataclass(frozen=True)
class EventLogConfig:
    """
    Configuration for the background event log writer.

    Attributes:
        max_retries: Append attempts per row before it is dropped
        retry_delay: Wait between attempts (seconds)
        max_pending: Events buffered before new ones are dropped
    """
    max_retries: int = 3
    retry_delay: float = 1.0
    max_pending: int = 1000


class Settings:
    """
    Central settings manager that aggregates all configuration.

    Loads configuration from environment variables with fallbacks
    to default values for local development.
    """

    def __init__(self):
        self.google = GoogleConfig(
            credentials_file=os.getenv(
                "GOOGLE_SERVICE_ACCOUNT_FILE",
                os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
            ),
            sheets_url=os.getenv("GOOGLE_SHEETS_URL", "https://sheets.googleapis.com/v4"),
            calendar_url=os.getenv("GOOGLE_CALENDAR_URL", "https://www.googleapis.com/calendar/v3"),
            timeout=float(os.getenv("HTTP_TIMEOUT", "10.0"))
        )

        self.sheets = SheetsConfig(
            spreadsheet_id=os.getenv("SPREADSHEET_ID", ""),
            roster_sheet=os.getenv("ROSTER_SHEET", "Alumnos"),
            roster_range=os.getenv("ROSTER_RANGE", "A2:C"),
            helpsheet_id=os.getenv("HELPSHEET_ID", ""),
            help_sheet=os.getenv("HELP_SHEET", "Ayudas"),
            roster_enforce=_env_flag("ROSTER_ENFORCE")
        )

        self.calendar = CalendarConfig(
            calendar_id=os.getenv("CALENDAR_ID", "")
        )

        self.event_log = EventLogConfig(
            max_retries=int(os.getenv("EVENT_LOG_MAX_RETRIES", "3")),
            retry_delay=float(os.getenv("EVENT_LOG_RETRY_DELAY", "1.0")),
            max_pending=int(os.getenv("EVENT_LOG_MAX_PENDING", "1000"))
        )

    @property
    def server_host(self) -> str:
        """Interface the server binds to."""
        return os.getenv("HOST", "0.0.0.0")

    @property
    def server_port(self) -> int:
        """Server port from environment variable."""
        return int(os.getenv("PORT", "8080"))

    @property
    def api_prefix(self) -> str:
        return "/api/discord/v1"

    @property
    def api_title(self) -> str:
        """API title for OpenAPI documentation."""
        return "Classroom Help Queue API"

    @property
    def api_version(self) -> str:
        """API version string."""
        return "1.0.0"

    @property
    def api_description(self) -> str:
        """API description for OpenAPI documentation."""
        return (
            "Mediates help requests between student groups and helpers. "
            "Groups are served strictly in the order they asked for help."
        )


# Global settings instance - imported throughout the application
settings = Settings()
