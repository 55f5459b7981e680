"""
Google Calendar storage - The next scheduled class.

Reads the course calendar through the Calendar v3 REST API.
"""

import httpx
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError

from ..core.config import settings, GoogleConfig, CalendarConfig
from ..core.utils import truncate_string
from .google_auth import GoogleAuth, google_auth

# Configure logging
logger = logging.getLogger(__name__)


class CalendarUnavailableError(Exception):
    """The course calendar could not be read."""


def _event_time(value: dict[str, Any]) -> Optional[str]:
    # Timed events carry dateTime, all-day events only carry date
    return value.get("dateTime") or value.get("date")


class CalendarClient:
    """Looks up upcoming classes on the course calendar."""

    def __init__(
        self,
        config: Optional[GoogleConfig] = None,
        calendar: Optional[CalendarConfig] = None,
        auth: Optional[GoogleAuth] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        config = config or settings.google
        self.base_url = config.calendar_url
        self.auth = auth or google_auth
        self.timeout = config.timeout
        self.calendar_id = (calendar or settings.calendar).calendar_id
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.calendar_id)

    async def next_class(self) -> Optional[dict[str, Optional[str]]]:
        """
        Get the earliest class that has not ended yet.

        Returns:
            Dictionary with summary, start and end, or None if nothing
            is scheduled

        Raises:
            CalendarUnavailableError: No calendar is configured or the
                API call failed
        """
        if not self.enabled:
            raise CalendarUnavailableError("No calendar configured")

        params = {
            "timeMin": datetime.now(timezone.utc).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": "1"
        }
        url = f"{self.base_url}/calendars/{self.calendar_id}/events"

        try:
            headers = await self.auth.headers()
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers, params=params)

                if response.status_code != 200:
                    logger.error(
                        f"Failed to list calendar events: "
                        f"Status {response.status_code}, Body: {truncate_string(response.text)}"
                    )
                    raise CalendarUnavailableError(f"Calendar API returned {response.status_code}")

                items = response.json().get("items", [])

        except GoogleAuthError as e:
            logger.error(f"Cannot authenticate to the calendar: {str(e)}")
            raise CalendarUnavailableError(str(e)) from e
        except httpx.TimeoutException:
            logger.error("Timeout while listing calendar events")
            raise CalendarUnavailableError("Calendar API timed out") from None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error listing calendar events: {str(e)}")
            raise CalendarUnavailableError(str(e)) from e

        if not items:
            return None

        event = items[0]
        return {
            "summary": event.get("summary", ""),
            "start": _event_time(event.get("start", {})) or "",
            "end": _event_time(event.get("end", {}))
        }


# Global calendar client for the application
calendar_client = CalendarClient()
