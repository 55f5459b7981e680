"""
Google Sheets storage - Roster lookups and help event rows.

This module talks to the Sheets v4 REST API directly with httpx:
- Reading the student roster (id, email, group per row)
- Appending one row per help event to the help sheet

Transport failures are logged and reported as None/False so the caller
decides what a missing roster or a lost row means.
"""

import httpx
import logging
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError

from ..core.config import settings, GoogleConfig, SheetsConfig
from ..core.utils import truncate_string
from .google_auth import GoogleAuth, google_auth

# Configure logging
logger = logging.getLogger(__name__)


class RosterUnavailableError(Exception):
    """The roster sheet could not be read."""


class SheetsClient:
    """
    Minimal Sheets v4 client.

    A new AsyncClient is opened per call; the API is only hit a handful
    of times per class, so there is no pool to manage.
    """

    def __init__(
        self,
        config: Optional[GoogleConfig] = None,
        auth: Optional[GoogleAuth] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            config: Google API settings (defaults to the global settings)
            auth: Source of access tokens (defaults to the global credentials)
            transport: Optional httpx transport, used by tests
        """
        config = config or settings.google
        self.base_url = config.sheets_url
        self.auth = auth or google_auth
        self.timeout = config.timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_values(
        self,
        spreadsheet_id: str,
        sheet: str,
        cell_range: str
    ) -> Optional[list[list[str]]]:
        """
        Read a range of cells.

        Args:
            spreadsheet_id: Spreadsheet to read from
            sheet: Sheet (tab) name
            cell_range: A1 range within the sheet, e.g. "A2:C"

        Returns:
            Rows of cell values (trailing empty cells omitted, as the API
            does), or None on error
        """
        url = f"{self.base_url}/spreadsheets/{spreadsheet_id}/values/{sheet}!{cell_range}"
        try:
            headers = await self.auth.headers()
            async with self._client() as client:
                response = await client.get(url, headers=headers)

                if response.status_code == 200:
                    data = response.json()
                    return data.get("values", [])

                logger.error(
                    f"Failed to read {sheet}!{cell_range}: "
                    f"Status {response.status_code}, Body: {truncate_string(response.text)}"
                )
                return None

        except GoogleAuthError as e:
            logger.error(f"Cannot authenticate to read {sheet}!{cell_range}: {str(e)}")
            return None
        except httpx.TimeoutException:
            logger.error(f"Timeout while reading {sheet}!{cell_range}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error reading {sheet}!{cell_range}: {str(e)}")
            return None

    async def append_row(
        self,
        spreadsheet_id: str,
        sheet: str,
        values: list[str]
    ) -> bool:
        """
        Append one row after the last row of a sheet.

        Args:
            spreadsheet_id: Spreadsheet to write to
            sheet: Sheet (tab) name
            values: Cell values, left to right

        Returns:
            True if the row was written, False otherwise
        """
        url = f"{self.base_url}/spreadsheets/{spreadsheet_id}/values/{sheet}:append"
        params = {
            "insertDataOption": "INSERT_ROWS",
            "valueInputOption": "USER_ENTERED"
        }
        try:
            headers = await self.auth.headers()
            async with self._client() as client:
                response = await client.post(
                    url,
                    headers=headers,
                    params=params,
                    json={"values": [values]}
                )

                if response.status_code == 200:
                    logger.debug(f"Appended row to {sheet}: {values}")
                    return True

                logger.error(
                    f"Failed to append row to {sheet}: "
                    f"Status {response.status_code}, Body: {truncate_string(response.text)}"
                )
                return False

        except GoogleAuthError as e:
            logger.error(f"Cannot authenticate to append row to {sheet}: {str(e)}")
            return False
        except httpx.TimeoutException:
            logger.error(f"Timeout while appending row to {sheet}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Error appending row to {sheet}: {str(e)}")
            return False


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class RosterService:
    """
    Answers "is this a registered student" and "which group are they in".

    The roster is read on every lookup so edits to the sheet take effect
    without restarting the server.
    """

    def __init__(
        self,
        client: Optional[SheetsClient] = None,
        config: Optional[SheetsConfig] = None
    ):
        self.client = client or SheetsClient()
        self.config = config or settings.sheets

    @property
    def enabled(self) -> bool:
        return bool(self.config.spreadsheet_id)

    async def _rows(self) -> list[tuple[int, str, Optional[int]]]:
        """
        Fetch and normalize the roster.

        Returns:
            (student id, lowercased email, group or None) per valid row

        Raises:
            RosterUnavailableError: No roster is configured or it could
                not be read
        """
        if not self.enabled:
            raise RosterUnavailableError("No roster spreadsheet configured")

        values = await self.client.get_values(
            self.config.spreadsheet_id,
            self.config.roster_sheet,
            self.config.roster_range
        )
        if values is None:
            raise RosterUnavailableError("Roster spreadsheet could not be read")

        rows = []
        for row in values:
            if len(row) < 2:
                continue
            student_id = _parse_int(row[0])
            if student_id is None:
                continue
            email = str(row[1]).strip().lower()
            group = _parse_int(row[2]) if len(row) > 2 else None
            rows.append((student_id, email, group))
        return rows

    async def _find(self, student_id: int, email: str) -> Optional[tuple[int, str, Optional[int]]]:
        email = email.strip().lower()
        for row in await self._rows():
            if row[0] == student_id and row[1] == email:
                return row
        return None

    async def is_student(self, student_id: int, email: str) -> bool:
        """Whether the id and email belong to the same registered student."""
        return await self._find(student_id, email) is not None

    async def group_of(self, student_id: int, email: str) -> Optional[int]:
        """
        The group of a registered student.

        Returns:
            The group number, or None if the student is unknown or has
            no group yet
        """
        row = await self._find(student_id, email)
        return row[2] if row else None

    async def has_group(self, group_id: int) -> bool:
        """Whether at least one registered student belongs to the group."""
        return any(row[2] == group_id for row in await self._rows())


# Global instances for the application
sheets_client = SheetsClient()
roster = RosterService(sheets_client)
