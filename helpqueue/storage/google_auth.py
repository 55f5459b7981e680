"""
Google authentication - Bearer tokens for the Sheets and Calendar APIs.

Access tokens issued to a service account live for about an hour. The
credentials are loaded once from the service account key file and
refreshed whenever the current token is missing or about to expire, so
a long-running server keeps working past the first hour.

Token refreshes go through httpx like every other Google call here.
"""

import asyncio
import httpx
import logging
import threading
from typing import Optional

from google.auth import exceptions as auth_exceptions
from google.auth.transport import Request as AuthRequest, Response as AuthResponse
from google.auth.credentials import Credentials
from google.oauth2 import service_account

from ..core.config import settings, GoogleConfig

# Configure logging
logger = logging.getLogger(__name__)


class _HttpxResponse(AuthResponse):
    """google-auth view of an httpx response."""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self):
        return self._response.headers

    @property
    def data(self) -> bytes:
        return self._response.content


class HttpxRequest(AuthRequest):
    """
    google-auth transport backed by a synchronous httpx client.

    Only used for token requests, which run in a worker thread.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.timeout = timeout
        self._transport = transport

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        try:
            with httpx.Client(timeout=timeout or self.timeout, transport=self._transport) as client:
                response = client.request(method, url, content=body, headers=headers)
                return _HttpxResponse(response)
        except httpx.HTTPError as e:
            raise auth_exceptions.TransportError(str(e)) from e


class GoogleAuth:
    """
    Holds the credentials and hands out request headers.

    One lock serializes refreshes so concurrent requests that find an
    expired token trigger a single token request.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0
    ):
        """
        Args:
            credentials: google-auth credentials, None when not configured
            transport: Optional httpx transport for token requests, used by tests
            timeout: Token request timeout in seconds
        """
        self.credentials = credentials
        self._request = HttpxRequest(timeout=timeout, transport=transport)
        self._lock = threading.Lock()
        self.refreshes = 0

    @classmethod
    def from_service_account_file(
        cls,
        path: str,
        scopes: tuple[str, ...],
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0
    ) -> "GoogleAuth":
        credentials = service_account.Credentials.from_service_account_file(path, scopes=list(scopes))
        return cls(credentials, transport=transport, timeout=timeout)

    @property
    def enabled(self) -> bool:
        return self.credentials is not None

    def _refresh_if_needed(self):
        with self._lock:
            # Another thread may have refreshed while we waited
            if self.credentials.valid:
                return
            self.credentials.refresh(self._request)
            self.refreshes += 1
            logger.info(f"Refreshed Google access token, expires at {self.credentials.expiry}")

    async def headers(self) -> dict[str, str]:
        """
        Request headers carrying a valid access token.

        Raises:
            google.auth.exceptions.GoogleAuthError: No credentials are
                configured or the token could not be refreshed
        """
        if not self.enabled:
            raise auth_exceptions.DefaultCredentialsError("No Google service account configured")

        if not self.credentials.valid:
            await asyncio.to_thread(self._refresh_if_needed)

        return {
            "Authorization": f"Bearer {self.credentials.token}",
            "Accept": "application/json"
        }


def load_google_auth(config: Optional[GoogleConfig] = None) -> GoogleAuth:
    """
    Build the application's GoogleAuth from the configured key file.

    A missing or unreadable key leaves the Google integrations disabled
    instead of stopping the server; the queue itself never needs them.
    """
    config = config or settings.google
    if not config.credentials_file:
        logger.warning("No Google service account key configured")
        return GoogleAuth(timeout=config.timeout)

    try:
        return GoogleAuth.from_service_account_file(
            config.credentials_file,
            config.scopes,
            timeout=config.timeout
        )
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load Google service account key {config.credentials_file}: {str(e)}")
        return GoogleAuth(timeout=config.timeout)


# Global credentials for the application
google_auth = load_google_auth()
