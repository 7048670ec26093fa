"""
Shared aiohttp plumbing for provider adapters.

Each adapter owns one lazily created ClientSession and closes it on
shutdown.
"""

import aiohttp


class BaseHttpProvider:
    """Base class for adapters that call a JSON HTTP API."""

    def __init__(self, timeout_seconds: float = 15.0) -> None:
        """
        Initialize provider.

        Args:
            timeout_seconds: Total timeout per request
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        """Extract a provider error message from a failed response."""
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return response.reason or f"HTTP {response.status}"

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if body.get("message"):
                return str(body["message"])
        return response.reason or f"HTTP {response.status}"
