"""
Zoom meeting provider.

Creates and deletes Zoom meetings for confirmed sessions using a
server-to-server OAuth app.
"""

import asyncio
import time
from datetime import datetime

import aiohttp
from loguru import logger

from monet.services.http_client import BaseHttpProvider
from monet.services.meetings.base import MeetingInfo
from monet.utils.datetime_utils import ensure_utc
from monet.utils.exceptions import ExternalServiceFailure


# Refresh the OAuth token this many seconds before it expires
TOKEN_REFRESH_MARGIN_SECONDS = 60


class ZoomMeetingProvider(BaseHttpProvider):
    """MeetingProvider backed by the Zoom REST API."""

    def __init__(
        self,
        account_id: str,
        client_id: str,
        client_secret: str,
        api_base_url: str = "https://api.zoom.us/v2",
        oauth_url: str = "https://zoom.us/oauth/token",
        timeout_seconds: float = 15.0,
    ) -> None:
        """
        Initialize Zoom provider.

        Args:
            account_id: Zoom account id
            client_id: OAuth client id
            client_secret: OAuth client secret
            api_base_url: REST API base URL
            oauth_url: Token endpoint
            timeout_seconds: Per-request timeout
        """
        super().__init__(timeout_seconds)
        self.account_id = account_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_base_url = api_base_url.rstrip("/")
        self.oauth_url = oauth_url
        self._access_token: str | None = None
        self._token_expires_at = 0.0

    async def _get_access_token(self) -> str:
        """Get a cached or fresh OAuth access token."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        session = await self._get_session()
        async with session.post(
            self.oauth_url,
            params={
                "grant_type": "account_credentials",
                "account_id": self.account_id,
            },
            auth=aiohttp.BasicAuth(self.client_id, self.client_secret),
        ) as response:
            if response.status != 200:
                message = await self._error_message(response)
                raise ExternalServiceFailure(
                    f"Zoom authentication failed: {message}"
                )
            body = await response.json()

        self._access_token = body["access_token"]
        expires_in = int(body.get("expires_in", 3600))
        self._token_expires_at = (
            time.monotonic() + expires_in - TOKEN_REFRESH_MARGIN_SECONDS
        )
        return self._access_token

    async def create_meeting(
        self,
        host_name: str,
        guest_name: str,
        start_time: datetime,
        duration_minutes: int,
    ) -> MeetingInfo:
        """
        Create a scheduled Zoom meeting.

        Args:
            host_name: Professional's name
            guest_name: Candidate's name
            start_time: Meeting start
            duration_minutes: Meeting length

        Returns:
            MeetingInfo with id and join URL

        Raises:
            ExternalServiceFailure: If Zoom is unreachable or rejects the call
        """
        payload = {
            "topic": f"Monet Session: {guest_name} & {host_name}",
            "type": 2,  # scheduled
            "start_time": ensure_utc(start_time).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "duration": duration_minutes,
            "timezone": "UTC",
            "agenda": (
                f"Professional mentoring session between {guest_name} "
                f"and {host_name} via Monet platform."
            ),
            "settings": {
                "host_video": True,
                "participant_video": True,
                "join_before_host": False,
                "mute_upon_entry": True,
                "waiting_room": True,
            },
        }

        try:
            token = await self._get_access_token()
            session = await self._get_session()
            async with session.post(
                f"{self.api_base_url}/users/me/meetings",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            ) as response:
                if response.status not in (200, 201):
                    message = await self._error_message(response)
                    raise ExternalServiceFailure(
                        f"Failed to create Zoom meeting: {message}"
                    )
                body = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalServiceFailure(
                f"Zoom API unreachable: {e}"
            ) from e

        meeting = MeetingInfo(id=str(body["id"]), join_url=body["join_url"])
        logger.info(
            "Zoom meeting created",
            extra={"meeting_id": meeting.id, "start_time": payload["start_time"]},
        )
        return meeting

    async def delete_meeting(self, meeting_id: str) -> None:
        """
        Delete a Zoom meeting. A meeting that no longer exists counts as deleted.

        Args:
            meeting_id: Zoom meeting id

        Raises:
            ExternalServiceFailure: If Zoom is unreachable or rejects the call
        """
        try:
            token = await self._get_access_token()
            session = await self._get_session()
            async with session.delete(
                f"{self.api_base_url}/meetings/{meeting_id}",
                headers={"Authorization": f"Bearer {token}"},
            ) as response:
                if response.status == 404:
                    logger.warning(
                        "Zoom meeting already gone",
                        extra={"meeting_id": meeting_id},
                    )
                    return
                if response.status not in (200, 204):
                    message = await self._error_message(response)
                    raise ExternalServiceFailure(
                        f"Failed to delete Zoom meeting: {message}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalServiceFailure(
                f"Zoom API unreachable: {e}"
            ) from e

        logger.info("Zoom meeting deleted", extra={"meeting_id": meeting_id})
