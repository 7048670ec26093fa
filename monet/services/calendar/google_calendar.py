"""
Google Calendar provider.

Creates and deletes events on the professional's primary calendar using
their OAuth access token.
"""

import asyncio
from datetime import datetime, timedelta

import aiohttp
from loguru import logger

from monet.services.calendar.base import Attendee, CalendarEventInfo
from monet.services.http_client import BaseHttpProvider
from monet.utils.datetime_utils import ensure_utc
from monet.utils.exceptions import CalendarTokenExpired, ExternalServiceFailure


class GoogleCalendarProvider(BaseHttpProvider):
    """CalendarProvider backed by the Google Calendar v3 API."""

    def __init__(
        self,
        api_base_url: str = "https://www.googleapis.com/calendar/v3",
        timeout_seconds: float = 15.0,
    ) -> None:
        """
        Initialize Google Calendar provider.

        Args:
            api_base_url: Calendar API base URL
            timeout_seconds: Per-request timeout
        """
        super().__init__(timeout_seconds)
        self.api_base_url = api_base_url.rstrip("/")

    async def create_event(
        self,
        credential: str,
        *,
        summary: str,
        description: str,
        start_time: datetime,
        duration_minutes: int,
        attendees: list[Attendee],
    ) -> CalendarEventInfo:
        """
        Create an event on the primary calendar.

        Args:
            credential: OAuth access token of the calendar owner
            summary: Event title
            description: Event body
            start_time: Event start
            duration_minutes: Event length
            attendees: Guests to invite

        Returns:
            CalendarEventInfo

        Raises:
            CalendarTokenExpired: If Google rejects the token (HTTP 401)
            ExternalServiceFailure: On any other failure
        """
        start = ensure_utc(start_time)
        end = start + timedelta(minutes=duration_minutes)
        payload = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start.isoformat(), "timeZone": "UTC"},
            "end": {"dateTime": end.isoformat(), "timeZone": "UTC"},
            "attendees": [
                {"email": a.email, "displayName": a.display_name}
                if a.display_name
                else {"email": a.email}
                for a in attendees
            ],
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 24 * 60},
                    {"method": "popup", "minutes": 15},
                ],
            },
            "guestsCanModify": False,
            "guestsCanInviteOthers": False,
        }

        try:
            session = await self._get_session()
            async with session.post(
                f"{self.api_base_url}/calendars/primary/events",
                params={"sendUpdates": "all"},
                json=payload,
                headers={"Authorization": f"Bearer {credential}"},
            ) as response:
                if response.status == 401:
                    raise CalendarTokenExpired()
                if response.status not in (200, 201):
                    message = await self._error_message(response)
                    raise ExternalServiceFailure(
                        f"Failed to create calendar event: {message}"
                    )
                body = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalServiceFailure(
                f"Google Calendar unreachable: {e}"
            ) from e

        event = CalendarEventInfo(id=body["id"], html_link=body.get("htmlLink"))
        logger.info("Calendar event created", extra={"event_id": event.id})
        return event

    async def delete_event(self, credential: str, event_id: str) -> None:
        """
        Delete an event from the primary calendar.

        Args:
            credential: OAuth access token of the calendar owner
            event_id: Event id

        Raises:
            CalendarTokenExpired: If Google rejects the token
            ExternalServiceFailure: On any other failure
        """
        try:
            session = await self._get_session()
            async with session.delete(
                f"{self.api_base_url}/calendars/primary/events/{event_id}",
                params={"sendUpdates": "all"},
                headers={"Authorization": f"Bearer {credential}"},
            ) as response:
                if response.status == 401:
                    raise CalendarTokenExpired()
                # 410 Gone: already deleted
                if response.status not in (200, 204, 404, 410):
                    message = await self._error_message(response)
                    raise ExternalServiceFailure(
                        f"Failed to delete calendar event: {message}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalServiceFailure(
                f"Google Calendar unreachable: {e}"
            ) from e

        logger.info("Calendar event deleted", extra={"event_id": event_id})
