"""
Calendar provider contract.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class Attendee:
    """Calendar event guest."""

    email: str
    display_name: str | None = None


@dataclass(frozen=True)
class CalendarEventInfo:
    """Created calendar event."""

    id: str
    html_link: str | None = None


class CalendarProvider(Protocol):
    """Calendar provider acting with a user's credential."""

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
        """Create an event.

        Raises CalendarTokenExpired when the credential is rejected and
        ExternalServiceFailure on any other error.
        """
        ...

    async def delete_event(self, credential: str, event_id: str) -> None:
        """Delete an event."""
        ...
