"""
Meeting provider contract.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class MeetingInfo:
    """Created video meeting."""

    id: str
    join_url: str


class MeetingProvider(Protocol):
    """Video-conferencing provider."""

    async def create_meeting(
        self,
        host_name: str,
        guest_name: str,
        start_time: datetime,
        duration_minutes: int,
    ) -> MeetingInfo:
        """Create a meeting. Raises ExternalServiceFailure on error."""
        ...

    async def delete_meeting(self, meeting_id: str) -> None:
        """Delete a meeting. Raises ExternalServiceFailure on error."""
        ...
