"""Calendar provider adapters."""

from monet.services.calendar.base import (
    Attendee,
    CalendarEventInfo,
    CalendarProvider,
)
from monet.services.calendar.google_calendar import GoogleCalendarProvider


__all__ = [
    "Attendee",
    "CalendarEventInfo",
    "CalendarProvider",
    "GoogleCalendarProvider",
]
