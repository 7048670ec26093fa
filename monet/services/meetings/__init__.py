"""Video meeting provider adapters."""

from monet.services.meetings.base import MeetingInfo, MeetingProvider
from monet.services.meetings.zoom_provider import ZoomMeetingProvider


__all__ = ["MeetingInfo", "MeetingProvider", "ZoomMeetingProvider"]
