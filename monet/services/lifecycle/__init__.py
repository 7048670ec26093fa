"""
Session lifecycle package.

- state_machine: legal session and offer status transitions
- booking_service: creates requested sessions
- session_lifecycle: confirm, decline and cancel, including cancellation
  after a failed booking charge
"""

from monet.services.lifecycle.booking_service import BookingService
from monet.services.lifecycle.session_lifecycle import SessionLifecycleService
from monet.services.lifecycle.state_machine import (
    OFFER_TRANSITIONS,
    SESSION_TRANSITIONS,
    can_transition_offer,
    can_transition_session,
    ensure_offer_transition,
    ensure_session_transition,
    is_terminal_session_status,
)


__all__ = [
    "BookingService",
    "SessionLifecycleService",
    "OFFER_TRANSITIONS",
    "SESSION_TRANSITIONS",
    "can_transition_offer",
    "can_transition_session",
    "ensure_offer_transition",
    "ensure_session_transition",
    "is_terminal_session_status",
]
