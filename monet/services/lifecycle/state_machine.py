"""
Status state machines.

Session: requested -> confirmed -> completed, and requested|confirmed ->
cancelled. Offer: pending -> accepted|declined|expired. Everything else,
including any move out of a terminal status, is rejected.

confirmed -> completed is listed here but only the feedback settlement
performs it (atomically, see ChatSessionRepository.claim_for_settlement).
"""

from monet.models.enums import OfferStatus, SessionStatus
from monet.utils.exceptions import InvalidStateError


SESSION_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.REQUESTED: frozenset(
        {SessionStatus.CONFIRMED, SessionStatus.CANCELLED}
    ),
    SessionStatus.CONFIRMED: frozenset(
        {SessionStatus.COMPLETED, SessionStatus.CANCELLED}
    ),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

OFFER_TRANSITIONS: dict[OfferStatus, frozenset[OfferStatus]] = {
    OfferStatus.PENDING: frozenset(
        {OfferStatus.ACCEPTED, OfferStatus.DECLINED, OfferStatus.EXPIRED}
    ),
    OfferStatus.ACCEPTED: frozenset(),
    OfferStatus.DECLINED: frozenset(),
    OfferStatus.EXPIRED: frozenset(),
}


def can_transition_session(current: str, target: str) -> bool:
    """
    Check if a session may move from current to target status.

    Args:
        current: Current status value
        target: Desired status value

    Returns:
        True if the transition is legal
    """
    try:
        allowed = SESSION_TRANSITIONS[SessionStatus(current)]
        return SessionStatus(target) in allowed
    except ValueError:
        return False


def ensure_session_transition(current: str, target: str) -> None:
    """
    Reject an illegal session transition.

    Raises:
        InvalidStateError: If the transition is not allowed
    """
    if not can_transition_session(current, target):
        raise InvalidStateError(
            f"Session cannot move from {current} to {target}",
            current=current,
            target=target,
        )


def is_terminal_session_status(status: str) -> bool:
    """
    Check if a session status allows no further transitions.

    Unknown statuses have no transitions, so they count as terminal.
    """
    try:
        return not SESSION_TRANSITIONS[SessionStatus(status)]
    except ValueError:
        return True


def can_transition_offer(current: str, target: str) -> bool:
    """
    Check if an offer may move from current to target status.

    Args:
        current: Current status value
        target: Desired status value

    Returns:
        True if the transition is legal
    """
    try:
        allowed = OFFER_TRANSITIONS[OfferStatus(current)]
        return OfferStatus(target) in allowed
    except ValueError:
        return False


def ensure_offer_transition(current: str, target: str) -> None:
    """
    Reject an illegal offer transition.

    Raises:
        InvalidStateError: If the transition is not allowed
    """
    if not can_transition_offer(current, target):
        raise InvalidStateError(
            f"Offer cannot move from {current} to {target}",
            current=current,
            target=target,
        )
