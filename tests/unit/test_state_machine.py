"""Unit tests for session and offer status transitions."""

import pytest

from monet.models.enums import OfferStatus, SessionStatus
from monet.services.lifecycle.state_machine import (
    can_transition_offer,
    can_transition_session,
    ensure_offer_transition,
    ensure_session_transition,
    is_terminal_session_status,
)
from monet.utils.exceptions import InvalidStateError


class TestSessionTransitions:
    """Test session state machine."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionStatus.REQUESTED, SessionStatus.CONFIRMED),
            (SessionStatus.REQUESTED, SessionStatus.CANCELLED),
            (SessionStatus.CONFIRMED, SessionStatus.COMPLETED),
            (SessionStatus.CONFIRMED, SessionStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        """Forward transitions are legal."""
        assert can_transition_session(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionStatus.REQUESTED, SessionStatus.COMPLETED),
            (SessionStatus.CONFIRMED, SessionStatus.REQUESTED),
            (SessionStatus.COMPLETED, SessionStatus.CANCELLED),
            (SessionStatus.COMPLETED, SessionStatus.CONFIRMED),
            (SessionStatus.CANCELLED, SessionStatus.CONFIRMED),
            (SessionStatus.CANCELLED, SessionStatus.REQUESTED),
        ],
    )
    def test_rejected(self, current, target):
        """Skipping, going back and leaving terminal states are illegal."""
        assert not can_transition_session(current, target)
        with pytest.raises(InvalidStateError) as exc_info:
            ensure_session_transition(current, target)
        assert exc_info.value.context == {"current": current, "target": target}

    def test_plain_string_statuses(self):
        """Values read from the database are plain strings."""
        assert can_transition_session("requested", "confirmed")

    def test_unknown_status(self):
        """Unknown statuses never transition."""
        assert not can_transition_session("paid", "completed")
        assert is_terminal_session_status("paid")

    def test_terminal_statuses(self):
        """Completed and cancelled are terminal."""
        assert is_terminal_session_status("completed")
        assert is_terminal_session_status("cancelled")
        assert not is_terminal_session_status("confirmed")


class TestOfferTransitions:
    """Test offer state machine."""

    @pytest.mark.parametrize(
        "target",
        [OfferStatus.ACCEPTED, OfferStatus.DECLINED, OfferStatus.EXPIRED],
    )
    def test_pending_moves_anywhere(self, target):
        """Pending offers can be decided or expire."""
        assert can_transition_offer(OfferStatus.PENDING, target)

    def test_accepted_is_terminal(self):
        """An accepted offer cannot be declined."""
        with pytest.raises(InvalidStateError):
            ensure_offer_transition("accepted", "declined")

    def test_accept_twice_rejected(self):
        """Accepting an accepted offer is illegal."""
        assert not can_transition_offer("accepted", "accepted")
