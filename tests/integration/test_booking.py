"""
Integration tests for session booking.

Tests cover:
- Rate and offer bonus snapshots
- First chat at firm detection
- Lead time, conflicts and referrer checks
- Payment intent failures
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from monet.models.enums import SessionStatus, UserRole
from monet.repositories.chat_session_repository import ChatSessionRepository
from monet.schemas import BookSessionRequest
from monet.services.lifecycle import BookingService
from monet.utils.exceptions import (
    InvalidStateError,
    NotFoundError,
    PaymentProcessingFailed,
    UnauthorizedError,
    ValidationError,
)


@pytest_asyncio.fixture
async def candidate(make_user):
    """Candidate pledging a $500 offer bonus."""
    return await make_user(UserRole.CANDIDATE, offer_bonus_cents=50000)


@pytest_asyncio.fixture
async def professional(make_user):
    """Professional charging $100."""
    return await make_user(company="Goldman Sachs", session_rate_cents=10000)


@pytest.fixture
def service(db_session, payout_gateway, clock):
    """Booking service with a fixed clock."""
    return BookingService(db_session, payout_gateway, clock=clock)


@pytest.fixture
def tomorrow(clock):
    """A start time comfortably past the lead time."""
    return clock.return_value + timedelta(days=1)


def booking(candidate, professional, scheduled_at, **overrides):
    fields = {
        "candidate_id": candidate.id,
        "professional_id": professional.id,
        "scheduled_at": scheduled_at,
    }
    fields.update(overrides)
    return BookSessionRequest(**fields)


class TestBookSession:
    """Test successful bookings."""

    @pytest.mark.asyncio
    async def test_snapshots_rate_and_bonus(
        self, service, candidate, professional, tomorrow, payout_gateway
    ):
        """Rate and bonus are copied at booking time."""
        chat = await service.book_session(
            booking(candidate, professional, tomorrow), actor_id=candidate.id
        )

        assert chat.status == SessionStatus.REQUESTED
        assert chat.rate_cents == 10000
        assert chat.offer_bonus_cents == 50000
        assert chat.firm_id == "Goldman Sachs"
        assert chat.is_first_chat_at_firm is True
        assert chat.payment_intent_id == payout_gateway.payment_intents[0]["id"]
        assert payout_gateway.payment_intents[0]["amount_cents"] == 10000

    @pytest.mark.asyncio
    async def test_rate_change_does_not_affect_booked_session(
        self, service, candidate, professional, tomorrow, db_session
    ):
        """Later rate changes leave the session price alone."""
        chat = await service.book_session(
            booking(candidate, professional, tomorrow), actor_id=candidate.id
        )

        professional.session_rate_cents = 25000
        await db_session.commit()
        await db_session.refresh(chat)

        assert chat.rate_cents == 10000

    @pytest.mark.asyncio
    async def test_second_chat_at_firm(
        self, service, candidate, professional, make_user, make_chat_session, tomorrow
    ):
        """A held session at the firm means this is not the first chat."""
        colleague = await make_user(company="Goldman Sachs")
        await make_chat_session(candidate, colleague, status=SessionStatus.COMPLETED)

        chat = await service.book_session(
            booking(candidate, professional, tomorrow), actor_id=candidate.id
        )

        assert chat.is_first_chat_at_firm is False

    @pytest.mark.asyncio
    async def test_with_referrer(
        self, service, candidate, professional, make_user, tomorrow
    ):
        """Referrer is recorded on the session."""
        referrer = await make_user()

        chat = await service.book_session(
            booking(candidate, professional, tomorrow, referrer_pro_id=referrer.id),
            actor_id=candidate.id,
        )

        assert chat.referrer_pro_id == referrer.id


class TestBookingRejections:
    """Test bookings that are refused."""

    @pytest.mark.asyncio
    async def test_booking_for_someone_else(
        self, service, candidate, professional, tomorrow
    ):
        """Actor must be the candidate."""
        with pytest.raises(UnauthorizedError):
            await service.book_session(
                booking(candidate, professional, tomorrow), actor_id=professional.id
            )

    @pytest.mark.asyncio
    async def test_too_soon(self, service, candidate, professional, clock):
        """Sessions need two hours of lead time."""
        with pytest.raises(ValidationError):
            await service.book_session(
                booking(
                    candidate,
                    professional,
                    clock.return_value + timedelta(minutes=90),
                ),
                actor_id=candidate.id,
            )

    @pytest.mark.asyncio
    async def test_unknown_professional(self, service, candidate, tomorrow):
        """Professional must exist."""
        with pytest.raises(NotFoundError):
            await service.book_session(
                BookSessionRequest(
                    candidate_id=candidate.id,
                    professional_id=55555,
                    scheduled_at=tomorrow,
                ),
                actor_id=candidate.id,
            )

    @pytest.mark.asyncio
    async def test_professional_without_rate(
        self, service, candidate, make_user, tomorrow
    ):
        """Professionals must set a rate before being booked."""
        pro = await make_user(session_rate_cents=None)

        with pytest.raises(ValidationError):
            await service.book_session(
                booking(candidate, pro, tomorrow), actor_id=candidate.id
            )

    @pytest.mark.asyncio
    async def test_self_referral(self, service, candidate, professional, tomorrow):
        """A professional cannot refer their own session."""
        with pytest.raises(ValidationError):
            await service.book_session(
                booking(
                    candidate, professional, tomorrow, referrer_pro_id=professional.id
                ),
                actor_id=candidate.id,
            )

    @pytest.mark.asyncio
    async def test_slot_taken(self, service, candidate, professional, tomorrow):
        """Same professional, same start time."""
        await service.book_session(
            booking(candidate, professional, tomorrow), actor_id=candidate.id
        )

        with pytest.raises(InvalidStateError):
            await service.book_session(
                booking(candidate, professional, tomorrow), actor_id=candidate.id
            )

    @pytest.mark.asyncio
    async def test_payment_intent_failure(
        self, service, candidate, professional, tomorrow, payout_gateway, db_session
    ):
        """No session is stored when the charge cannot be created."""
        candidate_id = candidate.id
        payout_gateway.fail_payment_intents = True

        with pytest.raises(PaymentProcessingFailed):
            await service.book_session(
                booking(candidate, professional, tomorrow), actor_id=candidate_id
            )

        sessions = await ChatSessionRepository(db_session).find_by(
            candidate_id=candidate_id
        )
        assert sessions == []
