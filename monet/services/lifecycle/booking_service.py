"""
Booking service.

Creates a requested session. Everything that settlement later depends on
(rate, firm, offer bonus pledge) is captured here and never recomputed.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from monet.config.business_constants import (
    MIN_BOOKING_LEAD_TIME_HOURS,
    UNKNOWN_FIRM_ID,
)
from monet.models.chat_session import ChatSession
from monet.models.enums import SessionStatus, TransferType, UserRole
from monet.models.user import User
from monet.repositories.chat_session_repository import ChatSessionRepository
from monet.repositories.user_repository import UserRepository
from monet.schemas.requests import BookSessionRequest
from monet.services.payments.base import PayoutGateway
from monet.utils.datetime_utils import utc_now
from monet.utils.exceptions import (
    InvalidStateError,
    NotFoundError,
    PaymentProcessingFailed,
    PaymentProviderError,
    UnauthorizedError,
    ValidationError,
)


class BookingService:
    """Books coffee chats."""

    def __init__(
        self,
        session: AsyncSession,
        payout_gateway: PayoutGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize booking service.

        Args:
            session: Database session
            payout_gateway: Payment processor for the booking charge
            clock: Current time source
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.session_repo = ChatSessionRepository(session)
        self.payout_gateway = payout_gateway
        self.clock = clock

    async def book_session(
        self, request: BookSessionRequest, actor_id: int
    ) -> ChatSession:
        """
        Book a session with a professional.

        Args:
            request: Validated booking request
            actor_id: Authenticated user making the booking

        Returns:
            Created session in requested status

        Raises:
            UnauthorizedError: Actor is not the candidate
            NotFoundError: Candidate or professional missing
            ValidationError: Wrong roles, no rate, bad time or referrer
            InvalidStateError: Time slot already taken
            PaymentProcessingFailed: Charge could not be created
        """
        if request.candidate_id != actor_id:
            raise UnauthorizedError("Unauthorized - not your session")

        candidate = await self._get_user(request.candidate_id, UserRole.CANDIDATE)
        professional = await self._get_user(
            request.professional_id, UserRole.PROFESSIONAL
        )

        if not professional.session_rate_cents or professional.session_rate_cents <= 0:
            raise ValidationError("Professional has not set a session rate")

        earliest = self.clock() + timedelta(hours=MIN_BOOKING_LEAD_TIME_HOURS)
        if request.scheduled_at < earliest:
            raise ValidationError(
                f"Sessions must be booked at least "
                f"{MIN_BOOKING_LEAD_TIME_HOURS} hours in advance"
            )

        if request.referrer_pro_id is not None:
            await self._validate_referrer(request.referrer_pro_id, professional.id)

        conflict = await self.session_repo.find_conflicting(
            candidate.id, professional.id, request.scheduled_at
        )
        if conflict:
            raise InvalidStateError("Time slot conflicts with existing session")

        firm_id = professional.company or UNKNOWN_FIRM_ID
        first_chat = await self.session_repo.find_first_chat_at_firm(
            candidate.id, firm_id
        )

        chat = await self.session_repo.create(
            candidate_id=candidate.id,
            professional_id=professional.id,
            referrer_pro_id=request.referrer_pro_id,
            firm_id=firm_id,
            scheduled_at=request.scheduled_at,
            duration_minutes=request.duration_minutes,
            request_message=request.request_message,
            rate_cents=professional.session_rate_cents,
            offer_bonus_cents=candidate.offer_bonus_cents or 0,
            is_first_chat_at_firm=first_chat is None,
            status=SessionStatus.REQUESTED.value,
            transfer_ids=[],
        )

        try:
            chat.payment_intent_id = await self.payout_gateway.create_payment_intent(
                chat.rate_cents,
                metadata={
                    "session_id": str(chat.id),
                    "candidate_id": str(candidate.id),
                    "professional_id": str(professional.id),
                    "type": TransferType.SESSION_FEE.value,
                },
                description=(
                    f"Session with {professional.name} - "
                    f"{request.scheduled_at:%Y-%m-%d}"
                ),
            )
        except PaymentProviderError as e:
            await self.session.rollback()
            raise PaymentProcessingFailed(str(e)) from e

        await self.session.commit()

        logger.info(
            "Session booked",
            extra={
                "session_id": chat.id,
                "candidate_id": candidate.id,
                "professional_id": professional.id,
                "rate_cents": chat.rate_cents,
                "firm_id": firm_id,
                "is_first_chat_at_firm": chat.is_first_chat_at_firm,
            },
        )
        return chat

    async def _get_user(self, user_id: int, role: UserRole) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        if user.role != role:
            raise ValidationError(f"Invalid {role.value}")
        return user

    async def _validate_referrer(
        self, referrer_id: int, professional_id: int
    ) -> None:
        if referrer_id == professional_id:
            raise ValidationError("Professional cannot refer their own session")

        referrer = await self.user_repo.get_by_id(referrer_id)
        if referrer is None or not referrer.is_professional:
            raise ValidationError("Referrer must be a professional")
