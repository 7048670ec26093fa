"""
Session lifecycle service.

Professional accepts or declines a requested session; either party
cancels. A failed booking charge also cancels the session. Accepting
creates the video meeting (required) and a calendar event (best effort).
"""

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from monet.config.business_constants import (
    DECLINED_BY_PROFESSIONAL_REASON,
    PAYMENT_FAILED_REASON,
)
from monet.models.chat_session import ChatSession
from monet.models.enums import SessionStatus
from monet.models.user import User
from monet.repositories.chat_session_repository import (
    ChatSessionRepository,
    SessionWithParties,
)
from monet.schemas.requests import CancelSessionRequest, ConfirmSessionRequest
from monet.services.calendar.base import Attendee, CalendarProvider
from monet.services.lifecycle.state_machine import (
    ensure_session_transition,
    is_terminal_session_status,
)
from monet.services.meetings.base import MeetingInfo, MeetingProvider
from monet.services.payments.base import PayoutGateway
from monet.utils.datetime_utils import ensure_utc, utc_now
from monet.utils.exceptions import (
    CalendarTokenExpired,
    ExternalServiceFailure,
    InvalidStateError,
    NotFoundError,
    PayoutDestinationMissing,
    UnauthorizedError,
)


class SessionLifecycleService:
    """Guards and performs session status transitions."""

    def __init__(
        self,
        session: AsyncSession,
        payout_gateway: PayoutGateway,
        meeting_provider: MeetingProvider,
        calendar_provider: CalendarProvider,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize session lifecycle service.

        Args:
            session: Database session
            payout_gateway: Payout destination checks
            meeting_provider: Video meeting provider
            calendar_provider: Calendar provider
            clock: Current time source
        """
        self.session = session
        self.session_repo = ChatSessionRepository(session)
        self.payout_gateway = payout_gateway
        self.meeting_provider = meeting_provider
        self.calendar_provider = calendar_provider
        self.clock = clock

    async def respond_to_request(
        self, session_id: int, request: ConfirmSessionRequest
    ) -> ChatSession:
        """
        Apply a professional's accept/decline decision.

        Args:
            session_id: Chat session ID
            request: Validated confirm request

        Returns:
            Updated session
        """
        if request.action == "accept":
            return await self.confirm_session(session_id, request.professional_id)
        return await self.decline_session(
            session_id,
            request.professional_id,
            request.decline_reason,
            alternative_slots=request.alternative_slots,
        )

    async def confirm_session(
        self, session_id: int, professional_id: int
    ) -> ChatSession:
        """
        Confirm a requested session (requested -> confirmed).

        Args:
            session_id: Chat session ID
            professional_id: Acting professional

        Returns:
            Confirmed session with meeting details

        Raises:
            NotFoundError: Session does not exist
            UnauthorizedError: Actor is not the addressed professional
            InvalidStateError: Session is not requested
            PayoutDestinationMissing: Professional cannot be paid yet
            ExternalServiceFailure: Meeting could not be created
        """
        parties = await self._load(session_id)
        chat = parties.session

        if chat.professional_id != professional_id:
            raise UnauthorizedError("Unauthorized - not your session")

        ensure_session_transition(chat.status, SessionStatus.CONFIRMED)

        if not await self.payout_gateway.has_payout_destination(
            parties.professional
        ):
            raise PayoutDestinationMissing(
                "Please complete payout onboarding before accepting sessions"
            )

        # No meeting, no confirmation
        meeting = await self.meeting_provider.create_meeting(
            host_name=parties.professional.name,
            guest_name=parties.candidate.name,
            start_time=chat.scheduled_at,
            duration_minutes=chat.duration_minutes,
        )

        event_id = await self._create_calendar_event(parties, meeting)

        chat.status = SessionStatus.CONFIRMED.value
        chat.confirmed_at = self.clock()
        chat.meeting_id = meeting.id
        chat.meeting_join_url = meeting.join_url
        chat.calendar_event_id = event_id

        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            await self._discard_meeting(meeting.id, session_id)
            raise

        logger.info(
            "Session confirmed",
            extra={
                "session_id": session_id,
                "professional_id": professional_id,
                "meeting_id": meeting.id,
                "calendar_event_id": event_id,
            },
        )
        return chat

    async def decline_session(
        self,
        session_id: int,
        professional_id: int,
        reason: str | None = None,
        alternative_slots: list[datetime] | None = None,
    ) -> ChatSession:
        """
        Decline a requested session (requested -> cancelled).

        Args:
            session_id: Chat session ID
            professional_id: Acting professional
            reason: Optional decline reason
            alternative_slots: Start times the professional proposes instead

        Returns:
            Cancelled session
        """
        parties = await self._load(session_id)
        chat = parties.session

        if chat.professional_id != professional_id:
            raise UnauthorizedError("Unauthorized - not your session")
        if chat.status != SessionStatus.REQUESTED:
            raise InvalidStateError("Session is not in requested status")

        chat.alternative_slots = [
            ensure_utc(slot).isoformat() for slot in alternative_slots or []
        ]
        return await self._cancel(
            chat, reason or DECLINED_BY_PROFESSIONAL_REASON, professional_id
        )

    async def cancel_session(
        self, session_id: int, request: CancelSessionRequest
    ) -> ChatSession:
        """
        Cancel a requested or confirmed session.

        For a confirmed session the meeting and calendar event are removed
        on a best-effort basis after the cancellation is saved.

        Args:
            session_id: Chat session ID
            request: Validated cancel request

        Returns:
            Cancelled session

        Raises:
            NotFoundError: Session does not exist
            UnauthorizedError: Actor is not a party to the session
            InvalidStateError: Session is already completed or cancelled
        """
        parties = await self._load(session_id)
        chat = parties.session

        if request.actor_id not in (chat.candidate_id, chat.professional_id):
            raise UnauthorizedError("Unauthorized - not your session")

        was_confirmed = chat.status == SessionStatus.CONFIRMED
        chat = await self._cancel(chat, request.reason, request.actor_id)

        if was_confirmed:
            await self._release_external_resources(chat, parties.professional)

        return chat

    async def cancel_for_failed_payment(
        self, payment_intent_id: str
    ) -> ChatSession | None:
        """
        Cancel the session whose booking charge failed.

        Called when the provider reports a failed payment intent. Events
        can be redelivered, so a session that is already cancelled is
        returned unchanged. A completed session is never reopened.

        Args:
            payment_intent_id: Provider payment intent ID

        Returns:
            The session, or None if no session uses this payment intent
        """
        parties = await self.session_repo.find_with_parties_by_payment_intent(
            payment_intent_id
        )
        if parties is None:
            logger.warning(
                "No session for failed payment",
                extra={"payment_intent_id": payment_intent_id},
            )
            return None

        chat = parties.session
        if is_terminal_session_status(chat.status):
            logger.info(
                "Failed payment for finished session ignored",
                extra={
                    "session_id": chat.id,
                    "payment_intent_id": payment_intent_id,
                    "status": chat.status,
                },
            )
            return chat

        was_confirmed = chat.status == SessionStatus.CONFIRMED
        chat = await self._cancel(chat, PAYMENT_FAILED_REASON, actor_id=None)

        if was_confirmed:
            await self._release_external_resources(chat, parties.professional)

        return chat

    async def _cancel(
        self, chat: ChatSession, reason: str, actor_id: int | None
    ) -> ChatSession:
        """Move a session to cancelled and commit."""
        ensure_session_transition(chat.status, SessionStatus.CANCELLED)

        previous_status = chat.status
        chat.status = SessionStatus.CANCELLED.value
        chat.cancel_reason = reason
        chat.cancelled_at = self.clock()
        await self.session.commit()

        logger.info(
            "Session cancelled",
            extra={
                "session_id": chat.id,
                "actor_id": actor_id,
                "previous_status": previous_status,
                "reason": reason,
            },
        )
        return chat

    async def _load(self, session_id: int) -> SessionWithParties:
        parties = await self.session_repo.find_with_parties(session_id)
        if parties is None:
            raise NotFoundError("Session not found", session_id=session_id)
        return parties

    async def _create_calendar_event(
        self, parties: SessionWithParties, meeting: MeetingInfo
    ) -> str | None:
        """Create the calendar event; failures are logged, never raised."""
        professional = parties.professional
        candidate = parties.candidate
        chat = parties.session

        if not professional.google_calendar_token:
            return None

        company = professional.company or chat.firm_id
        description = (
            "Professional mentoring session via Monet platform.\n\n"
            f"Participants:\n- {candidate.name} (Candidate)\n"
            f"- {professional.name} ({company})\n\n"
            f"Duration: {chat.duration_minutes} minutes\n\n"
            f"Join video call:\n{meeting.join_url}\nMeeting ID: {meeting.id}"
        )

        try:
            event = await self.calendar_provider.create_event(
                professional.google_calendar_token,
                summary=(
                    f"Monet Session: {candidate.name} & {professional.name} "
                    f"({company})"
                ),
                description=description,
                start_time=chat.scheduled_at,
                duration_minutes=chat.duration_minutes,
                attendees=[
                    Attendee(email=professional.email, display_name=professional.name),
                    Attendee(email=candidate.email, display_name=candidate.name),
                ],
            )
        except CalendarTokenExpired:
            logger.warning(
                "Calendar token expired, confirming without calendar event",
                extra={"session_id": chat.id, "professional_id": professional.id},
            )
            return None
        except ExternalServiceFailure as e:
            logger.warning(
                "Calendar event creation failed, confirming without it",
                extra={"session_id": chat.id, "error": str(e)},
            )
            return None

        return event.id

    async def _discard_meeting(self, meeting_id: str, session_id: int) -> None:
        """Delete a meeting; failures are logged for manual cleanup."""
        try:
            await self.meeting_provider.delete_meeting(meeting_id)
        except ExternalServiceFailure as e:
            logger.error(
                "Meeting not deleted, needs manual cleanup",
                extra={
                    "session_id": session_id,
                    "meeting_id": meeting_id,
                    "error": str(e),
                },
            )

    async def _release_external_resources(
        self, chat: ChatSession, professional: User
    ) -> None:
        """Best-effort removal of meeting and calendar event."""
        if chat.meeting_id:
            await self._discard_meeting(chat.meeting_id, chat.id)

        if chat.calendar_event_id and professional.google_calendar_token:
            try:
                await self.calendar_provider.delete_event(
                    professional.google_calendar_token, chat.calendar_event_id
                )
            except ExternalServiceFailure as e:
                logger.warning(
                    "Calendar event not deleted on cancellation",
                    extra={
                        "session_id": chat.id,
                        "calendar_event_id": chat.calendar_event_id,
                        "error": str(e),
                    },
                )
