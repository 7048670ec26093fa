"""
Chat session repository.

Data access layer for ChatSession model. Composed reads return typed
structures instead of lazily populated relationships.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from monet.models.chat_session import ChatSession
from monet.models.enums import SessionStatus
from monet.models.user import User
from monet.repositories.base import BaseRepository


ACTIVE_STATUSES = (SessionStatus.REQUESTED.value, SessionStatus.CONFIRMED.value)
HELD_STATUSES = (SessionStatus.CONFIRMED.value, SessionStatus.COMPLETED.value)


@dataclass
class SessionWithParties:
    """A session together with both of its parties."""

    session: ChatSession
    candidate: User
    professional: User


class ChatSessionRepository(BaseRepository[ChatSession]):
    """Chat session repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chat session repository."""
        super().__init__(ChatSession, session)

    async def find_with_parties(
        self, session_id: int
    ) -> SessionWithParties | None:
        """
        Load a session with candidate and professional in one query.

        Args:
            session_id: Chat session ID

        Returns:
            SessionWithParties or None if session not found
        """
        candidate = aliased(User, name="candidate")
        professional = aliased(User, name="professional")

        stmt = (
            select(ChatSession, candidate, professional)
            .join(candidate, candidate.id == ChatSession.candidate_id)
            .join(professional, professional.id == ChatSession.professional_id)
            .where(ChatSession.id == session_id)
        )
        result = await self.session.execute(stmt)
        row = result.one_or_none()

        if row is None:
            return None

        return SessionWithParties(
            session=row[0], candidate=row[1], professional=row[2]
        )

    async def find_conflicting(
        self,
        candidate_id: int,
        professional_id: int,
        scheduled_at: datetime,
    ) -> ChatSession | None:
        """
        Find an active session of either party at the same start time.

        Args:
            candidate_id: Candidate user ID
            professional_id: Professional user ID
            scheduled_at: Requested start time

        Returns:
            Conflicting session or None
        """
        stmt = (
            select(ChatSession)
            .where(
                ChatSession.scheduled_at == scheduled_at,
                ChatSession.status.in_(ACTIVE_STATUSES),
                or_(
                    ChatSession.candidate_id == candidate_id,
                    ChatSession.professional_id == professional_id,
                ),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_with_parties_by_payment_intent(
        self, payment_intent_id: str
    ) -> SessionWithParties | None:
        """
        Find the session a booking charge belongs to, with both parties.

        Args:
            payment_intent_id: Provider payment intent ID

        Returns:
            SessionWithParties or None
        """
        stmt = select(ChatSession.id).where(
            ChatSession.payment_intent_id == payment_intent_id
        )
        result = await self.session.execute(stmt)
        session_id = result.scalar_one_or_none()
        if session_id is None:
            return None
        return await self.find_with_parties(session_id)

    async def find_first_chat_at_firm(
        self, candidate_id: int, firm_id: str
    ) -> ChatSession | None:
        """
        Find the candidate's earliest confirmed or completed session at a firm.

        Args:
            candidate_id: Candidate user ID
            firm_id: Firm identifier

        Returns:
            Earliest held session or None
        """
        stmt = (
            select(ChatSession)
            .where(
                ChatSession.candidate_id == candidate_id,
                ChatSession.firm_id == firm_id,
                ChatSession.status.in_(HELD_STATUSES),
            )
            .order_by(ChatSession.created_at.asc(), ChatSession.id.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def claim_for_settlement(
        self, session_id: int, now: datetime
    ) -> bool:
        """
        Atomically mark a confirmed session completed.

        Compare-and-swap on status and feedback_submitted_at: of two
        concurrent submissions only one sees a row updated. Loaded
        instances are not synchronized; refresh them afterwards.

        Args:
            session_id: Chat session ID
            now: Completion timestamp

        Returns:
            True if this caller won the claim
        """
        stmt = (
            update(ChatSession)
            .where(
                ChatSession.id == session_id,
                ChatSession.status == SessionStatus.CONFIRMED.value,
                ChatSession.feedback_submitted_at.is_(None),
            )
            .values(
                status=SessionStatus.COMPLETED.value,
                completed_at=now,
                feedback_submitted_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def release_settlement_claim(self, session_id: int) -> None:
        """
        Undo claim_for_settlement so the feedback can be resubmitted.

        Args:
            session_id: Chat session ID
        """
        stmt = (
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(
                status=SessionStatus.CONFIRMED.value,
                completed_at=None,
                feedback_submitted_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
