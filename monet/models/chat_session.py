"""
ChatSession model.

One booked coffee chat between a candidate and a professional. The rate is
captured at booking time and never changes afterwards.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from monet.models.base import Base, TimestampMixin
from monet.models.enums import SessionStatus
from monet.models.types import CentsType, ProviderIdType, StatusType


class ChatSession(TimestampMixin, Base):
    """
    ChatSession entity.

    Attributes:
        id: Primary key
        candidate_id: Candidate who booked
        professional_id: Professional who hosts and gets paid
        referrer_pro_id: Direct referrer, receives the level-1 bonus
        firm_id: Professional's employer at booking time
        scheduled_at: Start time (UTC)
        duration_minutes: Length of the chat
        rate_cents: Gross amount charged, fixed at booking
        status: requested / confirmed / completed / cancelled
        transfer_ids: Successful payout transfer ids
        offer_bonus_cents: Candidate's pledged offer bonus at booking time
        feedback_submitted_at: Settlement guard, set exactly once
    """

    __tablename__ = "chat_sessions"
    __table_args__ = (
        CheckConstraint("rate_cents >= 0", name="check_session_rate_non_negative"),
        CheckConstraint(
            "duration_minutes >= 1", name="check_session_duration_positive"
        ),
        CheckConstraint(
            "offer_bonus_cents >= 0",
            name="check_session_offer_bonus_non_negative",
        ),
        Index("idx_session_professional_scheduled", "professional_id", "scheduled_at"),
        Index("idx_session_candidate_scheduled", "candidate_id", "scheduled_at"),
        Index("idx_session_candidate_firm", "candidate_id", "firm_id"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Parties
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    professional_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    referrer_pro_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    firm_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Scheduling
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    duration_minutes: Mapped[int] = mapped_column(
        Integer, default=30, nullable=False
    )
    request_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Money
    rate_cents: Mapped[int] = mapped_column(CentsType, nullable=False)
    offer_bonus_cents: Mapped[int] = mapped_column(
        CentsType, default=0, nullable=False
    )
    is_first_chat_at_firm: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Lifecycle
    status: Mapped[str] = mapped_column(
        StatusType,
        default=SessionStatus.REQUESTED.value,
        nullable=False,
        index=True,
    )
    cancel_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    # ISO start times the professional offered instead when declining
    alternative_slots: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # External resources
    meeting_id: Mapped[str | None] = mapped_column(ProviderIdType, nullable=True)
    meeting_join_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    calendar_event_id: Mapped[str | None] = mapped_column(
        ProviderIdType, nullable=True
    )
    payment_intent_id: Mapped[str | None] = mapped_column(
        ProviderIdType, nullable=True
    )

    # Settlement artifacts
    transfer_ids: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    feedback_submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def status_enum(self) -> SessionStatus:
        """Current status as enum."""
        return SessionStatus(self.status)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ChatSession(id={self.id}, status={self.status!r}, "
            f"rate_cents={self.rate_cents})>"
        )
