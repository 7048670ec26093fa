"""
Offer model.

A job offer reported for a candidate at a firm. The first-chat professional
and the bonus amount are captured when the offer is reported and never
change afterwards.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from monet.models.base import Base, TimestampMixin
from monet.models.enums import OfferStatus
from monet.models.types import CentsType, ProviderIdType, StatusType


class Offer(TimestampMixin, Base):
    """Offer model - reported job offers and their bonus payout."""

    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("bonus_cents >= 0", name="check_offer_bonus_non_negative"),
        CheckConstraint(
            "salary_cents IS NULL OR salary_cents >= 0",
            name="check_offer_salary_non_negative",
        ),
        Index("idx_offer_candidate_status", "candidate_id", "status"),
        Index("idx_offer_first_chat_status", "first_chat_pro_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    firm_id: Mapped[str] = mapped_column(String(255), nullable=False)
    first_chat_pro_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Offer details
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    salary_cents: Mapped[int | None] = mapped_column(CentsType, nullable=True)
    equity: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Status
    status: Mapped[str] = mapped_column(
        StatusType, default=OfferStatus.PENDING.value, nullable=False
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    declined_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Bonus payout
    bonus_cents: Mapped[int] = mapped_column(CentsType, default=0, nullable=False)
    bonus_paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    transfer_id: Mapped[str | None] = mapped_column(ProviderIdType, nullable=True)
    # Set while a transfer is in flight; only a provider rejection clears it
    bonus_payout_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Each attempt uses its own provider idempotency key
    bonus_payout_attempts: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    # Metadata
    reported_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    confirmed_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    @property
    def is_bonus_paid(self) -> bool:
        """Check if bonus transfer went through."""
        return self.bonus_paid_at is not None

    @property
    def is_bonus_payout_in_flight(self) -> bool:
        """Check if a bonus transfer was started but not recorded."""
        return self.bonus_payout_started_at is not None and not self.is_bonus_paid
