"""
ReferralTransfer model.

One row per successful referral bonus transfer of a session settlement.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from monet.models.base import Base, TimestampMixin
from monet.models.types import CentsType, ProviderIdType


class ReferralTransfer(TimestampMixin, Base):
    """Referral bonus paid to a referrer for a session."""

    __tablename__ = "referral_transfers"
    __table_args__ = (
        CheckConstraint(
            "level >= 1 AND level <= 10", name="check_referral_level_range"
        ),
        CheckConstraint(
            "bonus_cents >= 0", name="check_referral_bonus_non_negative"
        ),
        Index("idx_referral_transfer_session_level", "session_id", "level"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chat_sessions.id"), nullable=False
    )
    referrer_pro_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    bonus_cents: Mapped[int] = mapped_column(CentsType, nullable=False)
    transfer_id: Mapped[str] = mapped_column(
        ProviderIdType, nullable=False, index=True
    )
    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
