"""
User model.

Represents a candidate or a professional. The referred_by_id column is the
referral chain link: each professional optionally points at the
professional who referred them.
"""

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from monet.models.base import Base, TimestampMixin
from monet.models.enums import UserRole
from monet.models.types import CentsType, ProviderIdType, StatusType


class User(TimestampMixin, Base):
    """User model - candidates and professionals."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "session_rate_cents IS NULL OR session_rate_cents >= 0",
            name="check_user_session_rate_non_negative",
        ),
        CheckConstraint(
            "offer_bonus_cents IS NULL OR offer_bonus_cents >= 0",
            name="check_user_offer_bonus_non_negative",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        StatusType, default=UserRole.CANDIDATE.value, nullable=False, index=True
    )

    # Professional fields
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    session_rate_cents: Mapped[int | None] = mapped_column(
        CentsType, nullable=True
    )
    stripe_account_id: Mapped[str | None] = mapped_column(
        ProviderIdType, nullable=True
    )
    referred_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )
    google_calendar_token: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    # Candidate fields
    offer_bonus_cents: Mapped[int | None] = mapped_column(
        CentsType, nullable=True
    )

    @property
    def is_professional(self) -> bool:
        """Check if user is a professional."""
        return self.role == UserRole.PROFESSIONAL

    @property
    def is_candidate(self) -> bool:
        """Check if user is a candidate."""
        return self.role == UserRole.CANDIDATE

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, role={self.role!r}, email={self.email!r})>"
