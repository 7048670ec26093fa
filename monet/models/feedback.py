"""
ProfessionalFeedback model.

Written feedback a professional gives a candidate after a session. This is
the system of record for session completion; at most one per session.
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from monet.models.base import Base, TimestampMixin


class ProfessionalFeedback(TimestampMixin, Base):
    """Professional feedback to candidate."""

    __tablename__ = "professional_feedback"
    __table_args__ = (
        CheckConstraint(
            "cultural_fit_rating BETWEEN 1 AND 5",
            name="check_feedback_cultural_fit_range",
        ),
        CheckConstraint(
            "interest_rating BETWEEN 1 AND 5",
            name="check_feedback_interest_range",
        ),
        CheckConstraint(
            "technical_rating BETWEEN 1 AND 5",
            name="check_feedback_technical_range",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    # Unique: one feedback per session
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chat_sessions.id"), unique=True, nullable=False
    )
    professional_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    cultural_fit_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    interest_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    technical_rating: Mapped[int] = mapped_column(Integer, nullable=False)

    feedback: Mapped[str] = mapped_column(Text, nullable=False)
    # Not shown to candidate
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
