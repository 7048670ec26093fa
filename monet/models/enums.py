"""
Model enumerations.

Status values are stored as plain strings; StrEnum members compare equal
to their stored value.
"""

from enum import StrEnum


class UserRole(StrEnum):
    """Marketplace role of a user."""

    CANDIDATE = "candidate"
    PROFESSIONAL = "professional"


class SessionStatus(StrEnum):
    """Booked session status."""

    REQUESTED = "requested"  # Candidate booked, waiting for professional
    CONFIRMED = "confirmed"  # Professional accepted, meeting created
    COMPLETED = "completed"  # Feedback submitted and settled (terminal)
    CANCELLED = "cancelled"  # Declined or cancelled (terminal)


class OfferStatus(StrEnum):
    """Reported job offer status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class TransferType(StrEnum):
    """Kind of payout transfer, sent as provider metadata."""

    SESSION_FEE = "session_fee"
    REFERRAL_BONUS = "referral_bonus"
    OFFER_BONUS = "offer_bonus"
