"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from monet.models.base import Base
from monet.models.chat_session import ChatSession
from monet.models.enums import OfferStatus, SessionStatus, TransferType, UserRole
from monet.models.feedback import ProfessionalFeedback
from monet.models.offer import Offer
from monet.models.referral_transfer import ReferralTransfer
from monet.models.user import User


__all__ = [
    # Base
    "Base",
    # Enums
    "OfferStatus",
    "SessionStatus",
    "TransferType",
    "UserRole",
    # Models
    "ChatSession",
    "Offer",
    "ProfessionalFeedback",
    "ReferralTransfer",
    "User",
]
