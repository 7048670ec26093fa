"""
Settlement result types.

Returned to callers (and rendered by the transport layer); never
persisted as such.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from monet.services.payout.calculator import PayoutBreakdown


@dataclass(frozen=True)
class ReferralPayout:
    """A referral bonus that was transferred."""

    referrer_id: int
    level: int
    bonus_cents: int
    transfer_id: str


@dataclass(frozen=True)
class SkippedReferral:
    """A referral bonus that was owed but not transferred."""

    referrer_id: int
    level: int
    bonus_cents: int
    reason: str


@dataclass
class SessionSettlementResult:
    """Outcome of a session feedback settlement."""

    session_id: int
    feedback_id: int
    breakdown: PayoutBreakdown
    primary_transfer_id: str | None
    referral_payouts: list[ReferralPayout] = field(default_factory=list)
    skipped_referrals: list[SkippedReferral] = field(default_factory=list)
    candidate_offer_bonus_cents: int = 0
    paid_at: datetime | None = None

    @property
    def transfer_ids(self) -> list[str]:
        """All successful transfer ids, primary first."""
        ids = [self.primary_transfer_id] if self.primary_transfer_id else []
        ids.extend(p.transfer_id for p in self.referral_payouts)
        return ids

    def to_dict(self) -> dict[str, Any]:
        """Serialize for responses."""
        return {
            "session_id": self.session_id,
            "feedback_id": self.feedback_id,
            "session_payout_cents": self.breakdown.recipient_net_cents,
            "breakdown": self.breakdown.to_dict(),
            "referral_payouts": len(self.referral_payouts),
            "skipped_referrals": [
                {"referrer_id": s.referrer_id, "level": s.level, "reason": s.reason}
                for s in self.skipped_referrals
            ],
            "candidate_offer_bonus_cents": self.candidate_offer_bonus_cents,
            "transfer_ids": self.transfer_ids,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }


@dataclass(frozen=True)
class OfferAcceptanceResult:
    """Outcome of accepting an offer (or retrying its bonus)."""

    offer_id: int
    bonus_paid: bool
    bonus_cents: int
    payout_cents: int = 0
    transfer_id: str | None = None
    # Why no transfer happened, when bonus_paid is False
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for responses."""
        return {
            "offer_id": self.offer_id,
            "bonus_paid": self.bonus_paid,
            "bonus_amount_cents": self.bonus_cents,
            "payout_cents": self.payout_cents,
            "transfer_id": self.transfer_id,
            "reason": self.reason,
        }
