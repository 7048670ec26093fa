"""Settlement services: session feedback payouts and offer bonuses."""

from monet.services.settlement.offer_settlement import OfferSettlementService
from monet.services.settlement.results import (
    OfferAcceptanceResult,
    ReferralPayout,
    SessionSettlementResult,
    SkippedReferral,
)
from monet.services.settlement.session_settlement import SessionSettlementService


__all__ = [
    "OfferAcceptanceResult",
    "OfferSettlementService",
    "ReferralPayout",
    "SessionSettlementResult",
    "SessionSettlementService",
    "SkippedReferral",
]
