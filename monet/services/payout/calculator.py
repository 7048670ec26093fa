"""
Payout calculator.

Splits a gross amount between the referral chain, the platform and the
recipient professional.

Order is fixed: referral bonuses come out of the gross first, then the
platform fee is taken from what remains. Changing the order changes who
pays for the referral program and needs a product decision.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from loguru import logger

from monet.config.business_constants import PLATFORM_FEE_RATE, REFERRAL_MAX_DEPTH
from monet.services.payout.chain_walker import (
    ReferralLink,
    ReferrerLookup,
    walk_referral_chain,
)
from monet.services.payout.money import platform_fee, referral_bonus_for_level
from monet.utils.exceptions import ValidationError


@dataclass(frozen=True)
class LevelBonus:
    """Referral bonus owed to one referrer."""

    referrer_id: int
    level: int
    bonus_cents: int


@dataclass(frozen=True)
class PayoutBreakdown:
    """
    Computed split of a gross amount. Never persisted.

    Invariant: recipient_net_cents + platform_fee_cents
    + total_referral_cents == gross_cents.
    """

    gross_cents: int
    per_level_bonuses: tuple[LevelBonus, ...] = field(default_factory=tuple)
    total_referral_cents: int = 0
    platform_fee_cents: int = 0
    recipient_net_cents: int = 0

    @property
    def net_after_referrals_cents(self) -> int:
        """Gross minus all referral bonuses."""
        return self.gross_cents - self.total_referral_cents

    def to_dict(self) -> dict[str, Any]:
        """Serialize for responses and logs."""
        return {
            "gross_cents": self.gross_cents,
            "per_level_bonuses": [
                {
                    "referrer_id": b.referrer_id,
                    "level": b.level,
                    "bonus_cents": b.bonus_cents,
                }
                for b in self.per_level_bonuses
            ],
            "total_referral_cents": self.total_referral_cents,
            "platform_fee_cents": self.platform_fee_cents,
            "recipient_net_cents": self.recipient_net_cents,
        }


def build_breakdown(
    gross_cents: int,
    chain: Iterable[ReferralLink],
    fee_rate: Decimal | float | str = PLATFORM_FEE_RATE,
) -> PayoutBreakdown:
    """
    Compute a payout breakdown from an already walked chain.

    Args:
        gross_cents: Gross amount in cents
        chain: Referral links ordered by level
        fee_rate: Platform fee rate

    Returns:
        PayoutBreakdown

    Raises:
        ValidationError: If gross_cents is negative or not an int
    """
    if isinstance(gross_cents, bool) or not isinstance(gross_cents, int):
        raise ValidationError("Gross amount must be integer cents")
    if gross_cents < 0:
        raise ValidationError("Gross amount cannot be negative")

    bonuses = []
    for link in chain:
        bonus_cents = referral_bonus_for_level(gross_cents, link.level)
        if bonus_cents <= 0:
            continue
        bonuses.append(
            LevelBonus(
                referrer_id=link.referrer_id,
                level=link.level,
                bonus_cents=bonus_cents,
            )
        )

    total_referral_cents = sum(b.bonus_cents for b in bonuses)
    net_after_referrals = gross_cents - total_referral_cents
    fee_cents = platform_fee(net_after_referrals, fee_rate)

    return PayoutBreakdown(
        gross_cents=gross_cents,
        per_level_bonuses=tuple(bonuses),
        total_referral_cents=total_referral_cents,
        platform_fee_cents=fee_cents,
        recipient_net_cents=net_after_referrals - fee_cents,
    )


class PayoutCalculator:
    """Walks a referral chain and computes the payout breakdown."""

    def __init__(
        self,
        get_referrer: ReferrerLookup,
        fee_rate: Decimal | float | str = PLATFORM_FEE_RATE,
        max_depth: int = REFERRAL_MAX_DEPTH,
    ) -> None:
        """
        Initialize payout calculator.

        Args:
            get_referrer: Async lookup professional_id -> referrer id or None
            fee_rate: Platform fee rate
            max_depth: Referral levels to walk
        """
        self.get_referrer = get_referrer
        self.fee_rate = fee_rate
        self.max_depth = max_depth

    async def calculate(
        self, gross_cents: int, start_referrer_id: int | None
    ) -> PayoutBreakdown:
        """
        Compute the payout breakdown for a gross amount.

        A failing referrer lookup aborts the whole computation; no partial
        chain is ever paid.

        Args:
            gross_cents: Gross amount in cents
            start_referrer_id: Direct referrer, or None

        Returns:
            PayoutBreakdown
        """
        chain = [
            link
            async for link in walk_referral_chain(
                start_referrer_id, self.get_referrer, self.max_depth
            )
        ]
        breakdown = build_breakdown(gross_cents, chain, self.fee_rate)

        logger.debug(
            "Payout breakdown computed",
            extra={
                "gross_cents": gross_cents,
                "chain_length": len(chain),
                "total_referral_cents": breakdown.total_referral_cents,
                "platform_fee_cents": breakdown.platform_fee_cents,
                "recipient_net_cents": breakdown.recipient_net_cents,
            },
        )

        return breakdown
