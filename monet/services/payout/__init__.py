"""
Payout computation package.

- money: platform fee and per-level referral bonus arithmetic
- chain_walker: bounded walk of the referred-by links
- calculator: payout breakdown (referrals first, then platform fee)
"""

from monet.services.payout.calculator import (
    LevelBonus,
    PayoutBreakdown,
    PayoutCalculator,
    build_breakdown,
)
from monet.services.payout.chain_walker import (
    ReferralLink,
    collect_referral_chain,
    walk_referral_chain,
)
from monet.services.payout.money import (
    net_of_platform_fee,
    platform_fee,
    referral_bonus_for_level,
    referral_rate_for_level,
)


__all__ = [
    # Money
    "net_of_platform_fee",
    "platform_fee",
    "referral_bonus_for_level",
    "referral_rate_for_level",
    # Chain
    "ReferralLink",
    "collect_referral_chain",
    "walk_referral_chain",
    # Calculator
    "LevelBonus",
    "PayoutBreakdown",
    "PayoutCalculator",
    "build_breakdown",
]
