"""
Unit tests for money utilities.

Tests cover:
- Half-up rounding to the cent
- Platform fee calculation
- Referral rate and bonus per level
"""

from decimal import Decimal

import pytest

from monet.services.payout.money import (
    net_of_platform_fee,
    platform_fee,
    referral_bonus_for_level,
    referral_rate_for_level,
    round_cents,
)


class TestRoundCents:
    """Test rounding of fractional cents."""

    def test_half_rounds_up(self):
        """Exactly half a cent rounds away from zero."""
        assert round_cents(Decimal("0.5")) == 1
        assert round_cents(Decimal("2.5")) == 3

    def test_below_half_rounds_down(self):
        """Less than half a cent is dropped."""
        assert round_cents(Decimal("0.4999")) == 0

    def test_whole_cents_unchanged(self):
        """Whole cent amounts pass through."""
        assert round_cents(Decimal("445")) == 445


class TestPlatformFee:
    """Test platform fee calculation."""

    def test_default_rate(self):
        """Default fee is 5%."""
        assert platform_fee(8900) == 445

    def test_rounds_half_up(self):
        """5% of 10 cents is 0.5, which rounds to 1."""
        assert platform_fee(10) == 1

    def test_zero_amount(self):
        """No fee on nothing."""
        assert platform_fee(0) == 0

    def test_float_rate_is_exact(self):
        """Float rates are converted via str, not binary expansion."""
        assert platform_fee(10000, 0.05) == 500

    def test_custom_rate(self):
        """Custom rate as string."""
        assert platform_fee(10000, "0.1") == 1000

    def test_net_of_platform_fee(self):
        """Net is amount minus fee."""
        assert net_of_platform_fee(50000) == 47500


class TestReferralRates:
    """Test referral rate per level."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (1, Decimal("0.10")),
            (2, Decimal("0.010")),
            (3, Decimal("0.0010")),
            (10, Decimal("0.10") * Decimal("0.10") ** 9),
        ],
    )
    def test_rate_decays_tenfold(self, level, expected):
        """Each level earns a tenth of the level above."""
        assert referral_rate_for_level(level) == expected

    @pytest.mark.parametrize("level", [0, -1, 11, 50])
    def test_rate_zero_outside_range(self, level):
        """Levels outside 1..10 earn nothing."""
        assert referral_rate_for_level(level) == Decimal("0")


class TestReferralBonus:
    """Test referral bonus amounts."""

    def test_level_one(self):
        """Direct referrer earns 10%."""
        assert referral_bonus_for_level(10000, 1) == 1000

    def test_level_two(self):
        """Second level earns 1%."""
        assert referral_bonus_for_level(10000, 2) == 100

    def test_deep_level_rounds_to_zero(self):
        """0.001% of $100 is a tenth of a cent, rounded away."""
        assert referral_bonus_for_level(10000, 5) == 0

    def test_half_cent_rounds_up(self):
        """0.1% of 500 cents is 0.5, rounded up."""
        assert referral_bonus_for_level(500, 3) == 1

    def test_out_of_range_level(self):
        """Level 11 earns nothing."""
        assert referral_bonus_for_level(10**12, 11) == 0
