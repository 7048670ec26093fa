"""
Money utilities.

Pure integer-cent arithmetic for platform fees and referral bonuses.
Rates are Decimal; amounts are int. Rounding is half-up to the cent.
"""

from decimal import ROUND_HALF_UP, Decimal

from monet.config.business_constants import (
    PLATFORM_FEE_RATE,
    REFERRAL_BASE_RATE,
    REFERRAL_LEVEL_DECAY,
    REFERRAL_MAX_DEPTH,
)


_CENT = Decimal("1")


def round_cents(value: Decimal) -> int:
    """
    Round a fractional cent amount to the nearest cent (half-up).

    Args:
        value: Amount in cents, possibly fractional

    Returns:
        Whole cents
    """
    return int(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def _as_rate(rate: Decimal | float | str) -> Decimal:
    # str() first so 0.05 becomes Decimal("0.05"), not its binary expansion
    return rate if isinstance(rate, Decimal) else Decimal(str(rate))


def platform_fee(
    amount_cents: int, fee_rate: Decimal | float | str = PLATFORM_FEE_RATE
) -> int:
    """
    Calculate platform fee on an amount.

    Args:
        amount_cents: Amount in cents
        fee_rate: Fee as a fraction (0.05 = 5%)

    Returns:
        Fee in cents, rounded half-up

    Examples:
        >>> platform_fee(8900)
        445
        >>> platform_fee(10)
        1
    """
    return round_cents(Decimal(amount_cents) * _as_rate(fee_rate))


def referral_rate_for_level(level: int) -> Decimal:
    """
    Get the referral bonus rate for a chain level.

    Level 1: 10%, level 2: 1%, level 3: 0.1%, ... up to REFERRAL_MAX_DEPTH.

    Args:
        level: Referral level, 1 = direct referrer

    Returns:
        Rate as Decimal, 0 outside 1..REFERRAL_MAX_DEPTH
    """
    if level < 1 or level > REFERRAL_MAX_DEPTH:
        return Decimal("0")
    return REFERRAL_BASE_RATE * REFERRAL_LEVEL_DECAY ** (level - 1)


def referral_bonus_for_level(gross_cents: int, level: int) -> int:
    """
    Calculate referral bonus for a chain level.

    Each level is rounded independently from the gross amount; bonuses are
    not taken from a shrinking remainder.

    Args:
        gross_cents: Gross session amount in cents
        level: Referral level, 1 = direct referrer

    Returns:
        Bonus in cents (0 for invalid levels)

    Examples:
        >>> referral_bonus_for_level(10000, 1)
        1000
        >>> referral_bonus_for_level(10000, 2)
        100
        >>> referral_bonus_for_level(10000, 11)
        0
    """
    rate = referral_rate_for_level(level)
    if rate == 0:
        return 0
    return round_cents(Decimal(gross_cents) * rate)


def net_of_platform_fee(
    amount_cents: int, fee_rate: Decimal | float | str = PLATFORM_FEE_RATE
) -> int:
    """
    Amount left after the platform fee.

    Args:
        amount_cents: Amount in cents
        fee_rate: Fee as a fraction

    Returns:
        amount_cents minus platform_fee(amount_cents)
    """
    return amount_cents - platform_fee(amount_cents, fee_rate)
