"""
Referral chain walker.

Walks the referred-by links upward from a starting referrer. The links are
read live on every step; a chain is never materialized or cached.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from monet.config.business_constants import REFERRAL_MAX_DEPTH


ReferrerLookup = Callable[[int], Awaitable[int | None]]


@dataclass(frozen=True)
class ReferralLink:
    """One referrer in a chain."""

    referrer_id: int
    level: int


async def walk_referral_chain(
    start_referrer_id: int | None,
    get_referrer: ReferrerLookup,
    max_depth: int = REFERRAL_MAX_DEPTH,
) -> AsyncIterator[ReferralLink]:
    """
    Yield (referrer, level) pairs from the direct referrer upward.

    Stops when the lookup returns None or after max_depth levels. The depth
    bound is what guarantees termination: the graph may contain cycles.

    Lookup errors propagate unchanged and end the walk.

    Args:
        start_referrer_id: Direct referrer (level 1), or None
        get_referrer: Async lookup professional_id -> referrer id or None
        max_depth: Levels to walk, capped at REFERRAL_MAX_DEPTH

    Yields:
        ReferralLink for each level, level starting at 1
    """
    depth = min(max_depth, REFERRAL_MAX_DEPTH)
    current = start_referrer_id
    level = 1

    while current is not None:
        yield ReferralLink(referrer_id=current, level=level)

        if level >= depth:
            logger.debug(
                "Referral chain walk reached depth cap",
                extra={"start_referrer_id": start_referrer_id, "depth": depth},
            )
            return

        current = await get_referrer(current)
        level += 1


async def collect_referral_chain(
    start_referrer_id: int | None,
    get_referrer: ReferrerLookup,
    max_depth: int = REFERRAL_MAX_DEPTH,
) -> list[ReferralLink]:
    """
    Walk a chain and return it as a list.

    Args:
        start_referrer_id: Direct referrer, or None
        get_referrer: Async referrer lookup
        max_depth: Levels to walk

    Returns:
        Links ordered by level
    """
    return [
        link
        async for link in walk_referral_chain(
            start_referrer_id, get_referrer, max_depth
        )
    ]
