"""
Unit tests for referral chain walking.

Tests cover:
- Linear chains ending at the top
- Depth cap
- Cycles in the referral graph
- Lookup failures
"""

from unittest.mock import AsyncMock

import pytest

from monet.services.payout.chain_walker import (
    ReferralLink,
    collect_referral_chain,
)
from monet.utils.exceptions import ReferralLookupError


def lookup_from(links: dict[int, int | None]) -> AsyncMock:
    """Build an async referrer lookup from a child -> parent mapping."""
    return AsyncMock(side_effect=lambda pro_id: links.get(pro_id))


class TestWalkReferralChain:
    """Test chain walking."""

    @pytest.mark.asyncio
    async def test_no_start_referrer(self):
        """Empty chain when there is no direct referrer."""
        get_referrer = lookup_from({})

        chain = await collect_referral_chain(None, get_referrer)

        assert chain == []
        get_referrer.assert_not_called()

    @pytest.mark.asyncio
    async def test_linear_chain(self):
        """Levels count from the direct referrer upward."""
        get_referrer = lookup_from({2: 3, 3: None})

        chain = await collect_referral_chain(2, get_referrer)

        assert chain == [
            ReferralLink(referrer_id=2, level=1),
            ReferralLink(referrer_id=3, level=2),
        ]

    @pytest.mark.asyncio
    async def test_depth_cap(self):
        """A 15-deep chain yields only 10 levels."""
        links = {i: i + 1 for i in range(1, 16)}
        get_referrer = lookup_from(links)

        chain = await collect_referral_chain(1, get_referrer)

        assert len(chain) == 10
        assert chain[-1] == ReferralLink(referrer_id=10, level=10)
        # No lookup beyond the last paid level
        assert get_referrer.await_count == 9

    @pytest.mark.asyncio
    async def test_custom_depth(self):
        """Smaller max_depth stops earlier."""
        get_referrer = lookup_from({1: 2, 2: 3, 3: 4})

        chain = await collect_referral_chain(1, get_referrer, max_depth=2)

        assert [link.referrer_id for link in chain] == [1, 2]

    @pytest.mark.asyncio
    async def test_depth_above_cap_is_clamped(self):
        """max_depth beyond 10 is clamped to 10."""
        links = {i: i + 1 for i in range(1, 30)}

        chain = await collect_referral_chain(1, lookup_from(links), max_depth=25)

        assert len(chain) == 10

    @pytest.mark.asyncio
    async def test_cycle_terminates(self):
        """A <-> B cycle alternates and stops at the depth cap."""
        get_referrer = lookup_from({1: 2, 2: 1})

        chain = await collect_referral_chain(1, get_referrer)

        assert len(chain) == 10
        assert [link.referrer_id for link in chain] == [1, 2] * 5
        assert [link.level for link in chain] == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_lookup_error_propagates(self):
        """A failing lookup aborts the walk."""
        get_referrer = AsyncMock(
            side_effect=ReferralLookupError("Referral chain references missing user 3")
        )

        with pytest.raises(ReferralLookupError):
            await collect_referral_chain(2, get_referrer)
