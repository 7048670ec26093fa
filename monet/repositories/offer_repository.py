"""
Offer repository.

Data access layer for Offer model.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.enums import OfferStatus
from monet.models.offer import Offer
from monet.repositories.base import BaseRepository


class OfferRepository(BaseRepository[Offer]):
    """Offer repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize offer repository."""
        super().__init__(Offer, session)

    async def find_unpaid_accepted(self, limit: int = 100) -> list[Offer]:
        """
        Find accepted offers whose bonus is owed but not yet paid.

        Offers with a transfer in flight are left out.

        Args:
            limit: Max number of offers

        Returns:
            Offers ordered by acceptance time
        """
        stmt = (
            select(Offer)
            .where(
                Offer.status == OfferStatus.ACCEPTED.value,
                Offer.bonus_paid_at.is_(None),
                Offer.bonus_payout_started_at.is_(None),
                Offer.first_chat_pro_id.is_not(None),
                Offer.bonus_cents > 0,
            )
            .order_by(Offer.accepted_at.asc(), Offer.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def claim_bonus_payout(self, offer_id: int, now: datetime) -> int | None:
        """
        Atomically start a bonus payout attempt.

        Compare-and-swap on bonus_paid_at and bonus_payout_started_at: only
        one caller at a time holds the claim, so two transfers can never be
        in flight for the same offer. Loaded instances are not
        synchronized; refresh them afterwards.

        Args:
            offer_id: Offer ID
            now: Attempt start timestamp

        Returns:
            Attempt number if this caller won the claim, None otherwise
        """
        stmt = (
            update(Offer)
            .where(
                Offer.id == offer_id,
                Offer.status == OfferStatus.ACCEPTED.value,
                Offer.bonus_paid_at.is_(None),
                Offer.bonus_payout_started_at.is_(None),
            )
            .values(
                bonus_payout_started_at=now,
                bonus_payout_attempts=Offer.bonus_payout_attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None

        attempts = await self.session.execute(
            select(Offer.bonus_payout_attempts).where(Offer.id == offer_id)
        )
        return attempts.scalar_one()

    async def release_bonus_payout_claim(self, offer_id: int) -> None:
        """
        Undo claim_bonus_payout after the provider rejected the transfer.

        Args:
            offer_id: Offer ID
        """
        stmt = (
            update(Offer)
            .where(Offer.id == offer_id, Offer.bonus_paid_at.is_(None))
            .values(bonus_payout_started_at=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def find_for_candidate(self, candidate_id: int) -> list[Offer]:
        """
        Get a candidate's offers, newest first.

        Args:
            candidate_id: Candidate user ID

        Returns:
            List of offers
        """
        stmt = (
            select(Offer)
            .where(Offer.candidate_id == candidate_id)
            .order_by(Offer.created_at.desc(), Offer.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_for_first_chat_pro(self, professional_id: int) -> list[Offer]:
        """
        Get offers that credit a professional as first chat, newest first.

        Args:
            professional_id: Professional user ID

        Returns:
            List of offers
        """
        stmt = (
            select(Offer)
            .where(Offer.first_chat_pro_id == professional_id)
            .order_by(Offer.created_at.desc(), Offer.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
