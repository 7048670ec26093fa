"""
Referral transfer repository.

Data access layer for ReferralTransfer model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.referral_transfer import ReferralTransfer
from monet.repositories.base import BaseRepository


class ReferralTransferRepository(BaseRepository[ReferralTransfer]):
    """Referral transfer repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral transfer repository."""
        super().__init__(ReferralTransfer, session)

    async def get_by_session(self, session_id: int) -> list[ReferralTransfer]:
        """
        Get referral transfers of a session ordered by level.

        Args:
            session_id: Chat session ID

        Returns:
            List of referral transfers
        """
        stmt = (
            select(ReferralTransfer)
            .where(ReferralTransfer.session_id == session_id)
            .order_by(ReferralTransfer.level.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
