"""
User repository.

Data access layer for User model, including the referred-by lookup used by
the referral chain walk.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.user import User
from monet.repositories.base import BaseRepository
from monet.utils.exceptions import ReferralLookupError


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_referrer_id(self, professional_id: int) -> int | None:
        """
        Get the professional who referred the given professional.

        Reads the link fresh on every call; chains are never cached.

        Args:
            professional_id: Professional user ID

        Returns:
            Referrer user ID, or None at the top of the chain

        Raises:
            ReferralLookupError: If the professional does not exist
        """
        stmt = select(User.id, User.referred_by_id).where(
            User.id == professional_id
        )
        result = await self.session.execute(stmt)
        row = result.one_or_none()

        if row is None:
            raise ReferralLookupError(
                f"Referral chain references missing user {professional_id}"
            )

        return row.referred_by_id
