"""
Feedback repository.

Data access layer for ProfessionalFeedback model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.feedback import ProfessionalFeedback
from monet.repositories.base import BaseRepository


class FeedbackRepository(BaseRepository[ProfessionalFeedback]):
    """Professional feedback repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize feedback repository."""
        super().__init__(ProfessionalFeedback, session)

    async def get_by_session(
        self, session_id: int
    ) -> ProfessionalFeedback | None:
        """
        Get feedback for a session.

        Args:
            session_id: Chat session ID

        Returns:
            Feedback or None if not submitted
        """
        feedback = await self.find_by(session_id=session_id)
        return feedback[0] if feedback else None
