"""
Base repository.

Lookups and inserts shared by every model repository. Repositories flush
but never commit; services own the transaction.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository bound to one model and one session.

    Example:
        class OfferRepository(BaseRepository[Offer]):
            def __init__(self, session: AsyncSession):
                super().__init__(Offer, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get a row by primary key, from the identity map when loaded."""
        return await self.session.get(self.model, id)

    async def get_by_id_for_update(self, id: int) -> ModelType | None:
        """
        Get a row by primary key under SELECT ... FOR UPDATE.

        Always re-reads the row so guards see committed state even when
        the instance is already in the session.

        Args:
            id: Primary key

        Returns:
            Locked row or None
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by(self, **filters: Any) -> list[ModelType]:
        """Rows whose columns equal the given values."""
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data: Any) -> ModelType:
        """
        Insert a row and flush it so its id and defaults are loaded.

        Args:
            **data: Column values

        Returns:
            Created row
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity
