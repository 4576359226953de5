"""
Base Data Access Object (DAO) class.

WHY: Services talk to DAOs, never to the session directly, so account rules
can be tested against a real database without HTTP in the way.
"""

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Primary-key CRUD shared by the user, product and verification code DAOs.

    All writes only flush; the request dependency owns commit and rollback.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Insert a row and return it with server defaults loaded.

        Raises:
            IntegrityError: If a unique constraint is violated
        """
        row = self.model(**kwargs)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        stmt = select(self.model).where(self.model.id == id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """
        Apply column values to one row.

        WHY: Going through an UPDATE statement fires the updated_at onupdate
        hook, so callers never bump timestamps by hand.

        Returns:
            The refreshed row, or None when the id is unknown
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .returning(self.model)
        )
        row = (await self.session.execute(stmt)).scalar_one_or_none()
        if row is not None:
            await self.session.refresh(row)
        return row

    async def delete(self, id: int) -> bool:
        """Delete by primary key; False when nothing matched."""
        result = await self.session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
