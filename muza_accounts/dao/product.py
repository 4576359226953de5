"""
Product and purchase DAOs.

WHY: Purchases are read and written per user; products are only looked up
to check a purchase refers to something that exists.
"""

from typing import List
from sqlalchemy import select, and_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.dao.base import BaseDAO
from muza_accounts.models.product import Product, BoughtProduct


class ProductDAO(BaseDAO[Product]):
    """Read access to products."""

    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)


class BoughtProductDAO(BaseDAO[BoughtProduct]):
    """Data Access Object for purchase records."""

    def __init__(self, session: AsyncSession):
        super().__init__(BoughtProduct, session)

    async def list_product_ids(self, user_id: int) -> List[int]:
        """
        Product ids the user bought, most recent purchase first.

        WHY: Duplicate purchases yield duplicate ids; clients only need
        membership checks so the list is returned as stored.
        """
        result = await self.session.execute(
            select(BoughtProduct.product_id)
            .where(BoughtProduct.user_id == user_id)
            .order_by(BoughtProduct.bought_at.desc(), BoughtProduct.id.desc())
        )
        return list(result.scalars().all())

    async def record_purchase(self, user_id: int, product_id: int) -> BoughtProduct:
        return await self.create(user_id=user_id, product_id=product_id)

    async def remove_purchase(self, user_id: int, product_id: int) -> int:
        """
        Delete the user's purchase rows for a product.

        Returns:
            Number of rows deleted (0 means nothing was bought)
        """
        result = await self.session.execute(
            delete(BoughtProduct).where(
                and_(
                    BoughtProduct.user_id == user_id,
                    BoughtProduct.product_id == product_id,
                )
            )
        )
        return result.rowcount

    async def delete_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(BoughtProduct).where(BoughtProduct.user_id == user_id)
        )
        return result.rowcount
