"""
Purchase service: which products a user bought.

WHY: Purchases are recorded by the storefront after checkout and read by
the client to unlock materials. Payment itself happens elsewhere.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.exceptions import (
    ProductNotFoundError,
    PurchaseNotFoundError,
    ValidationError,
)
from muza_accounts.core.messages import get_message
from muza_accounts.dao.product import BoughtProductDAO, ProductDAO
from muza_accounts.models.product import BoughtProduct

logger = logging.getLogger(__name__)


class PurchaseService:
    """Records and lists a user's purchases."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = ProductDAO(session)
        self.purchases = BoughtProductDAO(session)

    async def list_product_ids(self, user_id: int) -> List[int]:
        return await self.purchases.list_product_ids(user_id)

    async def record_purchase(self, user_id: int, product_id: Optional[int]) -> BoughtProduct:
        """
        Record that the user bought a product.

        Duplicates are allowed: buying twice records two rows.

        Raises:
            ValidationError: If product_id is missing
            ProductNotFoundError: If the product does not exist
        """
        if product_id is None:
            raise ValidationError(message=get_message("product_id_required"))

        if await self.products.get_by_id(product_id) is None:
            raise ProductNotFoundError(
                message=get_message("product_not_found"),
                product_id=product_id,
            )

        purchase = await self.purchases.record_purchase(user_id, product_id)
        logger.info(
            "Purchase recorded",
            extra={"user_id": user_id, "product_id": product_id, "purchase_id": purchase.id},
        )
        return purchase

    async def remove_purchase(self, user_id: int, product_id: int) -> None:
        """
        Remove the user's purchase of a product.

        Raises:
            PurchaseNotFoundError: If the user never bought the product
        """
        removed = await self.purchases.remove_purchase(user_id, product_id)
        if removed == 0:
            raise PurchaseNotFoundError(
                message=get_message("purchase_not_found"),
                product_id=product_id,
            )
        logger.info(
            "Purchase removed",
            extra={"user_id": user_id, "product_id": product_id, "rows": removed},
        )

    async def request_material_resend(
        self,
        user_id: int,
        material_name: Optional[str],
        purchase_date: Optional[str],
    ) -> str:
        """
        Acknowledge a request to resend purchased material.

        No delivery pipeline exists yet; the request is only logged so
        support can act on it.
        """
        logger.info(
            "Material resend requested",
            extra={
                "user_id": user_id,
                "material_name": material_name,
                "purchase_date": purchase_date,
            },
        )
        return get_message("material_resend")
