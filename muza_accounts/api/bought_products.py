"""
Purchased products API endpoints.

WHY: The client needs the ids of bought products to unlock materials, and
the storefront records purchases after checkout.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.deps import get_current_user
from muza_accounts.core.messages import get_message
from muza_accounts.db.session import get_db
from muza_accounts.models.user import User
from muza_accounts.schemas.purchase import (
    ProductIdsResponse,
    PurchaseResponse,
    RecordPurchaseRequest,
)
from muza_accounts.services.purchase import PurchaseService


router = APIRouter(prefix="/bought-products", tags=["bought-products"])


@router.get(
    "/ids",
    response_model=ProductIdsResponse,
    summary="List purchased product ids",
    description="Most recent purchase first",
)
async def list_bought_product_ids(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProductIdsResponse:
    ids = await PurchaseService(db).list_product_ids(current_user.id)
    return ProductIdsResponse(data=ids)


@router.post(
    "",
    response_model=PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a purchase",
)
async def record_purchase(
    payload: RecordPurchaseRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PurchaseResponse:
    await PurchaseService(db).record_purchase(current_user.id, payload.product_id)
    return PurchaseResponse(message=get_message("purchase_recorded"))


@router.delete(
    "/{product_id}",
    response_model=PurchaseResponse,
    summary="Remove a purchase",
)
async def remove_purchase(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PurchaseResponse:
    await PurchaseService(db).remove_purchase(current_user.id, product_id)
    return PurchaseResponse(message=get_message("purchase_removed"))
