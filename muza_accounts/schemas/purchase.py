"""Pydantic schemas for purchase endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field


class RecordPurchaseRequest(BaseModel):
    model_config = {"populate_by_name": True}

    product_id: Optional[int] = Field(None, alias="productId", examples=[42])


class ProductIdsResponse(BaseModel):
    success: bool = True
    data: List[int]


class PurchaseResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
