from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from app.models.enums import ProductType
from app.schemas.common import ProductRef, ProductSummary


class WishlistCreate(BaseModel):
    product: ProductRef


class WishlistResponse(BaseModel):
    id: int
    user_id: int
    product_type: ProductType
    product_id: int
    product: Optional[ProductSummary] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WishlistListResponse(BaseModel):
    wishlists: List[WishlistResponse]
