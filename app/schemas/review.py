from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ProductType
from app.schemas.common import ProductRef, UserSummary


class ReviewCreate(BaseModel):
    product: ProductRef
    star_rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    product_type: ProductType
    product_id: int
    star_rating: int
    comment: str
    approved: bool
    deleted: bool
    created_at: datetime
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    total: int
    page: int
    size: int
    total_pages: int
