# app/schemas/common.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ProductType


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    status: int
    message: str
    kind: Optional[str] = None


class ProductRef(BaseModel):
    """Reference to a purchasable product: a Course or an Academy."""

    product_type: ProductType = Field(..., examples=["Course"])
    product_id: int = Field(..., gt=0, examples=[1])


class UserSummary(BaseModel):
    id: int
    username: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    id: int
    name: str
    price: float
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int
    page: int
    size: int
    total_pages: int


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
