# app/schemas/subscription.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PaymentFrequency, ProductType, SubscriptionStatus
from app.schemas.common import ProductRef, ProductSummary, UserSummary


# --- Nested Schemas for Rich Responses ---
class OrderInSubscriptionResponse(BaseModel):
    id: int
    order_code: str
    transaction_ref: str
    payment_type: str

    model_config = ConfigDict(from_attributes=True)


# --- Main Schemas ---


class SubscriptionCreate(BaseModel):
    payment_frequency: PaymentFrequency = Field(..., examples=["Month"])
    products: List[ProductRef] = Field(..., min_length=1)
    order_id: Optional[int] = None


class SubscriptionResponse(BaseModel):
    id: int
    user_id: int
    product_type: ProductType
    product_id: int
    status: SubscriptionStatus
    payment_frequency: PaymentFrequency
    amount: Decimal
    created_at: datetime
    expires_at: datetime
    order_id: Optional[int] = None

    # Include the nested objects for a complete response
    user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None
    order: Optional[OrderInSubscriptionResponse] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
    total: int
    page: int
    size: int
    total_pages: int
