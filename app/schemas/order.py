# app/schemas/order.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PaymentType
from app.schemas.common import UserSummary


class PromoInOrderResponse(BaseModel):
    id: int
    code: str
    percentage: Decimal
    promo_type: str

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    promo_id: Optional[int] = None
    total: Decimal = Field(..., ge=0)
    transaction_ref: str = Field(..., min_length=1, max_length=255)
    payment_type: PaymentType
    grand_total: Decimal = Field(..., ge=0)


class OrderResponse(BaseModel):
    id: int
    order_code: str
    user_id: int
    promo_id: Optional[int] = None
    total: Decimal
    grand_total: Decimal
    transaction_ref: str
    payment_type: PaymentType
    created_at: datetime

    user: Optional[UserSummary] = None
    promo: Optional[PromoInOrderResponse] = None

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    total: int
    page: int
    size: int
    total_pages: int
