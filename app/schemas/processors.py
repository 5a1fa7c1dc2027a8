# app/schemas/processors.py
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.enums import PaymentFrequency, PaymentType
from app.schemas.common import ProductRef


class CheckoutRequest(BaseModel):
    products: List[ProductRef] = Field(..., min_length=1)
    payment_type: PaymentType = PaymentType.STRIPE
    payment_frequency: PaymentFrequency = PaymentFrequency.ONE_OFF
    promo_id: Optional[int] = None


class SubscribeRequest(BaseModel):
    product: ProductRef
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTH
    payment_type: PaymentType = PaymentType.STRIPE


class CheckoutSessionResponse(BaseModel):
    id: str
    url: str
    subscription_ids: List[int]


class WebhookResponse(BaseModel):
    received: bool = True
    event_type: Optional[str] = None
    order_id: Optional[int] = None
