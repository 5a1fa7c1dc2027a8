# app/routers/processors.py
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.dependencies import get_current_user, get_payment_gateway
from app.core.limiter import limiter
from app.models.user import User
from app.schemas.processors import (
    CheckoutRequest,
    CheckoutSessionResponse,
    SubscribeRequest,
    WebhookResponse,
)
from app.services.payment_gateway import PaymentGatewayService

router = APIRouter(
    prefix="/processors",
    tags=["Payment Processors"],
)


@router.post("/stripe/checkout", response_model=CheckoutSessionResponse)
@limiter.limit(settings.checkout_rate_limit)
def stripe_checkout(
    request: Request,
    checkout_in: CheckoutRequest,
    gateway: PaymentGatewayService = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_user),
):
    """
    Open a Stripe checkout session for one-off products.

    Creates a Pending subscription per product and returns the hosted
    payment page URL.
    """
    return gateway.checkout(
        checkout_in.products,
        checkout_in.payment_type,
        current_user.id,
        promo_id=checkout_in.promo_id,
        payment_frequency=checkout_in.payment_frequency,
    )


@router.post("/stripe/subscribe", response_model=CheckoutSessionResponse)
@limiter.limit(settings.checkout_rate_limit)
def stripe_subscribe(
    request: Request,
    subscribe_in: SubscribeRequest,
    gateway: PaymentGatewayService = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_user),
):
    """Open a recurring Stripe session for a subscribable academy."""
    return gateway.subscribe(
        subscribe_in.product,
        subscribe_in.payment_frequency,
        subscribe_in.payment_type,
        current_user.id,
    )


@router.post("/stripe/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    gateway: PaymentGatewayService = Depends(get_payment_gateway),
):
    """
    Receive Stripe events. The raw body is needed for signature verification.
    Unhandled event types are acknowledged without side effects.
    """
    payload = await request.body()
    return await run_in_threadpool(gateway.webhook, payload, stripe_signature)
