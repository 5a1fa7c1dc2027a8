# app/services/payment_gateway.py
"""
Stripe checkout, subscription and webhook orchestration.

Checkout opens a provider session for a batch of Pending subscriptions and
records a ``CheckoutSession`` row so the webhook can find them again. The same
correlation data is also written to the Stripe customer's metadata; the webhook
falls back to it when no row matches.

Fulfillment runs in a single database transaction: the Order is created, the
subscriptions are linked and flipped to Completed, and the correlation row is
marked fulfilled. Redelivered events resolve to the existing Order.
"""

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import stripe
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import (
    CheckoutError,
    InvalidInputError,
    NotFoundError,
    ProductNotSubscribableError,
    UpstreamError,
)
from app.models.academy import Academy
from app.models.checkout_session import CheckoutSession
from app.models.enums import PaymentFrequency, PaymentType, ProductType
from app.models.order import Order
from app.schemas.common import ProductRef
from app.services.order import OrderService
from app.services.product import Product, get_product
from app.services.promo import PromoService, compute_grand_total
from app.services.subscription import SubscriptionService
from app.utils.stripe_client import StripeClient, is_resource_missing

logger = logging.getLogger(__name__)

EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_INVOICE_PAID = "invoice.paid"

MODE_PAYMENT = "payment"
MODE_SUBSCRIPTION = "subscription"


def unit_amount_cents(price, discount_percentage=0) -> int:
    """
    Per-item charge in cents: the discounted price plus the processor's
    percentage fee and fixed fee.
    """
    price = Decimal(str(price))
    discount = Decimal(str(discount_percentage or 0)) / Decimal(100)
    tax = Decimal(str(settings.stripe_tax_percentage)) / Decimal(100)
    fixed_fee = Decimal(settings.stripe_fixed_fee_cents) / Decimal(100)

    amount = price * (Decimal(1) - discount) * (Decimal(1) + tax) + fixed_fee
    return int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def fee_description() -> str:
    return (
        f"This product(s) includes tax of {settings.stripe_tax_percentage}% + "
        f"{settings.stripe_fixed_fee_cents}¢ for stripe processing."
    )


def _field(obj: Any, key: str, default=None):
    """Read ``key`` from a Stripe object or a plain mapping."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, AttributeError):
        value = getattr(obj, key, default)
    return default if value is None else value


class PaymentGatewayService:
    def __init__(self, db: Session, client: StripeClient):
        self.db = db
        self.client = client
        self.subscription_service = SubscriptionService(db)
        self.order_service = OrderService(db)
        self.promo_service = PromoService(db)

    # ----- provider calls -----

    def _call(self, action: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe {action} failed: {e}")
            raise UpstreamError(f"Payment provider error while trying to {action}: {e}")

    # ----- checkout -----

    def checkout(
        self,
        products: List[ProductRef],
        payment_type: PaymentType,
        user_id: int,
        promo_id: Optional[int] = None,
        payment_frequency: PaymentFrequency = PaymentFrequency.ONE_OFF,
    ) -> Dict[str, Any]:
        """
        Open a one-off payment session for a cart of products.

        Subscriptions are committed as Pending before the provider is called; a
        provider failure leaves them Pending and unlinked.
        """
        resolved = [get_product(self.db, ref.product_type, ref.product_id) for ref in products]
        for product in resolved:
            if isinstance(product, Academy) and product.is_subscribable:
                raise ProductNotSubscribableError("Available only for subscription")

        discount = self.promo_service.get_usable_percentage(promo_id)

        subscriptions = self.subscription_service.create_subscriptions(
            user_id, payment_frequency, products
        )
        subscription_ids = [s.id for s in subscriptions]

        line_items = [self._line_item(product, discount) for product in resolved]
        metadata = self._customer_metadata(
            resolved, subscription_ids, user_id, promo_id, payment_type
        )

        customer = self._call("create customer", self.client.create_customer, metadata)
        session = self._call(
            "create checkout session",
            self.client.create_checkout_session,
            payment_method_types=["card"],
            line_items=line_items,
            mode=MODE_PAYMENT,
            customer=_field(customer, "id"),
            success_url=settings.stripe_success_url,
            cancel_url=settings.stripe_cancel_url,
        )

        return self._record_session(
            session, customer, MODE_PAYMENT, user_id, promo_id, payment_type, subscription_ids
        )

    def subscribe(
        self,
        product: ProductRef,
        payment_frequency: PaymentFrequency,
        payment_type: PaymentType,
        user_id: int,
    ) -> Dict[str, Any]:
        """Open a recurring session for an academy sold on a validity period."""
        item = get_product(self.db, product.product_type, product.product_id)
        if not isinstance(item, Academy) or not item.is_subscribable or not item.ref:
            raise ProductNotSubscribableError("Not available for subscription")

        subscriptions = self.subscription_service.create_subscriptions(
            user_id, payment_frequency, [product]
        )
        subscription_ids = [s.id for s in subscriptions]

        metadata = self._customer_metadata(
            [item], subscription_ids, user_id, None, payment_type
        )
        customer = self._call("create customer", self.client.create_customer, metadata)

        prices = self._call("list prices", self.client.list_prices, item.ref)
        if not prices:
            raise CheckoutError(f"No price found for product {item.ref}")

        session = self._call(
            "create subscription session",
            self.client.create_checkout_session,
            payment_method_types=["card"],
            line_items=[{"price": _field(prices[0], "id"), "quantity": 1}],
            mode=MODE_SUBSCRIPTION,
            customer=_field(customer, "id"),
            success_url=settings.stripe_success_url,
            cancel_url=settings.stripe_cancel_url,
        )

        return self._record_session(
            session, customer, MODE_SUBSCRIPTION, user_id, None, payment_type, subscription_ids
        )

    def _line_item(self, product: Product, discount) -> Dict[str, Any]:
        product_data = {"name": product.name, "description": fee_description()}
        if product.image_url:
            product_data["images"] = [product.image_url]
        return {
            "price_data": {
                "currency": settings.stripe_currency,
                "product_data": product_data,
                "unit_amount": unit_amount_cents(product.price, discount),
            },
            "quantity": 1,
        }

    @staticmethod
    def _customer_metadata(
        products: List[Product],
        subscription_ids: List[int],
        user_id: int,
        promo_id: Optional[int],
        payment_type: PaymentType,
    ) -> Dict[str, str]:
        # Stripe metadata values are strings; lists travel as JSON
        items = [
            {
                "productType": (
                    ProductType.ACADEMY.value
                    if isinstance(p, Academy)
                    else ProductType.COURSE.value
                ),
                "productId": str(p.id),
                "name": p.name,
                "amount": float(p.price),
            }
            for p in products
        ]
        return {
            "products": json.dumps(items),
            "subscriptionIds": json.dumps(subscription_ids),
            "userId": str(user_id),
            "promoId": "" if promo_id is None else str(promo_id),
            "paymentType": PaymentType(payment_type).value,
        }

    @db_exception
    def _record_session(
        self,
        session,
        customer,
        mode: str,
        user_id: int,
        promo_id: Optional[int],
        payment_type: PaymentType,
        subscription_ids: List[int],
    ) -> Dict[str, Any]:
        session_id = _field(session, "id")
        url = _field(session, "url")
        if not url:
            logger.error(f"Checkout session {session_id} returned no redirect url")
            raise CheckoutError("Error checking out with stripe")

        correlation = CheckoutSession(
            provider_session_id=session_id,
            provider_customer_id=_field(customer, "id"),
            mode=mode,
            user_id=user_id,
            promo_id=promo_id,
            payment_type=PaymentType(payment_type).value,
            subscription_ids=subscription_ids,
        )
        self.db.add(correlation)
        self.db.commit()

        logger.info(
            f"Opened {mode} session {session_id} for user {user_id}, "
            f"subscriptions {subscription_ids}"
        )
        return {"id": session_id, "url": url, "subscription_ids": subscription_ids}

    # ----- catalog sync -----

    @db_exception
    def manage_product(self, academy: Academy) -> str:
        """
        Create or update the provider product behind a subscribable academy.

        Provider prices are immutable, so a new recurring price is issued on
        every call. The product id is stored on ``academy.ref``.
        """
        params = {
            "name": academy.name,
            "description": fee_description(),
            "metadata": {
                "productId": str(academy.id),
                "productType": ProductType.ACADEMY.value,
                "validity": str(academy.validity),
            },
        }
        if academy.image_url:
            params["images"] = [academy.image_url]

        existing = None
        if academy.ref:
            try:
                existing = self.client.retrieve_product(academy.ref)
            except stripe.StripeError as e:
                if not is_resource_missing(e):
                    logger.error(f"Stripe retrieve product failed: {e}")
                    raise UpstreamError(
                        f"Payment provider error while trying to retrieve product: {e}"
                    )
                logger.info(f"Stripe product {academy.ref} missing, creating a new one")

        if existing is None:
            product = self._call("create product", self.client.create_product, **params)
        else:
            product = self._call(
                "update product", self.client.update_product, academy.ref, **params
            )

        product_id = _field(product, "id")
        self._call(
            "create price",
            self.client.create_price,
            unit_amount=unit_amount_cents(academy.price),
            currency=settings.stripe_currency,
            recurring={"interval": "day", "interval_count": academy.validity},
            product=product_id,
        )

        academy.ref = product_id
        self.db.commit()
        logger.info(f"Academy {academy.id} synced to Stripe product {product_id}")
        return product_id

    # ----- webhook -----

    def webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not signature:
            raise InvalidInputError("Missing Stripe-Signature header")

        try:
            event = self.client.construct_event(payload, signature)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise InvalidInputError("Invalid webhook signature")
        except ValueError as e:
            logger.warning(f"Webhook payload could not be parsed: {e}")
            raise InvalidInputError("Invalid webhook payload")

        event_type = _field(event, "type")
        data_object = _field(_field(event, "data"), "object")
        logger.info(f"Received webhook event {event_type}")

        order = None
        if event_type == EVENT_CHECKOUT_COMPLETED:
            if _field(data_object, "mode") == MODE_PAYMENT:
                order = self._handle_checkout_completed(data_object)
        elif event_type == EVENT_INVOICE_PAID:
            order = self._handle_invoice_paid(data_object)

        return {
            "received": True,
            "event_type": event_type,
            "order_id": order.id if order else None,
        }

    def _handle_checkout_completed(self, session) -> Order:
        session_id = _field(session, "id")
        customer_id = _field(session, "customer")
        transaction_ref = _field(session, "payment_intent") or session_id

        correlation = (
            self.db.query(CheckoutSession)
            .filter(CheckoutSession.provider_session_id == session_id)
            .first()
        )
        return self._fulfill(correlation, customer_id, transaction_ref)

    def _handle_invoice_paid(self, invoice) -> Order:
        customer_id = _field(invoice, "customer")
        stripe_subscription_id = _field(invoice, "subscription")
        if stripe_subscription_id:
            stripe_subscription = self._call(
                "retrieve subscription",
                self.client.retrieve_subscription,
                stripe_subscription_id,
            )
            customer_id = _field(stripe_subscription, "customer", customer_id)

        transaction_ref = _field(invoice, "payment_intent") or _field(invoice, "id")

        correlation = (
            self.db.query(CheckoutSession)
            .filter(
                CheckoutSession.provider_customer_id == customer_id,
                CheckoutSession.mode == MODE_SUBSCRIPTION,
            )
            .order_by(CheckoutSession.id.desc())
            .first()
        )
        return self._fulfill(correlation, customer_id, transaction_ref)

    def _correlation_from_metadata(self, customer_id: str) -> Dict[str, Any]:
        customer = self._call(
            "retrieve customer", self.client.retrieve_customer, customer_id
        )
        metadata = _field(customer, "metadata", {})
        try:
            subscription_ids = json.loads(_field(metadata, "subscriptionIds", "[]"))
            user_id = int(_field(metadata, "userId"))
        except (TypeError, ValueError):
            logger.error(f"Customer {customer_id} carries no usable checkout metadata")
            raise InvalidInputError("Webhook customer has no checkout metadata")

        promo_id = _field(metadata, "promoId")
        return {
            "user_id": user_id,
            "promo_id": int(promo_id) if promo_id else None,
            "payment_type": _field(metadata, "paymentType", PaymentType.STRIPE.value),
            "subscription_ids": [int(i) for i in subscription_ids],
        }

    @db_exception
    def _fulfill(
        self,
        correlation: Optional[CheckoutSession],
        customer_id: Optional[str],
        transaction_ref: str,
    ) -> Order:
        existing = self.order_service.get_by_transaction_ref(transaction_ref)
        if existing:
            logger.info(f"Transaction {transaction_ref} already fulfilled as order {existing.id}")
            return existing

        if correlation is not None:
            if correlation.mode == MODE_PAYMENT and correlation.is_fulfilled:
                logger.info(
                    f"Session {correlation.provider_session_id} already fulfilled "
                    f"as order {correlation.order_id}"
                )
                return self.db.query(Order).filter(Order.id == correlation.order_id).first()
            data = {
                "user_id": correlation.user_id,
                "promo_id": correlation.promo_id,
                "payment_type": correlation.payment_type,
                "subscription_ids": list(correlation.subscription_ids or []),
            }
        elif customer_id:
            logger.warning(
                f"No checkout session recorded for customer {customer_id}, "
                f"falling back to customer metadata"
            )
            data = self._correlation_from_metadata(customer_id)
        else:
            raise InvalidInputError("Webhook event cannot be correlated to a checkout")

        subscriptions = self.subscription_service.get_subscriptions(data["subscription_ids"])
        if not subscriptions:
            raise NotFoundError("No subscriptions found for this payment")

        total = sum((Decimal(str(s.amount)) for s in subscriptions), Decimal(0))
        percentage = self.promo_service.get_usable_percentage(data["promo_id"])
        grand_total = compute_grand_total(total, percentage)

        order = self.order_service.create_order(
            user_id=data["user_id"],
            promo_id=data["promo_id"],
            total=total,
            transaction_ref=transaction_ref,
            payment_type=data["payment_type"],
            grand_total=grand_total,
            commit=False,
        )

        if settings.complete_subscriptions_on_payment:
            self.subscription_service.complete_subscriptions(subscriptions, order)
        else:
            for subscription in subscriptions:
                if subscription.order_id is None:
                    subscription.order_id = order.id

        if correlation is not None:
            correlation.order_id = order.id

        self.db.commit()
        self.db.refresh(order)

        logger.info(
            f"Fulfilled transaction {transaction_ref}: order {order.order_code}, "
            f"subscriptions {data['subscription_ids']}"
        )
        return order
