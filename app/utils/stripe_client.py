"""
Thin wrapper over the official ``stripe`` SDK.

Services receive an instance of this class instead of calling the SDK's
module-level API directly, so tests can swap in a fake client.
"""

import logging
from typing import Any, Dict, List, Optional

import stripe

from app.core.config import settings

logger = logging.getLogger(__name__)

# Error code Stripe returns when a referenced object does not exist
RESOURCE_MISSING = "resource_missing"


def is_resource_missing(error: Exception) -> bool:
    return isinstance(error, stripe.InvalidRequestError) and (
        getattr(error, "code", None) == RESOURCE_MISSING
    )


class StripeClient:
    def __init__(
        self, api_key: Optional[str] = None, endpoint_secret: Optional[str] = None
    ):
        self.api_key = api_key or settings.stripe_secret_key
        self.endpoint_secret = endpoint_secret or settings.stripe_endpoint_secret

    # ----- customers -----

    def create_customer(self, metadata: Dict[str, str]):
        return stripe.Customer.create(metadata=metadata, api_key=self.api_key)

    def retrieve_customer(self, customer_id: str):
        return stripe.Customer.retrieve(customer_id, api_key=self.api_key)

    # ----- checkout -----

    def create_checkout_session(self, **params):
        return stripe.checkout.Session.create(api_key=self.api_key, **params)

    def retrieve_subscription(self, subscription_id: str):
        return stripe.Subscription.retrieve(subscription_id, api_key=self.api_key)

    # ----- catalog -----

    def retrieve_product(self, product_id: str):
        return stripe.Product.retrieve(product_id, api_key=self.api_key)

    def create_product(self, **params):
        return stripe.Product.create(api_key=self.api_key, **params)

    def update_product(self, product_id: str, **params):
        return stripe.Product.modify(product_id, api_key=self.api_key, **params)

    def create_price(self, **params):
        return stripe.Price.create(api_key=self.api_key, **params)

    def list_prices(self, product_id: str) -> List[Any]:
        # Newest first; prices are immutable so the first one is current
        prices = stripe.Price.list(
            product=product_id, active=True, limit=1, api_key=self.api_key
        )
        return list(prices.get("data", []))

    # ----- webhooks -----

    def construct_event(self, payload: bytes, signature: str):
        return stripe.Webhook.construct_event(payload, signature, self.endpoint_secret)
