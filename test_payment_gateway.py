"""
Test Stripe checkout, subscribe, product sync and webhook fulfillment
"""

import json
from decimal import Decimal

import pytest

from app.core.config import settings
from app.core.exceptions import ProductNotSubscribableError
from app.models.checkout_session import CheckoutSession
from app.models.enums import PaymentFrequency, PaymentType, SubscriptionStatus
from app.models.order import Order
from app.models.subscription import Subscription
from app.schemas.common import ProductRef
from app.services.order import OrderService
from app.services.payment_gateway import PaymentGatewayService, unit_amount_cents
from app.services.promo import PromoService
from conftest import API, VALID_SIGNATURE


def _refs(*products):
    return [{"product_type": type(p).__name__, "product_id": p.id} for p in products]


def _post_event(client, event, signature=VALID_SIGNATURE):
    return client.post(
        f"{API}/processors/stripe/webhook",
        content=json.dumps(event),
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


def _session_completed(session_id, customer_id, payment_intent="pi_test_1", mode="payment"):
    return {
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "mode": mode,
                "customer": customer_id,
                "payment_intent": payment_intent,
            }
        },
    }


# ==================== Pricing ====================


@pytest.mark.parametrize(
    "price, discount, expected",
    [
        (100, 0, 10320),
        (100, 10, 9291),
        (50, 0, 5175),
        (200, 0, 20610),
        (0, 0, 30),
    ],
)
def test_unit_amount_cents(price, discount, expected):
    assert unit_amount_cents(price, discount) == expected


# ==================== Checkout ====================


def test_checkout_creates_pending_subscriptions_and_session(
    client, db, fake_stripe, student, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, price=50)
    academy = make_academy(instructor, price=200, validity=0)

    response = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course, academy)},
        headers=auth_headers(student),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["url"].startswith("https://checkout.stripe.test/")
    assert len(data["subscription_ids"]) == 2

    subscriptions = db.query(Subscription).order_by(Subscription.id).all()
    assert [s.status for s in subscriptions] == ["Pending", "Pending"]
    assert [s.amount for s in subscriptions] == [Decimal("50"), Decimal("200")]

    params = fake_stripe.sessions[0]["params"]
    assert params["mode"] == "payment"
    amounts = [item["price_data"]["unit_amount"] for item in params["line_items"]]
    assert amounts == [5175, 20610]

    metadata = fake_stripe.customers[params["customer"]]["metadata"]
    assert json.loads(metadata["subscriptionIds"]) == data["subscription_ids"]
    assert metadata["userId"] == str(student.id)
    assert metadata["paymentType"] == "Stripe"

    correlation = db.query(CheckoutSession).one()
    assert correlation.provider_session_id == data["id"]
    assert correlation.subscription_ids == data["subscription_ids"]


def test_checkout_applies_only_validated_promo(
    db, fake_stripe, admin, instructor, student, make_course
):
    course = make_course(instructor, price=100)
    promo_service = PromoService(db)
    pending = promo_service.create_promo(10, "PENDING10", instructor.id)
    active = promo_service.create_promo(10, "ACTIVE10", admin.id)
    gateway = PaymentGatewayService(db, fake_stripe)
    ref = [ProductRef(product_type="Course", product_id=course.id)]

    gateway.checkout(ref, PaymentType.STRIPE, student.id, promo_id=pending.id)
    gateway.checkout(ref, PaymentType.STRIPE, student.id, promo_id=active.id)

    first, second = (s["params"]["line_items"][0] for s in fake_stripe.sessions)
    assert first["price_data"]["unit_amount"] == 10320
    assert second["price_data"]["unit_amount"] == 9291


def test_checkout_rejects_subscription_only_academy(
    client, db, student, instructor, make_academy, auth_headers
):
    academy = make_academy(instructor, validity=30)

    response = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(academy)},
        headers=auth_headers(student),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Available only for subscription"
    assert db.query(Subscription).count() == 0


def test_checkout_without_session_url_fails(
    client, db, fake_stripe, student, instructor, make_course, auth_headers
):
    fake_stripe.return_session_url = False
    course = make_course(instructor)

    response = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course)},
        headers=auth_headers(student),
    )

    assert response.status_code == 502
    assert response.json()["kind"] == "upstream"
    # Subscriptions stay Pending with no order attached
    assert [s.status for s in db.query(Subscription).all()] == ["Pending"]
    assert db.query(CheckoutSession).count() == 0


def test_checkout_requires_authentication(client, instructor, make_course):
    course = make_course(instructor)

    response = client.post(
        f"{API}/processors/stripe/checkout", json={"products": _refs(course)}
    )

    assert response.status_code == 401


# ==================== Subscribe ====================


def test_subscribe_uses_latest_price(db, fake_stripe, student, instructor, make_academy):
    academy = make_academy(instructor, price=100, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)
    gateway.manage_product(academy)

    result = gateway.subscribe(
        ProductRef(product_type="Academy", product_id=academy.id),
        PaymentFrequency.MONTH,
        PaymentType.STRIPE,
        student.id,
    )

    params = fake_stripe.sessions[0]["params"]
    assert params["mode"] == "subscription"
    assert params["line_items"] == [{"price": fake_stripe.prices[-1]["id"], "quantity": 1}]
    assert len(result["subscription_ids"]) == 1
    assert db.query(CheckoutSession).one().mode == "subscription"


def test_subscribe_rejects_one_off_products(
    db, fake_stripe, student, instructor, make_course, make_academy
):
    gateway = PaymentGatewayService(db, fake_stripe)
    course = make_course(instructor)
    one_off = make_academy(instructor, validity=0)

    for product in (course, one_off):
        with pytest.raises(ProductNotSubscribableError):
            gateway.subscribe(
                ProductRef(product_type=type(product).__name__, product_id=product.id),
                PaymentFrequency.MONTH,
                PaymentType.STRIPE,
                student.id,
            )
    assert fake_stripe.calls == []


def test_subscribe_requires_synced_product(db, fake_stripe, student, instructor, make_academy):
    academy = make_academy(instructor, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)

    with pytest.raises(ProductNotSubscribableError):
        gateway.subscribe(
            ProductRef(product_type="Academy", product_id=academy.id),
            PaymentFrequency.MONTH,
            PaymentType.STRIPE,
            student.id,
        )

    assert academy.ref is None
    assert db.query(Subscription).count() == 0
    assert fake_stripe.calls == []


# ==================== Product sync ====================


def test_manage_product_creates_once_then_updates(db, fake_stripe, instructor, make_academy):
    academy = make_academy(instructor, price=100, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)

    first = gateway.manage_product(academy)
    second = gateway.manage_product(academy)

    assert first == second == academy.ref
    assert len(fake_stripe.products) == 1
    assert fake_stripe.call_names().count("create_product") == 1
    assert fake_stripe.call_names().count("update_product") == 1
    # Prices are immutable, so every sync issues a new one
    assert len(fake_stripe.prices) == 2
    assert fake_stripe.prices[-1]["recurring"] == {"interval": "day", "interval_count": 30}
    assert fake_stripe.prices[-1]["unit_amount"] == 10320


def test_manage_product_recreates_missing_product(db, fake_stripe, instructor, make_academy):
    academy = make_academy(instructor, validity=30, ref="prod_deleted")

    product_id = PaymentGatewayService(db, fake_stripe).manage_product(academy)

    assert product_id != "prod_deleted"
    assert academy.ref == product_id
    assert "update_product" not in fake_stripe.call_names()


# ==================== Webhook ====================


def test_webhook_scenario_creates_single_order(
    client, db, fake_stripe, student, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, price=50)
    academy = make_academy(instructor, price=200)
    checkout = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course, academy)},
        headers=auth_headers(student),
    ).json()
    customer_id = fake_stripe.sessions[0]["customer"]

    response = _post_event(client, _session_completed(checkout["id"], customer_id))

    assert response.status_code == 200
    body = response.json()
    assert body["received"] is True
    order = db.query(Order).one()
    assert body["order_id"] == order.id
    assert order.total == Decimal("250")
    assert order.grand_total == Decimal("250")
    assert order.transaction_ref == "pi_test_1"
    assert order.user_id == student.id

    subscriptions = db.query(Subscription).all()
    assert {s.order_id for s in subscriptions} == {order.id}
    assert {s.status for s in subscriptions} == {SubscriptionStatus.COMPLETED.value}

    db.refresh(student)
    assert course in student.subscribed_courses
    assert academy in student.subscribed_academies


def test_duplicate_webhook_is_idempotent(
    client, db, fake_stripe, student, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    checkout = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course)},
        headers=auth_headers(student),
    ).json()
    event = _session_completed(checkout["id"], fake_stripe.sessions[0]["customer"])

    first = _post_event(client, event).json()
    second = _post_event(client, event).json()

    assert first["order_id"] == second["order_id"]
    assert db.query(Order).count() == 1


def test_webhook_applies_validated_promo(
    client, db, fake_stripe, admin, student, instructor, make_course, auth_headers
):
    course = make_course(instructor, price=100)
    promo = PromoService(db).create_promo(10, "TENOFF", admin.id)
    checkout = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course), "promo_id": promo.id},
        headers=auth_headers(student),
    ).json()

    _post_event(client, _session_completed(checkout["id"], fake_stripe.sessions[0]["customer"]))

    order = db.query(Order).one()
    assert order.promo_id == promo.id
    assert order.total == Decimal("100")
    assert order.grand_total == Decimal("90")


def test_webhook_falls_back_to_customer_metadata(
    client, db, fake_stripe, student, instructor, make_course, auth_headers
):
    course = make_course(instructor, price=50)
    checkout = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course)},
        headers=auth_headers(student),
    ).json()
    db.query(CheckoutSession).delete()
    db.commit()

    response = _post_event(
        client, _session_completed("cs_unknown", fake_stripe.sessions[0]["customer"])
    )

    assert response.status_code == 200
    order = db.query(Order).one()
    assert order.user_id == student.id
    assert [s.order_id for s in db.query(Subscription).all()] == [order.id]
    assert checkout["subscription_ids"] == [s.id for s in db.query(Subscription).all()]


def test_invoice_paid_fulfills_recurring_subscription(
    client, db, fake_stripe, student, instructor, make_academy
):
    academy = make_academy(instructor, price=100, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)
    gateway.manage_product(academy)
    gateway.subscribe(
        ProductRef(product_type="Academy", product_id=academy.id),
        PaymentFrequency.MONTH,
        PaymentType.STRIPE,
        student.id,
    )
    customer_id = fake_stripe.sessions[0]["customer"]
    fake_stripe.subscriptions["sub_1"] = {"id": "sub_1", "customer": customer_id}

    response = _post_event(
        client,
        {
            "id": "evt_2",
            "type": "invoice.paid",
            "data": {
                "object": {
                    "id": "in_1",
                    "customer": customer_id,
                    "subscription": "sub_1",
                    "payment_intent": "pi_invoice_1",
                }
            },
        },
    )

    assert response.status_code == 200
    order = db.query(Order).one()
    assert order.transaction_ref == "pi_invoice_1"
    assert db.query(Subscription).one().status == SubscriptionStatus.COMPLETED.value


def test_subscription_mode_session_completed_is_ignored(
    client, db, fake_stripe, student, instructor, make_academy
):
    academy = make_academy(instructor, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)
    gateway.manage_product(academy)
    result = gateway.subscribe(
        ProductRef(product_type="Academy", product_id=academy.id),
        PaymentFrequency.MONTH,
        PaymentType.STRIPE,
        student.id,
    )

    response = _post_event(
        client,
        _session_completed(result["id"], fake_stripe.sessions[0]["customer"], mode="subscription"),
    )

    assert response.status_code == 200
    assert response.json()["order_id"] is None
    assert db.query(Order).count() == 0


def test_unknown_event_is_acknowledged(client, db):
    response = _post_event(
        client, {"id": "evt_3", "type": "customer.created", "data": {"object": {}}}
    )

    assert response.status_code == 200
    assert response.json() == {
        "received": True,
        "event_type": "customer.created",
        "order_id": None,
    }
    assert db.query(Order).count() == 0


def test_webhook_rejects_bad_signature(client):
    response = _post_event(
        client, {"type": "checkout.session.completed"}, signature="t=1,v1=forged"
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


def test_subscriptions_stay_pending_when_completion_disabled(
    client, db, fake_stripe, student, instructor, make_course, auth_headers, monkeypatch
):
    monkeypatch.setattr(settings, "complete_subscriptions_on_payment", False)
    course = make_course(instructor)
    checkout = client.post(
        f"{API}/processors/stripe/checkout",
        json={"products": _refs(course)},
        headers=auth_headers(student),
    ).json()

    _post_event(client, _session_completed(checkout["id"], fake_stripe.sessions[0]["customer"]))

    order = db.query(Order).one()
    subscription = db.query(Subscription).one()
    assert subscription.order_id == order.id
    assert subscription.status == SubscriptionStatus.PENDING.value


def _invoice_paid(customer_id, payment_intent="pi_invoice_1"):
    return {
        "id": "evt_invoice",
        "type": "invoice.paid",
        "data": {
            "object": {
                "id": "in_1",
                "customer": customer_id,
                "subscription": "sub_1",
                "payment_intent": payment_intent,
            }
        },
    }


def test_racing_invoice_deliveries_resolve_to_one_order(
    client, db, fake_stripe, student, instructor, make_academy, monkeypatch
):
    academy = make_academy(instructor, price=100, validity=30)
    gateway = PaymentGatewayService(db, fake_stripe)
    gateway.manage_product(academy)
    gateway.subscribe(
        ProductRef(product_type="Academy", product_id=academy.id),
        PaymentFrequency.MONTH,
        PaymentType.STRIPE,
        student.id,
    )
    customer_id = fake_stripe.sessions[0]["customer"]
    fake_stripe.subscriptions["sub_1"] = {"id": "sub_1", "customer": customer_id}
    event = _invoice_paid(customer_id)

    first = _post_event(client, event)
    assert first.status_code == 200

    # A concurrent delivery that missed the lookup hits the unique transaction_ref
    monkeypatch.setattr(OrderService, "get_by_transaction_ref", lambda self, ref: None)
    raced = _post_event(client, event)
    assert raced.status_code == 409
    assert raced.json()["kind"] == "conflict"

    # Stripe retries the conflicting delivery
    monkeypatch.undo()
    retried = _post_event(client, event)

    assert retried.status_code == 200
    assert retried.json()["order_id"] == first.json()["order_id"]
    assert db.query(Order).count() == 1
    assert db.query(Subscription).one().status == SubscriptionStatus.COMPLETED.value
