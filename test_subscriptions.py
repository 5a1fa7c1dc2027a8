"""
Test subscription creation, listing and deletion
"""

from datetime import timedelta

import pytest

from app.core.exceptions import ConflictError
from app.models.enums import PaymentFrequency, SubscriptionStatus
from app.models.order import Order
from app.models.subscription import Subscription
from app.schemas.common import ProductRef
from app.services.subscription import SubscriptionService
from conftest import API


def _refs(*products):
    return [
        {"product_type": type(p).__name__, "product_id": p.id}
        for p in products
    ]


def test_create_subscriptions_one_per_product(
    client, student, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, price=50)
    academy = make_academy(instructor, price=200)

    response = client.post(
        f"{API}/subscriptions/",
        json={"payment_frequency": "Month", "products": _refs(course, academy)},
        headers=auth_headers(student),
    )

    assert response.status_code == 201
    data = response.json()
    assert len(data) == 2
    assert {s["status"] for s in data} == {"Pending"}
    assert [float(s["amount"]) for s in data] == [50.0, 200.0]
    assert [s["product_type"] for s in data] == ["Course", "Academy"]


@pytest.mark.parametrize(
    "frequency, days",
    [
        (PaymentFrequency.MONTH, 30),
        (PaymentFrequency.YEAR, 365),
        (PaymentFrequency.ONE_OFF, 36500),
    ],
)
def test_expiry_follows_payment_frequency(db, student, instructor, make_course, frequency, days):
    course = make_course(instructor)
    service = SubscriptionService(db)

    [subscription] = service.create_subscriptions(
        student.id, frequency, [ProductRef(product_type="Course", product_id=course.id)]
    )

    assert subscription.expires_at - subscription.created_at == timedelta(days=days)


def test_missing_product_creates_nothing(
    client, db, student, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    products = _refs(course) + [{"product_type": "Academy", "product_id": 999}]

    response = client.post(
        f"{API}/subscriptions/",
        json={"payment_frequency": "Month", "products": products},
        headers=auth_headers(student),
    )

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"
    assert db.query(Subscription).count() == 0


def test_delete_pending_subscription(
    client, db, student, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    [subscription] = SubscriptionService(db).create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Course", product_id=course.id)]
    )

    response = client.delete(
        f"{API}/subscriptions/{subscription.id}", headers=auth_headers(student)
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Subscription successfully deleted"
    assert db.query(Subscription).count() == 0


def test_completed_subscription_cannot_be_deleted(db, student, instructor, make_course):
    course = make_course(instructor)
    service = SubscriptionService(db)
    [subscription] = service.create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Course", product_id=course.id)]
    )
    subscription.status = SubscriptionStatus.COMPLETED.value
    db.commit()

    with pytest.raises(ConflictError):
        service.delete_subscription(subscription.id, student.id)

    assert db.query(Subscription).count() == 1


def test_other_users_cannot_delete(
    client, db, student, make_user, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    [subscription] = SubscriptionService(db).create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Course", product_id=course.id)]
    )
    intruder = make_user()

    response = client.delete(
        f"{API}/subscriptions/{subscription.id}", headers=auth_headers(intruder)
    )

    assert response.status_code == 401
    assert response.json()["kind"] == "unauthorized"


def test_listing_is_scoped_to_owner_unless_admin(
    client, db, admin, student, make_user, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    other = make_user()
    service = SubscriptionService(db)
    ref = [ProductRef(product_type="Course", product_id=course.id)]
    service.create_subscriptions(student.id, PaymentFrequency.MONTH, ref)
    service.create_subscriptions(other.id, PaymentFrequency.YEAR, ref)

    own = client.get(f"{API}/subscriptions/", headers=auth_headers(student)).json()
    everything = client.get(f"{API}/subscriptions/", headers=auth_headers(admin)).json()

    assert own["total"] == 1
    assert own["subscriptions"][0]["user_id"] == student.id
    assert everything["total"] == 2


def test_has_access_requires_completed_and_unexpired(db, student, instructor, make_course):
    course = make_course(instructor)
    service = SubscriptionService(db)
    [subscription] = service.create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Course", product_id=course.id)]
    )

    assert service.has_access(student.id, course) is False

    subscription.status = SubscriptionStatus.COMPLETED.value
    db.commit()
    assert service.has_access(student.id, course) is True

    subscription.expires_at = subscription.created_at - timedelta(days=1)
    db.commit()
    assert service.has_access(student.id, course) is False


def _complete(db, service, user, product):
    [subscription] = service.create_subscriptions(
        user.id,
        PaymentFrequency.MONTH,
        [ProductRef(product_type=type(product).__name__, product_id=product.id)],
    )
    order = Order(
        user_id=user.id,
        order_code=f"CODE{subscription.id:06d}",
        transaction_ref=f"pi_complete_{subscription.id}",
        payment_type="Stripe",
        total=product.price,
        grand_total=product.price,
    )
    db.add(order)
    db.flush()
    service.complete_subscriptions([subscription], order)
    db.commit()
    return subscription


def test_deleting_abandoned_pending_keeps_completed_access(
    client, db, student, instructor, make_course, auth_headers
):
    course = make_course(instructor)
    service = SubscriptionService(db)
    _complete(db, service, student, course)
    [abandoned] = service.create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Course", product_id=course.id)]
    )

    response = client.delete(
        f"{API}/subscriptions/{abandoned.id}", headers=auth_headers(student)
    )

    assert response.status_code == 200
    db.refresh(student)
    assert course in student.subscribed_courses
    assert service.has_access(student.id, course) is True

    products = client.get(f"{API}/users/me/products", headers=auth_headers(student)).json()
    assert [c["id"] for c in products["courses"]] == [course.id]


def test_delete_pulls_product_from_user_list(
    client, db, student, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor)
    academy = make_academy(instructor)
    service = SubscriptionService(db)
    _complete(db, service, student, course)
    [pending] = service.create_subscriptions(
        student.id, PaymentFrequency.MONTH, [ProductRef(product_type="Academy", product_id=academy.id)]
    )
    # Listed without a completed purchase behind it
    student.subscribed_academies.append(academy)
    db.commit()
    headers = auth_headers(student)

    before = client.get(f"{API}/users/me/products", headers=headers).json()
    client.delete(f"{API}/subscriptions/{pending.id}", headers=headers)
    after = client.get(f"{API}/users/me/products", headers=headers).json()

    assert [a["id"] for a in before["academies"]] == [academy.id]
    assert after["academies"] == []
    assert [c["id"] for c in after["courses"]] == [course.id]
