"""
Test promo creation, validation and discount math
"""

from decimal import Decimal

import pytest

from app.core.exceptions import NotFoundError
from app.models.enums import PromoType
from app.services.promo import PromoService, compute_grand_total
from conftest import API


def test_admin_promo_is_site_wide_and_validated(client, admin, auth_headers):
    response = client.post(
        f"{API}/promos/",
        json={"code": "spring10", "percentage": 10},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "SPRING10"
    assert data["promo_type"] == PromoType.SITE_WIDE.value
    assert data["validated"] is True


def test_instructor_promo_needs_validation(client, instructor, auth_headers):
    response = client.post(
        f"{API}/promos/",
        json={"code": "TEACH20", "percentage": 20},
        headers=auth_headers(instructor),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["promo_type"] == PromoType.INSTRUCTOR.value
    assert data["validated"] is False


def test_instructor_promo_is_capped(client, instructor, auth_headers):
    response = client.post(
        f"{API}/promos/",
        json={"code": "GREEDY", "percentage": 80},
        headers=auth_headers(instructor),
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


def test_plain_user_cannot_create_promo(client, student, auth_headers):
    response = client.post(
        f"{API}/promos/",
        json={"code": "NOPE10", "percentage": 10},
        headers=auth_headers(student),
    )

    assert response.status_code == 403


def test_duplicate_code_conflicts(client, admin, auth_headers):
    headers = auth_headers(admin)
    client.post(f"{API}/promos/", json={"code": "ONCE10", "percentage": 10}, headers=headers)

    response = client.post(
        f"{API}/promos/", json={"code": "once10", "percentage": 15}, headers=headers
    )

    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"


def test_validate_and_invalidate_are_idempotent(db, admin, instructor):
    service = PromoService(db)
    promo = service.create_promo(10, "TOGGLE", instructor.id)

    assert service.validate_promo(promo.id) == "Promo has been validated"
    assert service.validate_promo(promo.id) == "Promo already validated"
    assert service.invalidate_promo(promo.id) == "Promo has been invalidated"
    assert service.invalidate_promo(promo.id) == "Promo is already invalid"


def test_validate_missing_promo(db):
    with pytest.raises(NotFoundError):
        PromoService(db).validate_promo(999)


def test_unvalidated_promo_grants_no_discount(db, instructor):
    service = PromoService(db)
    promo = service.create_promo(25, "LATER25", instructor.id)

    assert service.get_usable_percentage(promo.id) == Decimal(0)

    service.validate_promo(promo.id)
    assert service.get_usable_percentage(promo.id) == Decimal("25")


def test_list_promos_filters_by_validation(client, db, admin, instructor, auth_headers):
    service = PromoService(db)
    service.create_promo(10, "SITE10", admin.id)
    service.create_promo(10, "INST10", instructor.id)

    response = client.get(
        f"{API}/promos/", params={"validated": False}, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    codes = [p["code"] for p in response.json()["promos"]]
    assert codes == ["INST10"]


@pytest.mark.parametrize(
    "total, percentage, expected",
    [
        (Decimal("250"), 0, Decimal("250.00")),
        (Decimal("100"), 10, Decimal("90.00")),
        (Decimal("19.99"), 15, Decimal("16.99")),
        (Decimal("50"), 100, Decimal("0.00")),
    ],
)
def test_compute_grand_total(total, percentage, expected):
    assert compute_grand_total(total, percentage) == expected
