"""
Test courses and academies: ownership, moderation and the duration invariant
"""

import pytest

from app.core.exceptions import ConflictError
from app.models.academy import Academy
from app.models.course import Course
from app.models.enums import PaymentFrequency
from app.schemas.common import ProductRef
from app.services.subscription import SubscriptionService
from conftest import API


def _academy_payload(**overrides):
    payload = {
        "name": "Data Academy",
        "description": "Everything data",
        "overview": "Overview",
        "difficulty": "Intermediate",
        "price": 150,
        "validity": 0,
        "tags": ["python", "Data"],
        "courses": [],
    }
    payload.update(overrides)
    return payload


def test_create_academy_sums_course_durations(
    client, instructor, make_user, make_course, auth_headers
):
    first = make_course(instructor, duration=60)
    second = make_course(instructor, duration=45)
    foreign = make_course(make_user(role="instructor"), duration=500)

    response = client.post(
        f"{API}/academies/",
        json=_academy_payload(courses=[first.id, second.id, foreign.id, 999]),
        headers=auth_headers(instructor),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["academy"]["duration"] == 105
    assert sorted(c["id"] for c in data["academy"]["courses"]) == [first.id, second.id]
    assert data["courses_not_found"] == [foreign.id, 999]
    assert sorted(t["name"] for t in data["academy"]["tags"]) == ["DATA", "PYTHON"]


def test_subscribable_academy_is_published_to_stripe(
    client, db, fake_stripe, instructor, auth_headers
):
    response = client.post(
        f"{API}/academies/",
        json=_academy_payload(validity=30),
        headers=auth_headers(instructor),
    )

    assert response.status_code == 201
    academy = db.query(Academy).one()
    assert academy.ref == "prod_1"
    assert fake_stripe.call_names() == ["create_product", "create_price"]


def test_one_off_academy_is_not_published(client, fake_stripe, instructor, auth_headers):
    client.post(f"{API}/academies/", json=_academy_payload(), headers=auth_headers(instructor))

    assert fake_stripe.calls == []


def test_validity_beyond_a_year_is_rejected(client, fake_stripe, instructor, auth_headers):
    response = client.post(
        f"{API}/academies/",
        json=_academy_payload(validity=366),
        headers=auth_headers(instructor),
    )

    assert response.status_code == 422
    assert fake_stripe.calls == []


def test_add_and_remove_course_keep_duration(
    client, instructor, make_course, make_academy, auth_headers
):
    first = make_course(instructor, duration=30)
    second = make_course(instructor, duration=90)
    academy = make_academy(instructor, courses=[first])
    headers = auth_headers(instructor)

    added = client.post(
        f"{API}/academies/{academy.id}/courses/{second.id}", headers=headers
    ).json()
    removed = client.delete(
        f"{API}/academies/{academy.id}/courses/{first.id}", headers=headers
    ).json()

    assert added["duration"] == 120
    assert removed["duration"] == 90


def test_course_duration_change_updates_academies(
    client, db, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, duration=30)
    other = make_course(instructor, duration=10)
    academy = make_academy(instructor, courses=[course, other])

    response = client.put(
        f"{API}/courses/{course.id}", json={"duration": 100}, headers=auth_headers(instructor)
    )

    assert response.status_code == 200
    db.refresh(academy)
    assert academy.duration == 110


def test_deleting_course_detaches_it_from_academies(
    client, db, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, duration=30)
    other = make_course(instructor, duration=10)
    academy = make_academy(instructor, courses=[course, other])

    response = client.delete(f"{API}/courses/{course.id}", headers=auth_headers(instructor))

    assert response.status_code == 200
    db.refresh(academy)
    assert [c.id for c in academy.courses] == [other.id]
    assert academy.duration == 10
    assert db.query(Course).filter(Course.id == course.id).first() is None


def test_course_with_subscriptions_cannot_be_deleted(
    db, student, instructor, make_course
):
    from app.services.course import CourseService

    course = make_course(instructor)
    SubscriptionService(db).create_subscriptions(
        student.id, PaymentFrequency.ONE_OFF, [ProductRef(product_type="Course", product_id=course.id)]
    )

    with pytest.raises(ConflictError):
        CourseService(db).delete_course(course.id, instructor)


def test_only_owner_can_update_course(client, instructor, make_user, make_course, auth_headers):
    course = make_course(instructor)
    other = make_user(role="instructor")

    response = client.put(
        f"{API}/courses/{course.id}", json={"price": 1}, headers=auth_headers(other)
    )

    assert response.status_code == 401


def test_unapproved_courses_hidden_from_public_listing(
    client, admin, instructor, make_course, auth_headers
):
    make_course(instructor, name="Visible")
    make_course(instructor, name="Hidden", approved=False)

    public = client.get(f"{API}/courses/").json()
    for_admin = client.get(f"{API}/courses/", headers=auth_headers(admin)).json()

    assert [c["name"] for c in public["courses"]] == ["Visible"]
    assert for_admin["total"] == 2


def test_approve_is_idempotent(client, admin, instructor, make_course, auth_headers):
    course = make_course(instructor, approved=False)
    headers = auth_headers(admin)

    first = client.post(f"{API}/courses/{course.id}/approve", headers=headers).json()
    second = client.post(f"{API}/courses/{course.id}/approve", headers=headers).json()

    assert first["message"] == "Course approved"
    assert second["message"] == "Course already approved"


def test_soft_deleted_academy_disappears(client, instructor, make_academy, auth_headers):
    academy = make_academy(instructor)

    response = client.delete(f"{API}/academies/{academy.id}", headers=auth_headers(instructor))

    assert response.status_code == 200
    assert client.get(f"{API}/academies/{academy.id}").status_code == 404
    assert client.get(f"{API}/academies/").json()["total"] == 0
