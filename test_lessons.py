"""
Test lessons: ownership, ordering and course/academy durations
"""

from app.models.lesson import Lesson
from conftest import API


def _lesson_payload(course_id, **overrides):
    payload = {
        "course_id": course_id,
        "title": "Getting started",
        "overview": "Overview",
        "description": "First steps",
        "duration": 20,
    }
    payload.update(overrides)
    return payload


def test_lesson_writes_move_course_and_academy_duration(
    client, db, instructor, make_course, make_academy, auth_headers
):
    course = make_course(instructor, duration=60)
    other = make_course(instructor, duration=30)
    academy = make_academy(instructor, courses=[course, other])
    headers = auth_headers(instructor)
    assert academy.duration == 90

    created = client.post(f"{API}/lessons/", json=_lesson_payload(course.id), headers=headers)
    assert created.status_code == 201
    lesson_id = created.json()["id"]

    db.refresh(course)
    db.refresh(academy)
    assert course.duration == 80
    assert academy.duration == 110

    updated = client.put(f"{API}/lessons/{lesson_id}", json={"duration": 5}, headers=headers)
    assert updated.status_code == 200

    db.refresh(course)
    db.refresh(academy)
    assert course.duration == 65
    assert academy.duration == 95

    deleted = client.delete(f"{API}/lessons/{lesson_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Lesson successfully deleted"

    db.refresh(course)
    db.refresh(academy)
    assert course.duration == 60
    assert academy.duration == 90
    assert db.query(Lesson).count() == 0


def test_lessons_default_to_the_end_of_the_course(client, instructor, make_course, auth_headers):
    course = make_course(instructor)
    headers = auth_headers(instructor)

    client.post(f"{API}/lessons/", json=_lesson_payload(course.id, title="One"), headers=headers)
    client.post(
        f"{API}/lessons/",
        json=_lesson_payload(course.id, title="Three", position=3),
        headers=headers,
    )
    client.post(f"{API}/lessons/", json=_lesson_payload(course.id, title="Four"), headers=headers)

    listed = client.get(f"{API}/lessons/", params={"course_id": course.id}).json()

    assert [(lesson["title"], lesson["position"]) for lesson in listed["lessons"]] == [
        ("One", 1),
        ("Three", 3),
        ("Four", 4),
    ]
    assert listed["total"] == 3


def test_only_course_owner_manages_lessons(
    client, db, instructor, make_user, make_course, auth_headers
):
    course = make_course(instructor, duration=60)
    intruder = make_user(role="instructor")

    response = client.post(
        f"{API}/lessons/", json=_lesson_payload(course.id), headers=auth_headers(intruder)
    )

    assert response.status_code == 401
    db.refresh(course)
    assert course.duration == 60

    lesson_id = client.post(
        f"{API}/lessons/", json=_lesson_payload(course.id), headers=auth_headers(instructor)
    ).json()["id"]
    forbidden = client.delete(f"{API}/lessons/{lesson_id}", headers=auth_headers(intruder))
    assert forbidden.status_code == 401


def test_duplicate_lesson_title_conflicts_and_keeps_duration(
    client, db, instructor, make_course, auth_headers
):
    course = make_course(instructor, duration=60)
    headers = auth_headers(instructor)
    client.post(f"{API}/lessons/", json=_lesson_payload(course.id), headers=headers)

    response = client.post(f"{API}/lessons/", json=_lesson_payload(course.id), headers=headers)

    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"
    db.refresh(course)
    assert course.duration == 80


def test_missing_lesson_and_course(client, instructor, auth_headers):
    assert client.get(f"{API}/lessons/999").status_code == 404

    response = client.post(
        f"{API}/lessons/", json=_lesson_payload(999), headers=auth_headers(instructor)
    )
    assert response.status_code == 404
