"""
Test registration, login, sessions, roles and wishlists
"""

from app.core.init import init_super_admin
from app.models.enums import UserRole
from app.models.user import User
from conftest import API


def _register(client, username="newbie", email="newbie@example.com"):
    return client.post(
        f"{API}/auth/register",
        json={
            "email": email,
            "username": username,
            "first_name": "New",
            "last_name": "User",
            "password": "Secret123",
        },
    )


def test_register_login_and_me(client):
    registered = _register(client)
    assert registered.status_code == 201
    assert registered.json()["user"]["role"] == "user"

    login = client.post(
        f"{API}/auth/login",
        json={"username_or_email": "NEWBIE@example.com", "password": "Secret123"},
    )
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "newbie"


def test_refresh_issues_new_access_token(client):
    tokens = _register(client).json()
    assert tokens["refresh_token"]

    refreshed = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert refreshed.status_code == 200
    access_token = refreshed.json()["access_token"]
    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {access_token}"})
    assert me.json()["username"] == "newbie"


def test_logout_invalidates_refresh_token(client):
    tokens = _register(client).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    logout = client.delete(f"{API}/auth/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["message"] == "Logout successful"

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthorized"


def test_new_login_invalidates_previous_refresh_token(client):
    first = _register(client).json()["refresh_token"]

    login = client.post(
        f"{API}/auth/login",
        json={"username_or_email": "newbie", "password": "Secret123"},
    )
    second = login.json()["refresh_token"]

    assert client.post(f"{API}/auth/refresh", json={"refresh_token": first}).status_code == 401
    assert client.post(f"{API}/auth/refresh", json={"refresh_token": second}).status_code == 200


def test_access_token_cannot_refresh(client):
    access_token = _register(client).json()["access_token"]

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": access_token})

    assert response.status_code == 401


def test_register_duplicate_conflicts(client):
    _register(client)

    response = _register(client, username="other")

    assert response.status_code == 409


def test_login_with_wrong_password(client):
    _register(client)

    response = client.post(
        f"{API}/auth/login",
        json={"username_or_email": "newbie", "password": "wrong-password"},
    )

    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_admin_assigns_roles(client, admin, student, auth_headers):
    response = client.put(
        f"{API}/users/{student.id}/role",
        json={"role": "instructor"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["role"] == "instructor"

    forbidden = client.put(
        f"{API}/users/{admin.id}/role",
        json={"role": "user"},
        headers=auth_headers(student),
    )
    assert forbidden.status_code == 403


def test_default_admin_created_once(db):
    init_super_admin(db)
    init_super_admin(db)

    admins = db.query(User).filter(User.role == UserRole.ADMIN.value).all()
    assert len(admins) == 1


def test_wishlist_lifecycle(client, student, instructor, make_course, make_academy, auth_headers):
    course = make_course(instructor)
    academy = make_academy(instructor)
    headers = auth_headers(student)

    created = client.post(
        f"{API}/wishlists/",
        json={"product": {"product_type": "Course", "product_id": course.id}},
        headers=headers,
    )
    client.post(
        f"{API}/wishlists/",
        json={"product": {"product_type": "Academy", "product_id": academy.id}},
        headers=headers,
    )
    duplicate = client.post(
        f"{API}/wishlists/",
        json={"product": {"product_type": "Course", "product_id": course.id}},
        headers=headers,
    )
    missing = client.post(
        f"{API}/wishlists/",
        json={"product": {"product_type": "Course", "product_id": 999}},
        headers=headers,
    )

    assert created.status_code == 201
    assert created.json()["product"]["name"] == course.name
    assert duplicate.status_code == 409
    assert missing.status_code == 404

    courses_only = client.get(
        f"{API}/wishlists/", params={"product_type": "Course"}, headers=headers
    ).json()
    assert len(courses_only["wishlists"]) == 1

    deleted = client.delete(f"{API}/wishlists/{created.json()['id']}", headers=headers)
    assert deleted.status_code == 200
    assert len(client.get(f"{API}/wishlists/", headers=headers).json()["wishlists"]) == 1


def test_health_endpoints(client):
    assert client.get("/").json()["status"] == "healthy"
    assert client.get("/health").json()["database"] == "healthy"
