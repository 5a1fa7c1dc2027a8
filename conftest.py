"""
Shared fixtures for the API tests.

The app is pointed at an in-memory SQLite database before it is imported, and
the Stripe SDK is replaced by ``FakeStripeClient`` through dependency overrides.
"""

import json
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = "memory://"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_ENDPOINT_SECRET"] = "whsec_dummy"
os.environ["DEBUG"] = "false"

import pytest
import stripe
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine, get_db
from app.core.dependencies import get_stripe_client
from app.core.security import PasswordHelper, jwt_manager
from app.models.academy import Academy
from app.models.course import Course
from app.models.enums import Difficulty, UserRole
from app.models.user import User
from main import app

VALID_SIGNATURE = "t=1,v1=valid"
API = "/api/v1"


class FakeStripeClient:
    """In-memory stand-in for ``StripeClient`` that records every call."""

    def __init__(self):
        self.calls = []
        self.customers = {}
        self.products = {}
        self.prices = []
        self.sessions = []
        self.subscriptions = {}
        self.return_session_url = True
        self.error = None

    def _record(self, call_name, **params):
        self.calls.append((call_name, params))
        if self.error is not None:
            raise self.error

    def call_names(self):
        return [name for name, _ in self.calls]

    # ----- customers -----

    def create_customer(self, metadata):
        self._record("create_customer", metadata=metadata)
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers[customer_id] = {"id": customer_id, "metadata": dict(metadata)}
        return self.customers[customer_id]

    def retrieve_customer(self, customer_id):
        self._record("retrieve_customer", customer_id=customer_id)
        if customer_id not in self.customers:
            raise stripe.InvalidRequestError(
                f"No such customer: '{customer_id}'", "id", code="resource_missing"
            )
        return self.customers[customer_id]

    # ----- checkout -----

    def create_checkout_session(self, **params):
        self._record("create_checkout_session", **params)
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = {
            "id": session_id,
            "url": f"https://checkout.stripe.test/{session_id}"
            if self.return_session_url
            else None,
            "mode": params["mode"],
            "customer": params["customer"],
            "params": params,
        }
        self.sessions.append(session)
        return session

    def retrieve_subscription(self, subscription_id):
        self._record("retrieve_subscription", subscription_id=subscription_id)
        return self.subscriptions[subscription_id]

    # ----- catalog -----

    def retrieve_product(self, product_id):
        self._record("retrieve_product", product_id=product_id)
        if product_id not in self.products:
            raise stripe.InvalidRequestError(
                f"No such product: '{product_id}'", "id", code="resource_missing"
            )
        return self.products[product_id]

    def create_product(self, **params):
        self._record("create_product", **params)
        product_id = f"prod_{len(self.products) + 1}"
        self.products[product_id] = {"id": product_id, **params}
        return self.products[product_id]

    def update_product(self, product_id, **params):
        self._record("update_product", product_id=product_id, **params)
        self.products[product_id].update(params)
        return self.products[product_id]

    def create_price(self, **params):
        self._record("create_price", **params)
        price = {"id": f"price_{len(self.prices) + 1}", **params}
        self.prices.append(price)
        return price

    def list_prices(self, product_id):
        self._record("list_prices", product_id=product_id)
        return [p for p in reversed(self.prices) if p["product"] == product_id][:1]

    # ----- webhooks -----

    def construct_event(self, payload, signature):
        if signature != VALID_SIGNATURE:
            raise stripe.SignatureVerificationError("No signatures found", signature)
        return json.loads(payload)


# ==================== Database ====================


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_stripe():
    return FakeStripeClient()


@pytest.fixture
def client(db, fake_stripe):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_client] = lambda: fake_stripe
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==================== Factories ====================


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def factory(role: UserRole = UserRole.USER, **overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=overrides.pop("email", f"user{n}@example.com"),
            username=overrides.pop("username", f"user{n}"),
            first_name=overrides.pop("first_name", "Test"),
            last_name=overrides.pop("last_name", f"User{n}"),
            hashed_password=PasswordHelper.hash_password(
                overrides.pop("password", "Password123")
            ),
            role=UserRole(role).value,
            **overrides,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return factory


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def instructor(make_user):
    return make_user(UserRole.INSTRUCTOR)


@pytest.fixture
def student(make_user):
    return make_user(UserRole.USER)


@pytest.fixture
def make_course(db):
    counter = {"n": 0}

    def factory(owner: User, price=50, duration=60, **overrides) -> Course:
        counter["n"] += 1
        course = Course(
            name=overrides.pop("name", f"Course {counter['n']}"),
            description="A course",
            overview="Overview",
            difficulty=Difficulty.BEGINNER.value,
            price=price,
            duration=duration,
            approved=overrides.pop("approved", True),
            user_id=owner.id,
            **overrides,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return factory


@pytest.fixture
def make_academy(db):
    counter = {"n": 0}

    def factory(owner: User, price=200, validity=0, courses=None, **overrides) -> Academy:
        counter["n"] += 1
        academy = Academy(
            name=overrides.pop("name", f"Academy {counter['n']}"),
            description="An academy",
            overview="Overview",
            difficulty=Difficulty.INTERMEDIATE.value,
            price=price,
            validity=validity,
            highlights=[],
            requirements=[],
            approved=overrides.pop("approved", True),
            user_id=owner.id,
            **overrides,
        )
        academy.courses = list(courses or [])
        academy.recompute_duration()
        db.add(academy)
        db.commit()
        db.refresh(academy)
        return academy

    return factory


@pytest.fixture
def auth_headers():
    def factory(user: User) -> dict:
        token = jwt_manager.create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return factory
