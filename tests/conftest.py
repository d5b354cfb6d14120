import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["JWT_SECRET"] = "test-jwt-secret-with-at-least-32-chars"
os.environ["CSRF_SECRET"] = "test-csrf-secret"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth_service.app.main import app as auth_app
from inventory_service.app.main import app as inventory_app
from shared.core.auth import build_token_payload, create_access_token
from shared.core.database import Base, get_db
from shared.data.subscription_plans_insert import seed_subscription_plans
from shared.helpers.csrf_helper import CSRF_HEADER_NAME, generate_csrf_token
from shared.models.organizations import Organization
from shared.models.subscriptions import Subscription, SubscriptionPlan
from shared.models.user_login_session import UserLoginSession
from shared.models.users import Users
from shared.utils.enums import SubscriptionStatus, UserRole, UserStatus

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_PASSWORD = "correct-horse-9"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    seed_subscription_plans(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    inventory_app.dependency_overrides[get_db] = override_get_db
    with TestClient(inventory_app) as c:
        yield c
    inventory_app.dependency_overrides.clear()


@pytest.fixture()
def auth_client(db):
    auth_app.dependency_overrides[get_db] = override_get_db
    with TestClient(auth_app) as c:
        yield c
    auth_app.dependency_overrides.clear()


@pytest.fixture()
def make_tenant(db):
    """Factory: organization + owner, optionally on a plan."""

    def _make(plan_name="starter", email="owner@acme.io", subscribed=True):
        org = Organization(name="Acme Supplies")
        db.add(org)
        db.flush()

        owner = Users(
            org_id=org.id,
            email=email,
            full_name="Olive Owner",
            role=UserRole.OWNER.value,
            status=UserStatus.ACTIVE.value,
        )
        owner.set_password(OWNER_PASSWORD)
        db.add(owner)
        db.flush()
        org.owner_id = owner.id

        if subscribed:
            plan = db.query(SubscriptionPlan).filter(SubscriptionPlan.name == plan_name).one()
            db.add(Subscription(
                org_id=org.id,
                plan_id=plan.id,
                status=SubscriptionStatus.TRIAL.value,
                trial_end_date=datetime.now(timezone.utc) + timedelta(days=14),
            ))
        db.commit()
        return org, owner

    return _make


@pytest.fixture()
def make_member(db):
    def _make(org, email, role=UserRole.MEMBER):
        member = Users(
            org_id=org.id,
            email=email,
            full_name=email.split("@")[0].title(),
            role=role.value,
            status=UserStatus.ACTIVE.value,
        )
        db.add(member)
        db.commit()
        return member

    return _make


@pytest.fixture()
def headers_for(db):
    """Factory: bearer token for an open login session plus a CSRF header."""

    def _headers(user):
        session = UserLoginSession(user_id=user.id, ip_address="127.0.0.1")
        db.add(session)
        db.commit()
        db.refresh(session)
        token = create_access_token(build_token_payload(user, session))
        return {
            "Authorization": f"Bearer {token}",
            CSRF_HEADER_NAME: generate_csrf_token(),
        }

    return _headers


@pytest.fixture()
def tenant(make_tenant):
    return make_tenant()


@pytest.fixture()
def headers(tenant, headers_for):
    _, owner = tenant
    return headers_for(owner)


@pytest.fixture()
def create_product(client, headers):
    def _create(**fields):
        payload = {"name": "Widget", "sku": None, "reorder_point": 5}
        payload.update(fields)
        response = client.post("/api/products", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["product"]

    return _create
