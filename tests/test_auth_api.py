import pytest
import requests

from auth_service.app.services import authservices
from shared.core.config import settings
from shared.helpers.csrf_helper import CSRF_HEADER_NAME, generate_csrf_token
from shared.models.subscriptions import Subscription
from shared.models.users import Users
from shared.utils.enums import UserStatus

OWNER_PASSWORD = "correct-horse-9"


class FakeGoogleResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload


@pytest.fixture()
def google_profile(monkeypatch):
    """Replace the Google userinfo call; returns a dict the test can edit."""
    profile = {"id": "g-123", "email": "gina@acme.io", "verified_email": True, "name": "Gina"}
    state = {"status_code": 200, "calls": []}

    def fake_get(url, params=None, timeout=None):
        state["calls"].append((url, params, timeout))
        return FakeGoogleResponse(state["status_code"], profile)

    monkeypatch.setattr(authservices.requests, "get", fake_get)
    profile["_state"] = state
    return profile


def bearer(token):
    return {"Authorization": f"Bearer {token}", CSRF_HEADER_NAME: generate_csrf_token()}


# =============================================================================
# Email & password
# =============================================================================


class TestSignup:

    def test_signup_creates_org_and_trial(self, auth_client, db):
        response = auth_client.post("/api/auth/signup", json={
            "email": "Sam@Acme.io",
            "password": "sam-password-1",
            "full_name": "Sam",
            "organization_name": "Sam's Spares",
        })
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "sam@acme.io"
        assert data["user"]["role"] == "owner"
        assert data["organization"]["name"] == "Sam's Spares"
        assert data["organization"]["owner_id"] == data["user"]["id"]
        assert response.cookies.get(settings.SESSION_COOKIE_NAME) == data["access_token"]

        subscription = db.query(Subscription).one()
        assert subscription.status == "trial"
        assert subscription.plan.name == "starter"

    def test_default_org_name(self, auth_client):
        response = auth_client.post("/api/auth/signup", json={
            "email": "lee@acme.io", "password": "lee-password-1", "full_name": "Lee"})
        assert response.json()["data"]["organization"]["name"] == "Lee's Organization"

    def test_duplicate_email(self, auth_client, tenant):
        response = auth_client.post("/api/auth/signup", json={
            "email": "owner@acme.io", "password": "whatever-123"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"

    def test_short_password(self, auth_client):
        response = auth_client.post("/api/auth/signup", json={
            "email": "lee@acme.io", "password": "short"})
        assert response.status_code == 400
        assert response.json()["data"][0]["field"] == "password"


class TestLogin:

    def test_login(self, auth_client, tenant):
        response = auth_client.post("/api/auth/login", json={
            "email": "owner@acme.io", "password": OWNER_PASSWORD})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "owner@acme.io"
        assert data["organization"]["name"] == "Acme Supplies"

    def test_wrong_password(self, auth_client, tenant):
        response = auth_client.post("/api/auth/login", json={
            "email": "owner@acme.io", "password": "not-the-password"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_unknown_user(self, auth_client):
        response = auth_client.post("/api/auth/login", json={
            "email": "ghost@acme.io", "password": "whatever"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_disabled_user(self, auth_client, tenant, db):
        _, owner = tenant
        owner.status = UserStatus.DISABLED.value
        db.commit()
        response = auth_client.post("/api/auth/login", json={
            "email": "owner@acme.io", "password": OWNER_PASSWORD})
        assert response.status_code == 401


class TestSession:

    def login(self, auth_client):
        response = auth_client.post("/api/auth/login", json={
            "email": "owner@acme.io", "password": OWNER_PASSWORD})
        return response.json()["data"]["access_token"]

    def test_me(self, auth_client, tenant):
        token = self.login(auth_client)
        response = auth_client.get("/api/auth/me", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "owner@acme.io"

    def test_me_from_cookie(self, auth_client, tenant):
        self.login(auth_client)
        response = auth_client.get("/api/auth/me")
        assert response.status_code == 200

    def test_me_without_token(self, auth_client):
        assert auth_client.get("/api/auth/me").status_code == 401

    def test_garbage_token(self, auth_client):
        response = auth_client.get("/api/auth/me", headers=bearer("not-a-jwt"))
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_logout_ends_session(self, auth_client, client, tenant):
        token = self.login(auth_client)
        response = auth_client.post("/api/auth/logout", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Logged out successfully"

        auth_client.cookies.clear()
        assert auth_client.get("/api/auth/me", headers=bearer(token)).status_code == 401
        assert client.get("/api/products", headers=bearer(token)).status_code == 401

    def test_logout_requires_csrf(self, auth_client, tenant):
        token = self.login(auth_client)
        response = auth_client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403

    def test_token_works_on_inventory(self, auth_client, client, tenant):
        token = self.login(auth_client)
        assert client.get("/api/products", headers=bearer(token)).status_code == 200

    def test_csrf_and_health(self, auth_client):
        assert auth_client.get("/api/auth/csrf-token").json()["data"]["csrfToken"].count(":") == 2
        assert auth_client.get("/api/auth/health").status_code == 200


# =============================================================================
# Google
# =============================================================================


class TestGoogle:

    def test_new_user_gets_an_org(self, auth_client, google_profile, db):
        response = auth_client.post("/api/auth/google", json={"access_token": "ya29.token"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "gina@acme.io"
        assert data["user"]["role"] == "owner"
        assert data["user"]["email_verified"] is True
        assert data["organization"]["name"] == "Gina's Organization"

        url, params, timeout = google_profile["_state"]["calls"][0]
        assert url == settings.GOOGLE_USERINFO_URL
        assert params["access_token"] == "ya29.token"
        assert timeout

        user = db.query(Users).filter(Users.email == "gina@acme.io").one()
        assert user.google_id == "g-123"

    def test_existing_email_is_linked(self, auth_client, google_profile, make_tenant, db):
        _, owner = make_tenant(email="gina@acme.io")
        response = auth_client.post("/api/auth/google", json={"access_token": "ya29.token"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == str(owner.id)

        db.expire_all()
        assert db.query(Users).count() == 1
        assert db.query(Users).one().google_id == "g-123"

    def test_invited_member_is_activated(self, auth_client, client, headers, google_profile, db):
        client.post("/api/team", json={"email": "gina@acme.io"}, headers=headers)
        response = auth_client.post("/api/auth/google", json={"access_token": "ya29.token"})
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["status"] == "active"
        assert user["role"] == "member"
        assert response.json()["data"]["organization"]["name"] == "Acme Supplies"

    def test_unverified_email(self, auth_client, google_profile):
        google_profile["verified_email"] = False
        response = auth_client.post("/api/auth/google", json={"access_token": "ya29.token"})
        assert response.status_code == 400

    def test_rejected_token(self, auth_client, google_profile):
        google_profile["_state"]["status_code"] = 401
        response = auth_client.post("/api/auth/google", json={"access_token": "bad"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid access token"

    def test_google_unreachable(self, auth_client, monkeypatch):
        def boom(*args, **kwargs):
            raise requests.ConnectionError("no route to host")

        monkeypatch.setattr(authservices.requests, "get", boom)
        response = auth_client.post("/api/auth/google", json={"access_token": "ya29.token"})
        assert response.status_code == 502
