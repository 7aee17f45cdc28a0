from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from menuforge.database.supabase_client import get_supabase
from menuforge.main import app
from menuforge.modules.auth.service import AuthService

from tests.conftest import USER_ID


class FakeAuth:
    def __init__(self, error=None):
        self.error = error
        self.get_user_calls = 0
        self.signed_out = False
        self.registered = {}

    def get_user(self, jwt=None):
        self.get_user_calls += 1
        if self.error:
            raise self.error
        user = SimpleNamespace(
            id=USER_ID,
            email="owner@trattoria.test",
            user_metadata={"full_name": "Giulia Rossi"},
            app_metadata={},
            created_at=None,
            updated_at=None,
        )
        return SimpleNamespace(user=user)

    def sign_in_with_password(self, credentials):
        if credentials["password"] != "correct-horse":
            raise Exception("Invalid login credentials")
        return SimpleNamespace(
            user=SimpleNamespace(id=USER_ID, email=credentials["email"]),
            session=SimpleNamespace(access_token="token-abc"),
        )

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.registered:
            raise Exception("User already registered")
        self.registered[email] = credentials["options"]["data"]
        return SimpleNamespace(user=SimpleNamespace(id=USER_ID, email=email))

    def sign_out(self):
        self.signed_out = True


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def auth_client(anonymous_client, fake_db, fake_auth):
    fake_db.auth = fake_auth
    app.dependency_overrides[get_supabase] = lambda: fake_db
    return anonymous_client


def test_get_current_user_is_cached(fake_auth):
    service = AuthService(SimpleNamespace(auth=fake_auth))

    first = service.get_current_user("token-abc")
    second = service.get_current_user("token-abc")

    assert first["id"] == USER_ID
    assert second == first
    assert fake_auth.get_user_calls == 1


def test_logout_drops_cached_user(fake_auth):
    service = AuthService(SimpleNamespace(auth=fake_auth))
    service.get_current_user("token-abc")

    assert service.logout("token-abc") is True
    service.get_current_user("token-abc")

    assert fake_auth.get_user_calls == 2
    assert fake_auth.signed_out is True


def test_expired_token_is_unauthorized():
    service = AuthService(SimpleNamespace(auth=FakeAuth(error=Exception("JWT expired"))))

    with pytest.raises(HTTPException) as exc_info:
        service.get_current_user("stale")

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token"


def test_login(auth_client):
    response = auth_client.post("/api/auth/login", json={
        "email": "owner@trattoria-giulia.com",
        "password": "correct-horse",
    })

    assert response.status_code == 200
    assert response.json()["access_token"] == "token-abc"


def test_login_wrong_password(auth_client):
    response = auth_client.post("/api/auth/login", json={
        "email": "owner@trattoria-giulia.com",
        "password": "wrong",
    })

    assert response.status_code == 401


def test_get_user_creates_profile(auth_client, fake_db):
    response = auth_client.get("/api/auth/user", headers={"Authorization": "Bearer token-abc"})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == USER_ID
    assert body["name"] == "Giulia Rossi"
    assert body["has_activated"] is False
    assert len(fake_db.tables["profiles"]) == 1


def test_get_user_without_token(auth_client):
    response = auth_client.get("/api/auth/user")

    assert response.status_code == 401
    assert response.json()["detail"] == "No authorization token provided"


def test_register(auth_client, fake_auth):
    response = auth_client.post("/api/auth/register", json={
        "email": "owner@trattoria-giulia.com",
        "password": "correct-horse",
        "full_name": "Giulia Rossi",
    })

    assert response.status_code == 201
    assert response.json() == {
        "user_id": USER_ID,
        "email": "owner@trattoria-giulia.com",
        "message": "User registered successfully",
    }
    assert fake_auth.registered["owner@trattoria-giulia.com"] == {"full_name": "Giulia Rossi"}


def test_register_duplicate_email(auth_client):
    body = {"email": "owner@trattoria-giulia.com", "password": "correct-horse"}
    auth_client.post("/api/auth/register", json=body)

    response = auth_client.post("/api/auth/register", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_register_rejects_invalid_email(auth_client):
    response = auth_client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})

    assert response.status_code == 422
