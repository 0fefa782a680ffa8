import time
import uuid

import jwt
from fastapi.testclient import TestClient

from formcraft.core.config import settings
from formcraft.models.user import User
from formcraft.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    hash_password,
    normalize_email,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
ME_URL = "/api/v1/auth/me"


def _register_payload(**overrides):
    base = {
        "name": "Test User",
        "email": "test@example.com",
        "password": "strongpassword123",
    }
    base.update(overrides)
    return base


def _create_test_user(db, **overrides):
    """Insert a user directly into the DB and return it."""
    defaults = {
        "name": "Test User",
        "email": "test@example.com",
        "password_hash": hash_password("strongpassword123"),
    }
    defaults.update(overrides)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ===========================================================================
# Registration tests
# ===========================================================================


class TestRegister:
    def test_register_success(self, client: TestClient):
        resp = client.post(REGISTER_URL, json=_register_payload())
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["email"] == "test@example.com"
        assert data["user"]["name"] == "Test User"
        assert data["token_type"] == "bearer"
        assert data["access_token"]

    def test_register_duplicate_email(self, client: TestClient):
        client.post(REGISTER_URL, json=_register_payload())
        resp = client.post(REGISTER_URL, json=_register_payload(name="Other"))
        assert resp.status_code == 409

    def test_register_short_password(self, client: TestClient):
        resp = client.post(REGISTER_URL, json=_register_payload(password="short"))
        assert resp.status_code == 422

    def test_register_missing_fields(self, client: TestClient):
        resp = client.post(REGISTER_URL, json={"email": "test@example.com"})
        assert resp.status_code == 422

    def test_register_email_case_insensitive(self, client: TestClient):
        resp = client.post(REGISTER_URL, json=_register_payload(email="Test@Example.COM"))
        assert resp.status_code == 201
        assert resp.json()["user"]["email"] == "test@example.com"

        resp = client.post(REGISTER_URL, json=_register_payload(email="TEST@example.com"))
        assert resp.status_code == 409


# ===========================================================================
# Login tests
# ===========================================================================


class TestLogin:
    def test_login_success(self, client: TestClient, db):
        user = _create_test_user(db)
        resp = client.post(LOGIN_URL, json={"email": "test@example.com", "password": "strongpassword123"})
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == str(user.id)

    def test_login_wrong_password(self, client: TestClient, db):
        _create_test_user(db)
        resp = client.post(LOGIN_URL, json={"email": "test@example.com", "password": "wrongpassword"})
        assert resp.status_code == 401

    def test_login_nonexistent_user(self, client: TestClient):
        resp = client.post(LOGIN_URL, json={"email": "nobody@example.com", "password": "whatever123"})
        assert resp.status_code == 401

    def test_login_inactive_user(self, client: TestClient, db):
        _create_test_user(db, is_active=False)
        resp = client.post(LOGIN_URL, json={"email": "test@example.com", "password": "strongpassword123"})
        assert resp.status_code == 403

    def test_login_returns_valid_jwt(self, client: TestClient, db):
        user = _create_test_user(db)
        resp = client.post(LOGIN_URL, json={"email": "test@example.com", "password": "strongpassword123"})
        token = resp.json()["access_token"]
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload["sub"] == str(user.id)
        assert payload["type"] == "access"


# ===========================================================================
# Current user
# ===========================================================================


class TestMe:
    def test_get_me(self, client: TestClient, db):
        user = _create_test_user(db)
        resp = client.get(ME_URL, headers=_auth_header(create_access_token(user.id)))
        assert resp.status_code == 200
        assert resp.json()["email"] == "test@example.com"

    def test_get_me_no_auth(self, client: TestClient):
        resp = client.get(ME_URL)
        assert resp.status_code in (401, 403)

    def test_get_me_invalid_token(self, client: TestClient):
        resp = client.get(ME_URL, headers=_auth_header("not-a-jwt"))
        assert resp.status_code == 401

    def test_get_me_expired_token(self, client: TestClient, db):
        user = _create_test_user(db)
        token = jwt.encode(
            {"sub": str(user.id), "exp": int(time.time()) - 10, "type": "access"},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired"

    def test_get_me_deleted_user(self, client: TestClient, db):
        user = _create_test_user(db)
        token = create_access_token(user.id)
        db.delete(user)
        db.commit()
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401


# ===========================================================================
# Edge cases
# ===========================================================================


class TestEdgeCases:
    def test_token_with_bad_user_id(self, client: TestClient):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": int(time.time()) + 60, "type": "access"},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401

    def test_token_with_missing_sub(self, client: TestClient):
        token = jwt.encode(
            {"exp": int(time.time()) + 60, "type": "access"},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401

    def test_token_with_wrong_type(self, client: TestClient, db):
        user = _create_test_user(db)
        token = jwt.encode(
            {"sub": str(user.id), "exp": int(time.time()) + 60, "type": "refresh"},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401

    def test_token_with_wrong_secret(self, client: TestClient, db):
        user = _create_test_user(db)
        token = jwt.encode(
            {"sub": str(user.id), "exp": int(time.time()) + 60, "type": "access"},
            "wrong-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401

    def test_token_for_unknown_user(self, client: TestClient):
        resp = client.get(ME_URL, headers=_auth_header(create_access_token(uuid.uuid4())))
        assert resp.status_code == 401

    def test_token_without_type(self, client: TestClient, db):
        user = _create_test_user(db)
        token = jwt.encode(
            {"sub": str(user.id), "exp": int(time.time()) + 60},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get(ME_URL, headers=_auth_header(token))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token type"


# ===========================================================================
# Account service
# ===========================================================================


class TestAccountService:
    def test_normalize_email(self):
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"

    def test_create_user_stores_normalized_email(self, db):
        user = create_user(db, name="Jane", email="Jane@Example.com", password="strongpassword123")
        assert user.email == "jane@example.com"
        assert user.password_hash != "strongpassword123"

    def test_authenticate_user(self, db):
        user = _create_test_user(db)
        assert authenticate_user(db, "TEST@example.com", "strongpassword123").id == user.id
        assert authenticate_user(db, "test@example.com", "wrongpassword") is None
        assert authenticate_user(db, "nobody@example.com", "strongpassword123") is None

    def test_authenticate_inactive_user_still_returned(self, db):
        _create_test_user(db, is_active=False)
        user = authenticate_user(db, "test@example.com", "strongpassword123")
        assert user is not None
        assert user.is_active is False
