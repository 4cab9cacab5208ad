import time
from datetime import timedelta

import pytest
from jose import jwt

from models.users import User
from utils.errors import AuthError
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, verify_token


def test_signup_returns_identity_without_password(client, db):
    res = client.post("/auth/signup", json={"email": "Bob@Shop.com", "password": "hunter22", "role": "customer"})

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == "bob@shop.com"
    assert body["user"]["role"] == "customer"
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]

    stored = db.query(User).filter(User.email == "bob@shop.com").one()
    assert stored.password_hash != "hunter22"
    assert verify_password("hunter22", stored.password_hash)


def test_signup_duplicate_email_is_conflict(client):
    payload = {"email": "bob@shop.com", "password": "hunter22", "role": "customer"}
    assert client.post("/auth/signup", json=payload).status_code == 201

    res = client.post("/auth/signup", json={**payload, "email": "BOB@shop.com"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Email already registered"


@pytest.mark.parametrize("payload, field", [
    ({"email": "not-an-email", "password": "hunter22", "role": "customer"}, "email"),
    ({"email": "bob@shop.com", "password": "short", "role": "customer"}, "password"),
    ({"email": "bob@shop.com", "password": "hunter22", "role": "superuser"}, "role"),
])
def test_signup_validation_errors(client, payload, field):
    res = client.post("/auth/signup", json=payload)

    assert res.status_code == 400
    body = res.json()
    assert body["detail"] == "Validation failed"
    assert field in [e["field"] for e in body["errors"]]


def test_login_and_verify_round_trip(client, settings):
    signup = client.post("/auth/signup", json={"email": "eve@shop.com", "password": "hunter22", "role": "admin"})
    user = signup.json()["user"]

    res = client.post("/auth/login", json={"email": "eve@shop.com", "password": "hunter22"})
    assert res.status_code == 200
    token = res.json()["access_token"]
    assert res.json()["token_type"] == "bearer"

    identity = verify_token(token, settings)
    assert identity.user_id == user["id"]
    assert identity.role == "admin"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json() == user


def test_token_expires_after_configured_lifetime(settings):
    token = create_access_token({"sub": "1", "role": "customer"}, settings)
    lifetime = jwt.get_unverified_claims(token)["exp"] - int(time.time())
    assert 3590 <= lifetime <= 3600

    expired = create_access_token({"sub": "1", "role": "customer"}, settings, expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthError) as exc:
        verify_token(expired, settings)
    assert exc.value.status_code == 403


@pytest.mark.parametrize("email, password", [
    ("eve@shop.com", "wrong-password"),
    ("nobody@shop.com", "hunter22"),
])
def test_login_rejects_bad_credentials(client, email, password):
    client.post("/auth/signup", json={"email": "eve@shop.com", "password": "hunter22", "role": "customer"})

    res = client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials"


def test_missing_token_is_401(client):
    res = client.get("/cart")
    assert res.status_code == 401


def test_invalid_token_is_403(client, settings):
    res = client.get("/cart", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 403

    forged = jwt.encode({"sub": "1", "role": "admin"}, "other-secret", algorithm="HS256")
    res = client.get("/cart", headers={"Authorization": f"Bearer {forged}"})
    assert res.status_code == 403


def test_token_for_unknown_user_is_403(client, settings):
    token = create_access_token({"sub": "999", "role": "customer"}, settings)
    res = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 403


def test_verify_without_token_raises_401(settings):
    with pytest.raises(AuthError) as exc:
        verify_token(None, settings)
    assert exc.value.status_code == 401
