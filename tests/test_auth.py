from datetime import datetime, timedelta, timezone

from jose import jwt

from storefront.auth import create_token, decode_token
from storefront.config import settings
from storefront.models import User


def test_register_returns_201_and_token(client, db):
    res = client.post(
        "/api/auth/register",
        json={"name": "Jane Doe", "email": "Jane@Example.com", "password": "Secret123"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "jane@example.com"
    assert body["data"]["user"]["role"] == "customer"
    assert body["data"]["user"]["authProvider"] == "local"
    assert "password_hash" not in body["data"]["user"]
    assert decode_token(body["data"]["token"])["email"] == "jane@example.com"
    assert "token" in res.cookies

    user = db.query(User).filter(User.email == "jane@example.com").one()
    assert user.password_hash != "Secret123"


def test_register_duplicate_email(client, customer):
    res = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": customer.email, "password": "Secret123"},
    )
    assert res.status_code == 400
    assert res.json()["message"] == "User already exists with this email"


def test_register_weak_password(client):
    res = client.post(
        "/api/auth/register",
        json={"name": "Jane", "email": "jane@example.com", "password": "password"},
    )
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation failed"
    assert body["errors"][0]["field"] == "password"
    assert "uppercase" in body["errors"][0]["message"]


def test_register_rejects_bad_email_and_short_name(client):
    res = client.post("/api/auth/register", json={"name": "J", "email": "nope", "password": "Secret123"})
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"name", "email"}


def test_login_success(client, customer):
    res = client.post("/api/auth/login", json={"email": "JANE@example.com", "password": "Secret123"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["user"]["id"] == customer.id
    assert decode_token(data["token"])["userId"] == customer.id


def test_login_wrong_password(client, customer):
    res = client.post("/api/auth/login", json={"email": customer.email, "password": "Wrong123"})
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid email or password"}


def test_login_unknown_email(client):
    res = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "Secret123"})
    assert res.status_code == 401


def test_login_rejects_google_accounts(client, db):
    db.add(User(name="G User", email="g@example.com", auth_provider="google", google_id="g-1"))
    db.commit()
    res = client.post("/api/auth/login", json={"email": "g@example.com", "password": "Secret123"})
    assert res.status_code == 401


def test_me_with_bearer(client, customer, customer_headers):
    res = client.get("/api/auth/me", headers=customer_headers)
    assert res.status_code == 200
    assert res.json()["data"]["user"]["email"] == customer.email


def test_me_with_cookie_after_login(client, customer):
    client.post("/api/auth/login", json={"email": customer.email, "password": "Secret123"})
    res = client.get("/api/auth/me")
    assert res.status_code == 200
    assert res.json()["data"]["user"]["id"] == customer.id


def test_me_requires_authentication(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Authentication required"


def test_me_invalid_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


def test_me_expired_token(client, customer):
    token = jwt.encode(
        {"userId": customer.id, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_alg,
    )
    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["message"] == "Token expired"


def test_me_deleted_user(client, db, customer):
    token = create_token(customer)
    db.delete(customer)
    db.commit()
    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["message"] == "User not found"


def test_logout_clears_cookie(client, customer):
    client.post("/api/auth/login", json={"email": customer.email, "password": "Secret123"})
    res = client.post("/api/auth/logout")
    assert res.status_code == 200
    assert client.get("/api/auth/me").status_code == 401
