"""
Tests for registration, login and the current-user endpoint.
"""

from wardwatch.core.settings import settings

from tests.conftest import API, auth_headers

RESIDENT = {
    "name": "Asha Kale",
    "email": "Asha.Kale@Example.com",
    "password": "secret123",
    "wardNumber": 6,
    "phone": "9876543210",
}


def test_register_returns_token_and_public_profile(client):
    response = client.post(f"{API}/auth/register", json=RESIDENT)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["token"]
    user = body["user"]
    assert user["email"] == "asha.kale@example.com"
    assert user["role"] == "resident"
    assert user["wardNumber"] == 6
    assert "password" not in user and "passwordHash" not in user


def test_register_cannot_claim_admin(client):
    response = client.post(f"{API}/auth/register", json={**RESIDENT, "role": "admin"})

    assert response.json()["user"]["role"] == "resident"


def test_duplicate_email_rejected(client):
    client.post(f"{API}/auth/register", json=RESIDENT)

    response = client.post(f"{API}/auth/register", json={**RESIDENT, "email": "asha.kale@example.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "User with this email already exists"


def test_register_validation_lists_fields(client):
    response = client.post(f"{API}/auth/register", json={
        "name": "A",
        "email": "not-an-email",
        "password": "123",
        "wardNumber": 0,
    })

    assert response.status_code == 400
    assert {e["field"] for e in response.json()["errors"]} == {"name", "email", "password", "wardNumber"}


def test_login_is_case_insensitive_on_email(client):
    client.post(f"{API}/auth/register", json=RESIDENT)

    response = client.post(f"{API}/auth/login", json={"email": "ASHA.KALE@example.com", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["user"]["wardNumber"] == 6


def test_login_wrong_password(client):
    client.post(f"{API}/auth/register", json=RESIDENT)

    response = client.post(f"{API}/auth/login", json={"email": RESIDENT["email"], "password": "wrong-one"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post(f"{API}/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert response.status_code == 401


def test_seeded_admin_can_log_in(client):
    response = client.post(f"{API}/auth/login", json={
        "email": settings.DEFAULT_ADMIN_EMAIL,
        "password": settings.DEFAULT_ADMIN_PASSWORD,
    })

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_me(client):
    token = client.post(f"{API}/auth/register", json=RESIDENT).json()["token"]

    response = client.get(f"{API}/auth/me", headers=auth_headers(token))

    assert response.status_code == 200
    assert response.json()["name"] == "Asha Kale"


def test_me_requires_token(client):
    response = client.get(f"{API}/auth/me")

    assert response.status_code == 401


def test_token_of_deleted_user_is_rejected(client, db):
    body = client.post(f"{API}/auth/register", json=RESIDENT).json()
    db.collection("users").document(body["user"]["id"]).delete()

    response = client.get(f"{API}/auth/me", headers=auth_headers(body["token"]))

    assert response.status_code == 401


def test_password_longer_than_72_bytes_is_a_validation_error(client):
    # 40 characters, 80 bytes in UTF-8
    response = client.post(f"{API}/auth/register", json={**RESIDENT, "password": "é" * 40})

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["password"]
