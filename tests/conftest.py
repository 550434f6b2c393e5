"""
Shared pytest fixtures for the Ward Watch tests.

Every test runs against a fresh in-memory document DB and a fresh
notification bus. The environment is set before any wardwatch import so
the settings singleton picks it up.
"""

import os

os.environ["USE_MOCK_DB"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from wardwatch.config.firebase import initialize_firestore
from wardwatch.config.mock_firestore import MockFirestore, get_mock_db
from wardwatch.core.settings import settings
from wardwatch.main import app
from wardwatch.services.notification_bus import NotificationBus, reset_notification_bus

API = settings.API_PREFIX


@pytest.fixture(autouse=True)
def db() -> MockFirestore:
    """Empty in-memory store for each test (also the one the app uses)."""
    initialize_firestore()
    mock_db = get_mock_db()
    mock_db.reset()
    yield mock_db
    mock_db.reset()


@pytest.fixture(autouse=True)
def bus() -> NotificationBus:
    """Fresh notification bus, the same instance the route dependencies return."""
    return reset_notification_bus()


@pytest.fixture
def client():
    """
    Test client with startup events run (default wards 1..10 + admin seeded).
    One portal is shared by HTTP calls and WebSocket sessions.
    """
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(client) -> str:
    response = client.post(f"{API}/auth/login", json={
        "email": settings.DEFAULT_ADMIN_EMAIL,
        "password": settings.DEFAULT_ADMIN_PASSWORD,
    })
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def register_resident(client):
    """Factory: register a resident of `ward_number` and return (token, user)."""
    counter = {"n": 0}

    def _register(ward_number: int, name: Optional[str] = None):
        counter["n"] += 1
        response = client.post(f"{API}/auth/register", json={
            "name": name or f"Resident {counter['n']}",
            "email": f"resident{counter['n']}.ward{ward_number}@example.com",
            "password": "secret123",
            "wardNumber": ward_number,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _register


@pytest.fixture
def problem_body():
    def _body(**overrides):
        body = {
            "title": "Overflowing garbage bin",
            "description": "The bin near the market has not been cleared for days.",
            "category": "Waste Management",
            "location": "Main market, gate 2",
        }
        body.update(overrides)
        return body

    return _body


@pytest.fixture
def seed_problems(db):
    """
    Insert problem documents directly, with strictly increasing created_at
    (problem i is i minutes after the base time).
    """
    def _seed(count: int, ward_number: int = 1, status: str = "Open", category: str = "Other",
              start: int = 0):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ids = []
        for i in range(start, start + count):
            ref = db.collection("problems").document()
            ref.set({
                "title": f"Problem {i:02d}",
                "description": "Seeded problem for listing tests",
                "category": category,
                "location": "Somewhere in town",
                "priority": "Medium",
                "status": status,
                "reported_by": "seed-user",
                "ward_number": ward_number,
                "assigned_to": None,
                "admin_notes": None,
                "images": [],
                "resolved_at": None,
                "is_public": True,
                "created_at": base + timedelta(minutes=i),
                "updated_at": base + timedelta(minutes=i),
            })
            ids.append(ref.id)
        return ids

    return _seed
