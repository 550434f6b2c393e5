"""
Tests for default data seeding.
"""

import asyncio
import random

from wardwatch.core.settings import settings
from wardwatch.services.bootstrap import build_default_wards, initialize_default_data
from wardwatch.services.user_service import UserService
from wardwatch.services.ward_service import WardService


def test_default_wards_shape():
    wards = build_default_wards(10, "Swatch Village", rng=random.Random(7))

    assert [w["ward_number"] for w in wards] == list(range(1, 11))
    for ward in wards:
        n = ward["ward_number"]
        assert ward["name"] == f"Ward {n}"
        assert ward["description"] == f"Area {n} of Swatch Village"
        assert 500 <= ward["population"] <= 1499
        assert ward["area"] in {f"{k} sq km" for k in range(2, 7)}
        assert ward["representative"]["contact"].startswith("+91")
        assert ward["is_active"] is True


def test_first_start_seeds_wards_and_admin(db):
    created = asyncio.run(initialize_default_data(db))

    assert created == {"wards": settings.DEFAULT_WARD_COUNT, "admins": 1}

    wards = asyncio.run(WardService(db).list_wards())
    assert [w["ward_number"] for w in wards] == list(range(1, settings.DEFAULT_WARD_COUNT + 1))

    admin = asyncio.run(UserService(db).get_user_by_email(settings.DEFAULT_ADMIN_EMAIL))
    assert admin["role"] == "admin"
    assert admin["ward_number"] == settings.DEFAULT_ADMIN_WARD


def test_restart_creates_nothing(db):
    asyncio.run(initialize_default_data(db))
    again = asyncio.run(initialize_default_data(db))

    assert again == {"wards": 0, "admins": 0}
    assert len(list(db.collection("wards").stream())) == settings.DEFAULT_WARD_COUNT
    assert len(list(db.collection("users").stream())) == 1


def test_existing_wards_are_left_alone(db):
    asyncio.run(WardService(db).create_ward({"ward_number": 20, "name": "Ward 20"}))

    created = asyncio.run(initialize_default_data(db))

    assert created == {"wards": 0, "admins": 1}
    assert [doc.id for doc in db.collection("wards").stream()] == ["20"]


def test_startup_seeds_through_the_app(client, db):
    assert len(list(db.collection("wards").stream())) == settings.DEFAULT_WARD_COUNT
    assert asyncio.run(UserService(db).admin_exists()) is True
