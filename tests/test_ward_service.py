"""
Tests for WardService against the in-memory store.
"""

import asyncio

import pytest

from wardwatch.core.errors import Conflict, NotFound, ValidationFailed
from wardwatch.services.ward_service import WardService


@pytest.fixture
def service(db):
    return WardService(db)


def _ward(number=12, **overrides):
    fields = {
        "ward_number": number,
        "name": f"Ward {number}",
        "description": "Riverside colony",
        "population": 1200,
        "area": "3 sq km",
        "representative": {"name": "S. Patil", "contact": "+919812345678"},
    }
    fields.update(overrides)
    return fields


def test_duplicate_number_conflicts_and_keeps_original(service):
    async def scenario():
        await service.create_ward(_ward(12))
        with pytest.raises(Conflict):
            await service.create_ward(_ward(12, name="Replacement", population=1))
        return await service.get_ward(12)

    ward = asyncio.run(scenario())

    assert ward["name"] == "Ward 12"
    assert ward["population"] == 1200


def test_invalid_ward_lists_every_violation(service):
    with pytest.raises(ValidationFailed) as exc_info:
        asyncio.run(service.create_ward(_ward(0, name="W", population=-1)))

    assert {e["field"] for e in exc_info.value.errors} == {"wardNumber", "name", "population"}


def test_partial_update_keeps_other_fields(service):
    async def scenario():
        await service.create_ward(_ward(12))
        return await service.update_ward(12, {"name": "Ward Twelve", "ward_number": 40})

    ward = asyncio.run(scenario())

    assert ward["name"] == "Ward Twelve"
    assert ward["population"] == 1200
    assert ward["ward_number"] == 12


def test_update_revalidates_merged_document(service):
    async def scenario():
        await service.create_ward(_ward(12))
        await service.update_ward(12, {"name": "X"})

    with pytest.raises(ValidationFailed):
        asyncio.run(scenario())


def test_update_unknown_ward(service):
    with pytest.raises(NotFound):
        asyncio.run(service.update_ward(33, {"name": "Ghost ward"}))


def test_deactivated_ward_is_hidden_but_kept(service, db):
    async def scenario():
        await service.create_ward(_ward(12))
        await service.create_ward(_ward(13))
        await service.deactivate_ward(12)
        return await service.list_wards()

    wards = asyncio.run(scenario())

    assert [w["ward_number"] for w in wards] == [13]
    assert db.collection("wards").document("12").get().exists
    with pytest.raises(NotFound):
        asyncio.run(service.get_ward(12))
    assert asyncio.run(service.has_any_ward()) is True


def test_inactive_ward_number_still_conflicts(service):
    async def scenario():
        await service.create_ward(_ward(12))
        await service.deactivate_ward(12)
        await service.create_ward(_ward(12))

    with pytest.raises(Conflict):
        asyncio.run(scenario())


def test_counts_are_computed_from_problems(service, seed_problems):
    seed_problems(2, ward_number=12, status="Open")
    seed_problems(1, ward_number=12, status="Resolved", start=10)
    seed_problems(4, ward_number=13, status="In Progress", start=20)

    async def scenario():
        await service.create_ward(_ward(12))
        return await service.get_ward(12)

    ward = asyncio.run(scenario())

    assert ward["active_problems"] == 2
    assert ward["total_problems"] == 3


def test_list_orders_by_ward_number(service):
    async def scenario():
        for number in (7, 2, 5):
            await service.create_ward(_ward(number))
        return await service.list_wards()

    assert [w["ward_number"] for w in asyncio.run(scenario())] == [2, 5, 7]


def test_empty_store_has_no_wards(service):
    assert asyncio.run(service.has_any_ward()) is False
