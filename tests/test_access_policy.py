"""
Tests for the ward-scoped access policy.
"""

import pytest

from wardwatch.models.user import Actor, UserRole
from wardwatch.services.access_policy import (
    can_manage_wards,
    can_mutate_status,
    can_view,
    scope_ward_filter,
)


@pytest.fixture
def resident() -> Actor:
    return Actor(id="u-1", role=UserRole.RESIDENT, ward_number=3)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="u-admin", role=UserRole.ADMIN, ward_number=1)


class TestCanView:

    def test_resident_sees_own_ward(self, resident):
        assert can_view(resident, 3) is True

    def test_resident_cannot_see_other_ward(self, resident):
        assert can_view(resident, 4) is False

    @pytest.mark.parametrize("ward_number", [1, 3, 50])
    def test_admin_sees_every_ward(self, admin, ward_number):
        assert can_view(admin, ward_number) is True


class TestMutation:

    def test_only_admin_mutates_status(self, resident, admin):
        assert can_mutate_status(resident) is False
        assert can_mutate_status(admin) is True

    def test_only_admin_manages_wards(self, resident, admin):
        assert can_manage_wards(resident) is False
        assert can_manage_wards(admin) is True


class TestScopeWardFilter:
    """Listings narrow instead of failing."""

    def test_resident_pinned_to_own_ward(self, resident):
        assert scope_ward_filter(resident, None) == 3
        assert scope_ward_filter(resident, 7) == 3

    def test_admin_gets_requested_ward(self, admin):
        assert scope_ward_filter(admin, 7) == 7

    def test_admin_without_filter_sees_all(self, admin):
        assert scope_ward_filter(admin, None) is None
