import uuid

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from apps.accounts.models import UserRole
from apps.stations.access import accessible_station_ids, can_access_station, is_owner_or_admin
from apps.stations.permissions import CanAccessStation, HasMinRole
from apps.stations.services import get_station, StationNotFoundError


class _View:
    def __init__(self, **kwargs):
        self.kwargs = kwargs


# =============================================================================
# can_access_station Tests
# =============================================================================

@pytest.mark.django_db
class TestCanAccessStation:

    def test_super_admin_reaches_every_station(self, super_admin, station, other_station):
        assert can_access_station(super_admin, station.id) is True
        assert can_access_station(super_admin, other_station.id) is True

    def test_owner_reaches_owned_stations_only(self, owner, station, second_station, other_station):
        assert can_access_station(owner, station.id) is True
        assert can_access_station(owner, second_station.id) is True
        assert can_access_station(owner, other_station.id) is False

    def test_manager_reaches_assigned_station_only(self, manager, station, second_station):
        assert can_access_station(manager, station.id) is True
        assert can_access_station(manager, second_station.id) is False

    def test_employee_reaches_assigned_station_only(self, employee, station, other_station):
        assert can_access_station(employee, station.id) is True
        assert can_access_station(employee, other_station.id) is False

    def test_station_id_as_string(self, manager, station):
        assert can_access_station(manager, str(station.id)) is True

    def test_unassigned_manager_reaches_nothing(self, manager, station):
        manager.station = None
        assert can_access_station(manager, station.id) is False

    def test_missing_station_id(self, super_admin):
        assert can_access_station(super_admin, None) is False

    def test_anonymous_user(self, station):
        assert can_access_station(AnonymousUser(), station.id) is False

    def test_unknown_station_for_owner(self, owner):
        assert can_access_station(owner, uuid.uuid4()) is False


@pytest.mark.django_db
class TestAccessibleStationIds:

    def test_owner(self, owner, station, second_station, other_station):
        assert set(accessible_station_ids(owner)) == {station.id, second_station.id}

    def test_manager(self, manager, station, second_station):
        assert accessible_station_ids(manager) == [station.id]

    def test_super_admin(self, super_admin, station, other_station):
        assert set(accessible_station_ids(super_admin)) == {station.id, other_station.id}

    def test_is_owner_or_admin(self, owner, super_admin, manager):
        assert is_owner_or_admin(owner)
        assert is_owner_or_admin(super_admin)
        assert not is_owner_or_admin(manager)


# =============================================================================
# Permission class Tests
# =============================================================================

@pytest.mark.django_db
class TestCanAccessStationPermission:

    def test_url_station_id_allowed(self, manager, station):
        request = APIRequestFactory().get('/')
        request.user = manager

        permission = CanAccessStation()
        assert permission.has_permission(request, _View(station_id=station.id)) is True

    def test_url_station_id_denied(self, manager, other_station):
        request = APIRequestFactory().get('/')
        request.user = manager

        permission = CanAccessStation()
        assert permission.has_permission(request, _View(station_id=other_station.id)) is False

    def test_no_station_in_url(self, manager):
        request = APIRequestFactory().get('/')
        request.user = manager

        assert CanAccessStation().has_permission(request, _View()) is True

    def test_object_permission(self, owner, station, other_station):
        request = APIRequestFactory().get('/')
        request.user = owner

        permission = CanAccessStation()
        assert permission.has_object_permission(request, None, station) is True
        assert permission.has_object_permission(request, None, other_station) is False


@pytest.mark.django_db
class TestHasMinRole:

    def test_employee_below_manager(self, employee):
        request = APIRequestFactory().post('/')
        request.user = employee

        assert HasMinRole.at_least(UserRole.MANAGER)().has_permission(request, None) is False

    def test_manager_meets_manager(self, manager):
        request = APIRequestFactory().post('/')
        request.user = manager

        assert HasMinRole.at_least(UserRole.MANAGER)().has_permission(request, None) is True

    def test_owner_meets_manager(self, owner):
        request = APIRequestFactory().post('/')
        request.user = owner

        assert HasMinRole.at_least(UserRole.MANAGER)().has_permission(request, None) is True

    def test_manager_below_owner(self, manager):
        request = APIRequestFactory().post('/')
        request.user = manager

        assert HasMinRole.at_least(UserRole.OWNER)().has_permission(request, None) is False

    def test_anonymous(self):
        request = APIRequestFactory().post('/')
        request.user = AnonymousUser()

        assert HasMinRole.at_least(UserRole.EMPLOYEE)().has_permission(request, None) is False


# =============================================================================
# Lookup Tests
# =============================================================================

@pytest.mark.django_db
class TestGetStation:

    def test_found(self, station):
        assert get_station(station_id=station.id) == station

    def test_missing(self):
        with pytest.raises(StationNotFoundError):
            get_station(station_id=uuid.uuid4())

    def test_malformed(self):
        with pytest.raises(StationNotFoundError):
            get_station(station_id='nope')
