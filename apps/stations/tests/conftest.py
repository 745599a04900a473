import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.stations.models import Station


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        name='Station Owner',
        role=UserRole.OWNER,
    )


@pytest.fixture
def other_owner(db):
    return User.objects.create_user(
        email='other-owner@example.com',
        password='TestPass123!',
        name='Other Owner',
        role=UserRole.OWNER,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def station(owner):
    return Station.objects.create(owner=owner, name='Ring Road Fuels', code='RRF-01', city='Nagpur')


@pytest.fixture
def second_station(owner):
    """Another station of the same owner."""
    return Station.objects.create(owner=owner, name='Airport Fuels', code='APF-01', city='Nagpur')


@pytest.fixture
def other_station(other_owner):
    return Station.objects.create(owner=other_owner, name='Harbour Fuels', code='HBF-01', city='Kochi')


@pytest.fixture
def manager(station):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        name='Manager',
        role=UserRole.MANAGER,
        station=station,
    )


@pytest.fixture
def employee(station, manager):
    return User.objects.create_user(
        email='employee@example.com',
        password='TestPass123!',
        name='Employee',
        role=UserRole.EMPLOYEE,
        station=station,
        manager=manager,
    )


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def manager_client(manager):
    return _client_for(manager)


@pytest.fixture
def admin_client(super_admin):
    return _client_for(super_admin)
