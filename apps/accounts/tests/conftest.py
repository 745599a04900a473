import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.stations.models import Station


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def owner(db):
    """Create and return a station owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        name='Station Owner',
        role=UserRole.OWNER,
    )


@pytest.fixture
def station(owner):
    """Create and return a station."""
    return Station.objects.create(owner=owner, name='Ring Road Fuels', code='RRF-01', city='Nagpur')


@pytest.fixture
def user(station):
    """Create and return a manager assigned to the station."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
        role=UserRole.MANAGER,
        station=station,
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
