import pytest
from apps.accounts.models import User, UserRole
from apps.stations.models import Station


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        name='Olivia Owner',
        role=UserRole.OWNER,
    )


@pytest.fixture
def station(owner):
    return Station.objects.create(owner=owner, name='Highway Fuels', code='HWF-01', city='Pune')
