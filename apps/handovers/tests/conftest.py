import pytest
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.handovers.config import HandoverConfig, SequenceMode
from apps.handovers.models import CashHandover, HandoverStatus, HandoverType
from apps.stations.models import Station


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


# =============================================================================
# Users and stations
# =============================================================================

@pytest.fixture
def owner(db):
    """Create and return the station owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        name='Olivia Owner',
        role=UserRole.OWNER,
    )


@pytest.fixture
def other_owner(db):
    """Create and return the owner of an unrelated station."""
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
        name='Admin',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def station(owner):
    return Station.objects.create(owner=owner, name='Highway Fuels', code='HWF-01', city='Pune')


@pytest.fixture
def other_station(other_owner):
    return Station.objects.create(owner=other_owner, name='Harbour Fuels', code='HBF-01', city='Kochi')


@pytest.fixture
def manager(station):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        name='Manoj Manager',
        role=UserRole.MANAGER,
        station=station,
    )


@pytest.fixture
def second_manager(station):
    """Another manager at the same station."""
    return User.objects.create_user(
        email='manager2@example.com',
        password='TestPass123!',
        name='Second Manager',
        role=UserRole.MANAGER,
        station=station,
    )


@pytest.fixture
def employee(station, manager):
    return User.objects.create_user(
        email='ravi@example.com',
        password='TestPass123!',
        name='Ravi',
        role=UserRole.EMPLOYEE,
        station=station,
        manager=manager,
    )


@pytest.fixture
def employee_2(station, manager):
    return User.objects.create_user(
        email='sita@example.com',
        password='TestPass123!',
        name='Sita',
        role=UserRole.EMPLOYEE,
        station=station,
        manager=manager,
    )


@pytest.fixture
def outsider_manager(other_station):
    """Manager of a station the main owner does not own."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        name='Outsider',
        role=UserRole.MANAGER,
        station=other_station,
    )


@pytest.fixture
def outsider_employee(other_station):
    return User.objects.create_user(
        email='outsider-employee@example.com',
        password='TestPass123!',
        role=UserRole.EMPLOYEE,
        station=other_station,
    )


# =============================================================================
# Config
# =============================================================================

@pytest.fixture
def handover_config():
    """Default workflow settings."""
    return HandoverConfig()


@pytest.fixture
def permissive_config():
    return HandoverConfig(sequence_mode=SequenceMode.PERMISSIVE)


# =============================================================================
# Handover factories
# =============================================================================

@pytest.fixture
def make_handover(station, manager, owner):
    """
    Build handover rows directly, bypassing the ledger.

    Confirmed, disputed and resolved rows get confirmation fields filled in
    so they behave like rows the ledger produced.
    """
    def _make(
        handover_type=HandoverType.SHIFT_COLLECTION,
        status=HandoverStatus.PENDING,
        expected_amount='1000.00',
        actual_amount=None,
        from_user=None,
        to_user=None,
        handover_date=None,
        station_obj=None,
        previous_handover=None,
        **extra,
    ):
        expected = Decimal(expected_amount)
        handover = CashHandover(
            station=station_obj or station,
            handover_type=handover_type,
            handover_date=handover_date or timezone.localdate(),
            from_user=from_user or manager,
            to_user=to_user or owner,
            expected_amount=expected,
            status=status,
            previous_handover=previous_handover,
            **extra,
        )
        if status != HandoverStatus.PENDING:
            actual = Decimal(actual_amount) if actual_amount is not None else expected
            handover.actual_amount = actual
            handover.difference = actual - expected
            handover.confirmed_at = timezone.now()
            handover.confirmed_by = handover.to_user
        handover.save()
        return handover

    return _make


@pytest.fixture
def confirmed_shift_collection(make_handover, employee, manager):
    """Ravi's shift cash, confirmed by the manager."""
    return make_handover(
        handover_type=HandoverType.SHIFT_COLLECTION,
        status=HandoverStatus.CONFIRMED,
        expected_amount='2000.00',
        from_user=employee,
        to_user=manager,
    )


@pytest.fixture
def confirmed_employee_to_manager(make_handover, confirmed_shift_collection, employee, manager):
    """Ravi hands the shift cash to the manager, confirmed."""
    return make_handover(
        handover_type=HandoverType.EMPLOYEE_TO_MANAGER,
        status=HandoverStatus.CONFIRMED,
        expected_amount='2000.00',
        from_user=employee,
        to_user=manager,
        previous_handover=confirmed_shift_collection,
    )


@pytest.fixture
def confirmed_manager_to_owner(make_handover, manager, owner):
    """Manager hands 3000 to the owner, confirmed."""
    employee_leg = make_handover(
        handover_type=HandoverType.EMPLOYEE_TO_MANAGER,
        status=HandoverStatus.CONFIRMED,
        expected_amount='3000.00',
        to_user=manager,
    )
    return make_handover(
        handover_type=HandoverType.MANAGER_TO_OWNER,
        status=HandoverStatus.CONFIRMED,
        expected_amount='3000.00',
        from_user=manager,
        to_user=owner,
        previous_handover=employee_leg,
    )


@pytest.fixture
def pending_handover(make_handover, manager, owner):
    """A 5000 manager_to_owner waiting on the owner."""
    return make_handover(
        handover_type=HandoverType.MANAGER_TO_OWNER,
        expected_amount='5000.00',
        from_user=manager,
        to_user=owner,
    )


@pytest.fixture
def pending_to_manager(make_handover, employee, manager):
    """A 1000 employee_to_manager waiting on the manager."""
    return make_handover(
        handover_type=HandoverType.EMPLOYEE_TO_MANAGER,
        expected_amount='1000.00',
        from_user=employee,
        to_user=manager,
    )


@pytest.fixture
def disputed_handover(make_handover, manager, owner):
    return make_handover(
        handover_type=HandoverType.MANAGER_TO_OWNER,
        status=HandoverStatus.DISPUTED,
        expected_amount='5000.00',
        actual_amount='4500.00',
        from_user=manager,
        to_user=owner,
        dispute_notes='Discrepancy of ₹-500.00',
    )


@pytest.fixture
def days_ago():
    def _days_ago(days):
        return timezone.localdate() - timedelta(days=days)
    return _days_ago


# =============================================================================
# Clients
# =============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def manager_client(manager):
    return _client_for(manager)


@pytest.fixture
def employee_client(employee):
    return _client_for(employee)


@pytest.fixture
def outsider_client(outsider_manager):
    return _client_for(outsider_manager)


@pytest.fixture
def other_owner_client(other_owner):
    return _client_for(other_owner)
