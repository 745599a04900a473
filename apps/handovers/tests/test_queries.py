import uuid
from decimal import Decimal

import pytest

from apps.handovers.models import HandoverStatus, HandoverType
from apps.handovers.services import (
    HandoverNotFoundError,
    UnauthorizedError,
    ValidationError,
    bank_deposits,
    cash_flow_summary,
    get_handover,
    handover_chain,
    pending_for_user,
    station_handovers,
    unconfirmed_handovers,
)
from apps.stations.services import StationNotFoundError


@pytest.mark.django_db
class TestPendingForUser:

    def test_recipient_sees_own_pending(self, manager, pending_to_manager, pending_handover):
        pending = pending_for_user(actor=manager)

        assert pending == [pending_to_manager]

    def test_owner_sees_every_pending_at_owned_stations(
        self, owner, pending_to_manager, pending_handover, make_handover, other_station, outsider_manager, other_owner
    ):
        make_handover(station_obj=other_station, from_user=outsider_manager, to_user=other_owner)

        pending = pending_for_user(actor=owner)

        assert set(pending) == {pending_to_manager, pending_handover}

    def test_confirmed_not_listed(self, owner, confirmed_manager_to_owner):
        assert pending_for_user(actor=owner) == []

    def test_newest_business_date_first(self, owner, make_handover, days_ago):
        older = make_handover(handover_date=days_ago(2))
        newer = make_handover(handover_date=days_ago(1))
        same_day_later = make_handover(handover_date=days_ago(1))

        assert pending_for_user(actor=owner) == [same_day_later, newer, older]

    def test_station_filter(self, owner, station, pending_handover):
        assert pending_for_user(actor=owner, station_id=station.id) == [pending_handover]

    def test_inaccessible_station_filter(self, manager, other_station):
        with pytest.raises(UnauthorizedError):
            pending_for_user(actor=manager, station_id=other_station.id)


@pytest.mark.django_db
class TestStationHandovers:

    def test_filters(self, manager, station, pending_handover, pending_to_manager, confirmed_manager_to_owner):
        result = station_handovers(
            actor=manager,
            station_id=station.id,
            handover_type=HandoverType.MANAGER_TO_OWNER,
            status=HandoverStatus.PENDING,
        )

        assert list(result) == [pending_handover]

    def test_date_range(self, manager, station, make_handover, days_ago):
        make_handover(handover_date=days_ago(10))
        in_range = make_handover(handover_date=days_ago(3))

        result = station_handovers(
            actor=manager,
            station_id=station.id,
            start_date=days_ago(5),
            end_date=days_ago(1),
        )

        assert list(result) == [in_range]

    def test_inverted_range(self, manager, station, days_ago):
        with pytest.raises(ValidationError):
            station_handovers(actor=manager, station_id=station.id, start_date=days_ago(1), end_date=days_ago(5))

    def test_unknown_status(self, manager, station):
        with pytest.raises(ValidationError):
            station_handovers(actor=manager, station_id=station.id, status='lost')

    def test_foreign_station(self, manager, other_station):
        with pytest.raises(UnauthorizedError):
            station_handovers(actor=manager, station_id=other_station.id)

    def test_missing_station(self, manager):
        with pytest.raises(StationNotFoundError):
            station_handovers(actor=manager, station_id=uuid.uuid4())


@pytest.mark.django_db
class TestCashFlowSummary:

    def test_groups_and_totals(self, owner, station, make_handover, days_ago):
        make_handover(handover_type=HandoverType.SHIFT_COLLECTION, status=HandoverStatus.CONFIRMED, expected_amount='1000.00')
        make_handover(handover_type=HandoverType.SHIFT_COLLECTION, status=HandoverStatus.CONFIRMED, expected_amount='500.00')
        make_handover(
            handover_type=HandoverType.MANAGER_TO_OWNER,
            status=HandoverStatus.DISPUTED,
            expected_amount='1500.00',
            actual_amount='1400.00',
        )
        make_handover(handover_type=HandoverType.EMPLOYEE_TO_MANAGER, expected_amount='300.00')
        make_handover(expected_amount='999.00', handover_date=days_ago(30))

        summary = cash_flow_summary(
            actor=owner,
            station_id=station.id,
            start_date=days_ago(7),
            end_date=days_ago(0),
        )

        groups = {(row['handover_type'], row['status']): row for row in summary['groups']}
        collections = groups[('shift_collection', 'confirmed')]
        assert collections['count'] == 2
        assert collections['total_expected'] == Decimal('1500.00')
        assert collections['total_actual'] == Decimal('1500.00')

        disputed = groups[('manager_to_owner', 'disputed')]
        assert disputed['total_difference'] == Decimal('-100.00')

        pending = groups[('employee_to_manager', 'pending')]
        assert pending['total_actual'] == Decimal('0.00')

        by_type = {row['handover_type']: row for row in summary['by_type']}
        assert [row['handover_type'] for row in summary['by_type']] == [
            'shift_collection', 'employee_to_manager', 'manager_to_owner', 'deposit_to_bank',
        ]
        assert by_type['deposit_to_bank']['count'] == 0
        assert by_type['shift_collection']['total_expected'] == Decimal('1500.00')

        assert summary['pending_count'] == 1
        assert summary['disputed_count'] == 1

    def test_employee_of_station_can_read(self, employee, station, days_ago):
        summary = cash_flow_summary(actor=employee, station_id=station.id, start_date=days_ago(1), end_date=days_ago(0))

        assert summary['pending_count'] == 0

    def test_foreign_owner(self, other_owner, station, days_ago):
        with pytest.raises(UnauthorizedError):
            cash_flow_summary(actor=other_owner, station_id=station.id, start_date=days_ago(1), end_date=days_ago(0))


@pytest.mark.django_db
class TestUnconfirmedHandovers:

    def test_default_window(self, manager, station, make_handover, days_ago, handover_config):
        make_handover(handover_date=days_ago(8))
        oldest_in_window = make_handover(handover_date=days_ago(7))
        today = make_handover(handover_date=days_ago(0))
        make_handover(handover_date=days_ago(-1))
        make_handover(handover_date=days_ago(1), status=HandoverStatus.CONFIRMED)

        result = unconfirmed_handovers(actor=manager, station_id=station.id, config=handover_config)

        assert result == [oldest_in_window, today]

    def test_end_date_capped_at_today(self, manager, station, make_handover, days_ago, handover_config):
        make_handover(handover_date=days_ago(-3))

        result = unconfirmed_handovers(
            actor=manager,
            station_id=station.id,
            start_date=days_ago(1),
            end_date=days_ago(-5),
            config=handover_config,
        )

        assert result == []

    def test_foreign_station(self, outsider_manager, station, handover_config):
        with pytest.raises(UnauthorizedError):
            unconfirmed_handovers(actor=outsider_manager, station_id=station.id, config=handover_config)


@pytest.mark.django_db
class TestBankDeposits:

    def test_running_total(self, owner, station, make_handover, days_ago):
        first = make_handover(
            handover_type=HandoverType.DEPOSIT_TO_BANK,
            status=HandoverStatus.CONFIRMED,
            expected_amount='1000.00',
            from_user=owner,
            handover_date=days_ago(3),
        )
        second = make_handover(
            handover_type=HandoverType.DEPOSIT_TO_BANK,
            status=HandoverStatus.CONFIRMED,
            expected_amount='2500.50',
            from_user=owner,
            handover_date=days_ago(1),
        )
        make_handover(
            handover_type=HandoverType.DEPOSIT_TO_BANK,
            status=HandoverStatus.CONFIRMED,
            expected_amount='9999.00',
            from_user=owner,
            handover_date=days_ago(20),
        )

        report = bank_deposits(actor=owner, station_id=station.id, start_date=days_ago(7), end_date=days_ago(0))

        assert report['deposits'] == [first, second]
        assert report['deposits'][0].running_total == Decimal('1000.00')
        assert report['deposits'][1].running_total == Decimal('3500.50')
        assert report['total_deposited'] == Decimal('3500.50')

    def test_empty_range(self, owner, station, days_ago):
        report = bank_deposits(actor=owner, station_id=station.id, start_date=days_ago(7), end_date=days_ago(0))

        assert report['deposits'] == []
        assert report['total_deposited'] == Decimal('0.00')

    def test_manager_cannot_view(self, manager, station, days_ago):
        with pytest.raises(UnauthorizedError):
            bank_deposits(actor=manager, station_id=station.id, start_date=days_ago(7), end_date=days_ago(0))


@pytest.mark.django_db
class TestHandoverLookup:

    def test_get_handover(self, manager, pending_to_manager):
        assert get_handover(actor=manager, handover_id=pending_to_manager.id) == pending_to_manager

    def test_get_handover_foreign(self, outsider_manager, pending_to_manager):
        with pytest.raises(UnauthorizedError):
            get_handover(actor=outsider_manager, handover_id=pending_to_manager.id)

    def test_get_handover_missing(self, manager):
        with pytest.raises(HandoverNotFoundError):
            get_handover(actor=manager, handover_id=uuid.uuid4())

    def test_chain_walks_back_to_first_stage(self, owner, make_handover, confirmed_employee_to_manager, manager):
        to_owner = make_handover(
            handover_type=HandoverType.MANAGER_TO_OWNER,
            status=HandoverStatus.CONFIRMED,
            expected_amount='2000.00',
            from_user=manager,
            to_user=owner,
            previous_handover=confirmed_employee_to_manager,
        )

        chain = handover_chain(actor=owner, handover_id=to_owner.id)

        assert [h.handover_type for h in chain] == [
            HandoverType.SHIFT_COLLECTION,
            HandoverType.EMPLOYEE_TO_MANAGER,
            HandoverType.MANAGER_TO_OWNER,
        ]
        assert chain[-1] == to_owner

    def test_chain_of_first_stage(self, manager, confirmed_shift_collection):
        assert handover_chain(actor=manager, handover_id=confirmed_shift_collection.id) == [confirmed_shift_collection]
