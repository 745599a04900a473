"""
Read side of the handover ledger.

Every function checks station access before touching handover rows and
runs inside one transaction so aggregates come from a single snapshot.
Results are querysets, model instances or plain dicts; shaping for the API
happens in the serializers.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, DecimalField, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User
from apps.handovers.config import HandoverConfig
from apps.handovers.models import CashHandover, HandoverStatus, HandoverType, HANDOVER_CHAIN
from apps.stations.access import accessible_station_ids, can_access_station, is_owner_or_admin
from apps.stations.models import Station
from apps.stations.services import get_station

from . import chain
from .exceptions import HandoverNotFoundError, UnauthorizedError, ValidationError

ZERO = Decimal('0.00')

RELATED_FIELDS = (
    'station',
    'from_user',
    'to_user',
    'confirmed_by',
    'resolved_by',
)


def _sum(field):
    return Coalesce(Sum(field), Value(ZERO), output_field=DecimalField(max_digits=14, decimal_places=2))


def _accessible_station(actor: User, station_id: UUID) -> Station:
    station = get_station(station_id=station_id)
    if not can_access_station(actor, station.id):
        raise UnauthorizedError("Not authorized to access this station")
    return station


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must be on or before end_date")


def _newest_first(queryset):
    return queryset.order_by('-handover_date', '-created_at')


@transaction.atomic
def get_handover(*, actor: User, handover_id: UUID) -> CashHandover:
    """
    Fetch one handover the actor may see.

    Raises:
        HandoverNotFoundError: If the handover doesn't exist
        UnauthorizedError: If the actor cannot access its station
    """
    try:
        handover = CashHandover.objects.select_related(*RELATED_FIELDS).get(id=handover_id)
    except (CashHandover.DoesNotExist, ValueError, DjangoValidationError):
        raise HandoverNotFoundError("Handover not found")
    if not can_access_station(actor, handover.station_id):
        raise UnauthorizedError("Not authorized to access this station")
    return handover


@transaction.atomic
def pending_for_user(*, actor: User, station_id: Optional[UUID] = None) -> list:
    """
    Handovers waiting on the actor.

    Everyone sees what is addressed to them. Owners and super admins also see
    every pending handover at stations they can access, so they can step in
    for an absent recipient.

    Raises:
        UnauthorizedError: If ``station_id`` is given and not accessible
    """
    if station_id is not None and not can_access_station(actor, station_id):
        raise UnauthorizedError("Not authorized to access this station")

    waiting_on = Q(to_user=actor)
    if is_owner_or_admin(actor):
        waiting_on |= Q(station_id__in=accessible_station_ids(actor))

    queryset = CashHandover.objects.filter(waiting_on, status=HandoverStatus.PENDING)
    if station_id is not None:
        queryset = queryset.filter(station_id=station_id)

    return list(_newest_first(queryset.select_related(*RELATED_FIELDS)))


def station_handovers(
    *,
    actor: User,
    station_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    handover_type: Optional[str] = None,
    status: Optional[str] = None,
) -> QuerySet[CashHandover]:
    """
    Filtered history of a station, newest first.

    Returns a lazy queryset; the caller paginates it.

    Raises:
        StationNotFoundError: If the station doesn't exist
        UnauthorizedError: If the actor cannot access the station
        ValidationError: If a filter value is not a known choice or the range is inverted
    """
    station = _accessible_station(actor, station_id)
    _check_range(start_date, end_date)

    queryset = CashHandover.objects.filter(station=station)
    if start_date:
        queryset = queryset.filter(handover_date__gte=start_date)
    if end_date:
        queryset = queryset.filter(handover_date__lte=end_date)
    if handover_type:
        if handover_type not in HandoverType.values:
            raise ValidationError(f"Unknown handover type: {handover_type}")
        queryset = queryset.filter(handover_type=handover_type)
    if status:
        if status not in HandoverStatus.values:
            raise ValidationError(f"Unknown status: {status}")
        queryset = queryset.filter(status=status)

    return _newest_first(queryset.select_related(*RELATED_FIELDS))


@transaction.atomic
def cash_flow_summary(*, actor: User, station_id: UUID, start_date: date, end_date: date) -> dict:
    """
    Aggregate a station's handovers over a date range.

    Returns:
        dict with keys:
            - groups: one row per (handover_type, status) with count and
              expected / actual / difference totals
            - by_type: per-stage count and totals in chain order
            - pending_count, disputed_count

    Raises:
        StationNotFoundError: If the station doesn't exist
        UnauthorizedError: If the actor cannot access the station
        ValidationError: If the range is inverted
    """
    station = _accessible_station(actor, station_id)
    _check_range(start_date, end_date)

    queryset = CashHandover.objects.filter(
        station=station,
        handover_date__gte=start_date,
        handover_date__lte=end_date,
    )

    groups = list(
        queryset.values('handover_type', 'status')
        .annotate(
            count=Count('id'),
            total_expected=_sum('expected_amount'),
            total_actual=_sum('actual_amount'),
            total_difference=_sum('difference'),
        )
        .order_by('handover_type', 'status')
    )

    by_type = []
    for handover_type in HANDOVER_CHAIN:
        rows = [row for row in groups if row['handover_type'] == handover_type]
        by_type.append({
            'handover_type': handover_type.value,
            'count': sum(row['count'] for row in rows),
            'total_expected': sum((row['total_expected'] for row in rows), ZERO),
            'total_actual': sum((row['total_actual'] for row in rows), ZERO),
            'total_difference': sum((row['total_difference'] for row in rows), ZERO),
        })

    counts = queryset.aggregate(
        pending_count=Count('id', filter=Q(status=HandoverStatus.PENDING)),
        disputed_count=Count('id', filter=Q(status=HandoverStatus.DISPUTED)),
    )

    return {
        'station_id': station.id,
        'start_date': start_date,
        'end_date': end_date,
        'groups': groups,
        'by_type': by_type,
        'pending_count': counts['pending_count'],
        'disputed_count': counts['disputed_count'],
    }


@transaction.atomic
def unconfirmed_handovers(
    *,
    actor: User,
    station_id: UUID,
    config: HandoverConfig,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list:
    """
    Pending handovers still open within a window, oldest first.

    The window defaults to the last ``unconfirmed_lookback_days`` days and
    never extends past today.

    Raises:
        StationNotFoundError: If the station doesn't exist
        UnauthorizedError: If the actor cannot access the station
        ValidationError: If the range is inverted
    """
    station = _accessible_station(actor, station_id)

    today = timezone.localdate()
    end_date = min(end_date or today, today)
    start_date = start_date or today - timedelta(days=config.unconfirmed_lookback_days)
    _check_range(start_date, end_date)

    return list(
        CashHandover.objects.filter(
            station=station,
            status=HandoverStatus.PENDING,
            handover_date__gte=start_date,
            handover_date__lte=end_date,
        )
        .select_related(*RELATED_FIELDS)
        .order_by('handover_date', 'created_at')
    )


@transaction.atomic
def bank_deposits(*, actor: User, station_id: UUID, start_date: date, end_date: date) -> dict:
    """
    Confirmed bank deposits in a range with a running total.

    Each returned handover carries a ``running_total`` attribute: the sum of
    its own amount and every earlier deposit in the range.

    Raises:
        UnauthorizedError: If the actor is not an owner/super_admin of the station
        StationNotFoundError: If the station doesn't exist
        ValidationError: If the range is inverted
    """
    if not is_owner_or_admin(actor):
        raise UnauthorizedError("Only owners can view bank deposits")
    station = _accessible_station(actor, station_id)
    _check_range(start_date, end_date)

    deposits = list(
        CashHandover.objects.filter(
            station=station,
            handover_type=HandoverType.DEPOSIT_TO_BANK,
            status=HandoverStatus.CONFIRMED,
            handover_date__gte=start_date,
            handover_date__lte=end_date,
        )
        .select_related(*RELATED_FIELDS)
        .order_by('handover_date', 'created_at')
    )

    running_total = ZERO
    for deposit in deposits:
        running_total += deposit.actual_amount if deposit.actual_amount is not None else deposit.expected_amount
        deposit.running_total = running_total

    return {
        'station_id': station.id,
        'start_date': start_date,
        'end_date': end_date,
        'deposits': deposits,
        'total_deposited': running_total,
    }


@transaction.atomic
def handover_chain(*, actor: User, handover_id: UUID) -> list:
    """
    The handover and its predecessors back to the first stage, oldest first.

    Raises:
        HandoverNotFoundError: If the handover doesn't exist
        UnauthorizedError: If the actor cannot access its station
    """
    handover = get_handover(actor=actor, handover_id=handover_id)
    return chain.walk_back(handover)
