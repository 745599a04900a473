"""
Chain linking queries.

Links are derived from the append-only handover log instead of being
maintained as mutable back-pointers: a confirmed record counts as consumed
once a record of the next stage was created (in the same scope) after the
record was confirmed.

Scope is the whole station, except for shift collections, which are scoped
to the employee who handed them over.
"""

from decimal import Decimal

from django.db.models import DecimalField, Max, QuerySet, Sum, Value
from django.db.models.functions import Coalesce

from apps.handovers.models import CashHandover, HandoverStatus, HandoverType, successor_type


def scope_user_id(handover_type, from_user_id):
    """Return the giver a stage's predecessor lookup is scoped to, or None for station scope."""
    if handover_type == HandoverType.EMPLOYEE_TO_MANAGER:
        return from_user_id
    return None


def stage_records(station_id, handover_type, from_user_id=None) -> QuerySet[CashHandover]:
    queryset = CashHandover.objects.filter(station_id=station_id, handover_type=handover_type)
    if from_user_id is not None:
        queryset = queryset.filter(from_user_id=from_user_id)
    return queryset


def confirmed_records(station_id, handover_type, from_user_id=None) -> QuerySet[CashHandover]:
    return stage_records(station_id, handover_type, from_user_id).filter(
        status=HandoverStatus.CONFIRMED
    )


def consumption_cutoff(station_id, handover_type, from_user_id=None):
    """
    Creation time of the newest record of the stage after ``handover_type``.

    Confirmed records of ``handover_type`` confirmed at or before this time
    have already been carried forward. None when nothing was carried yet.
    """
    next_type = successor_type(handover_type)
    if next_type is None:
        return None
    return (
        stage_records(station_id, next_type, from_user_id)
        .aggregate(latest=Max('created_at'))['latest']
    )


def unconsumed_records(station_id, handover_type, from_user_id=None) -> QuerySet[CashHandover]:
    """Confirmed records of ``handover_type`` not yet carried into the next stage."""
    queryset = confirmed_records(station_id, handover_type, from_user_id)
    cutoff = consumption_cutoff(station_id, handover_type, from_user_id)
    if cutoff is not None:
        queryset = queryset.filter(confirmed_at__gt=cutoff)
    return queryset


def newest_first(queryset):
    return queryset.order_by('-handover_date', '-created_at').first()


def total_expected(queryset) -> Decimal:
    return queryset.aggregate(
        total=Coalesce(
            Sum('expected_amount'),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )['total']


def walk_back(handover):
    """Return ``handover`` and its predecessors, oldest first."""
    chain = []
    seen = set()
    current = handover
    while current is not None and current.id not in seen:
        seen.add(current.id)
        chain.append(current)
        current = current.previous_handover
    chain.reverse()
    return chain
