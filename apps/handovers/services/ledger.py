"""
Handover ledger.

The state machine behind the cash chain of custody:

    shift_collection -> employee_to_manager -> manager_to_owner -> deposit_to_bank

Every state-changing function runs as one transaction. Creation locks the
station row so concurrent creates for a station serialize and re-check
predecessor availability. Confirmation takes the same station lock before
the handover row, since stamping confirmed_at changes which records count
as available. Resolution locks only the handover row. Status is read once
the locks are held.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.accounts.services import get_user
from apps.audit.services import schedule_audit
from apps.handovers.config import HandoverConfig
from apps.handovers.models import (
    CashHandover,
    HandoverStatus,
    HandoverType,
    predecessor_type,
)
from apps.stations.access import can_access_station, is_owner_or_admin
from apps.stations.models import Station
from apps.stations.services import get_station_for_update

from . import chain
from .exceptions import (
    AmountMismatchError,
    HandoverNotFoundError,
    InvalidStateError,
    MissingAmountError,
    SequenceViolationError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')

CREATOR_ROLES = (UserRole.MANAGER, UserRole.OWNER, UserRole.SUPER_ADMIN)
OWNER_ROLES = (UserRole.OWNER, UserRole.SUPER_ADMIN)


@dataclass(frozen=True)
class StageRule:
    creator_roles: tuple
    # the stage needs cash that no earlier handover carried forward yet
    requires_unconsumed: bool = False
    # permissive mode lets this stage open a first-ever cycle without a predecessor
    permissive_start: bool = False
    missing_message: str = ''


STAGE_RULES = {
    HandoverType.SHIFT_COLLECTION: StageRule(creator_roles=CREATOR_ROLES),
    HandoverType.EMPLOYEE_TO_MANAGER: StageRule(
        creator_roles=CREATOR_ROLES,
        permissive_start=True,
        missing_message='No confirmed shift_collection found for this employee',
    ),
    HandoverType.MANAGER_TO_OWNER: StageRule(
        creator_roles=CREATOR_ROLES,
        requires_unconsumed=True,
        missing_message='No confirmed employee_to_manager found for this station',
    ),
    HandoverType.DEPOSIT_TO_BANK: StageRule(
        creator_roles=OWNER_ROLES,
        requires_unconsumed=True,
        missing_message='No confirmed manager_to_owner left to deposit for this station',
    ),
}


def stage_rule(handover_type) -> StageRule:
    try:
        return STAGE_RULES[handover_type]
    except KeyError:
        raise ValidationError(f"Unknown handover type: {handover_type}")


# =============================================================================
# Helpers
# =============================================================================

def as_amount(value, field='amount') -> Decimal:
    """
    Convert input to a non-negative currency Decimal with two places.

    Raises:
        ValidationError: if the value is not a number or is negative
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} must be non-negative")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def as_handover_type(value) -> HandoverType:
    try:
        return HandoverType(value)
    except ValueError:
        raise ValidationError(f"Unknown handover type: {value}")


def derive_recipient(handover_type, *, actor: User, station: Station, from_user: User) -> User:
    """Work out who has to confirm a new handover."""
    if handover_type in (HandoverType.SHIFT_COLLECTION, HandoverType.EMPLOYEE_TO_MANAGER):
        return from_user.manager or actor
    if handover_type == HandoverType.MANAGER_TO_OWNER:
        return station.owner
    if handover_type == HandoverType.DEPOSIT_TO_BANK:
        return from_user
    raise ValidationError(f"Unknown handover type: {handover_type}")


def handover_station_id(handover_id: UUID) -> UUID:
    try:
        station_id = (
            CashHandover.objects
            .filter(id=handover_id)
            .values_list('station_id', flat=True)
            .first()
        )
    except (ValueError, DjangoValidationError):
        station_id = None
    if station_id is None:
        raise HandoverNotFoundError("Handover not found")
    return station_id


def lock_handover(handover_id: UUID) -> CashHandover:
    """Fetch and row-lock a handover. Must be called inside transaction.atomic."""
    try:
        return CashHandover.objects.select_for_update().get(id=handover_id)
    except (CashHandover.DoesNotExist, ValueError, DjangoValidationError):
        raise HandoverNotFoundError("Handover not found")


def check_deposit_tolerance(amount: Decimal, reference: CashHandover, config: HandoverConfig) -> None:
    """
    Compare a deposit against the manager_to_owner handover it closes.

    Raises:
        AmountMismatchError: if the gap exceeds the bank deposit tolerance
    """
    gap = abs(amount - reference.expected_amount)
    if gap > config.bank_deposit_tolerance:
        logger.warning(
            "Bank deposit %s rejected for station %s: expected %s (tolerance %s)",
            amount, reference.station_id, reference.expected_amount, config.bank_deposit_tolerance,
        )
        raise AmountMismatchError(
            f"Deposit amount {config.format_amount(amount)} differs from handed-over amount "
            f"{config.format_amount(reference.expected_amount)} by more than "
            f"{config.format_amount(config.bank_deposit_tolerance)}",
            expected=reference.expected_amount,
            actual=amount,
        )


def snapshot(handover: CashHandover) -> dict:
    """Audit-friendly view of the mutable handover fields."""
    return {
        'status': handover.status,
        'expected_amount': str(handover.expected_amount),
        'actual_amount': None if handover.actual_amount is None else str(handover.actual_amount),
        'difference': None if handover.difference is None else str(handover.difference),
    }


def resolve_giver(*, actor: User, station: Station, from_user_id) -> User:
    if from_user_id is None or str(from_user_id) == str(actor.id):
        from_user = actor
    else:
        from_user = get_user(user_id=from_user_id)
    if not can_access_station(from_user, station.id):
        raise ValidationError(f"{from_user.get_display_name()} does not belong to this station")
    return from_user


# =============================================================================
# Ledger operations
# =============================================================================

@transaction.atomic
def create_handover(
    *,
    actor: User,
    station_id: UUID,
    handover_type: str,
    config: HandoverConfig,
    handover_date: Optional[date] = None,
    from_user_id: Optional[UUID] = None,
    expected_amount=None,
    notes: str = '',
) -> CashHandover:
    """
    Create the next handover in a station's chain.

    Employees cannot initiate handovers; bank deposits need an owner. The
    recipient, predecessor link and (when omitted) the expected amount are
    derived from the chain. Bank deposits are self-attested and confirmed
    on creation; every other stage starts pending.

    Args:
        actor: User creating the handover
        station_id: Station the cash belongs to
        handover_type: One of HandoverType
        config: Workflow settings
        handover_date: Business date (defaults to today)
        from_user_id: Giver (defaults to actor)
        expected_amount: Declared amount; derived from unconsumed predecessors if omitted
        notes: Free-text notes

    Returns:
        The created CashHandover

    Raises:
        UnauthorizedError: If actor's role or station access is insufficient
        StationNotFoundError: If the station doesn't exist
        UserNotFoundError: If from_user_id doesn't exist
        SequenceViolationError: If the preceding stage has no confirmed record
        ValidationError: If input is malformed
    """
    if actor.role not in CREATOR_ROLES:
        raise UnauthorizedError("Only managers can create handovers")

    handover_type = as_handover_type(handover_type)
    rule = stage_rule(handover_type)
    if actor.role not in rule.creator_roles:
        raise UnauthorizedError("Only owners can record bank deposits")

    station = get_station_for_update(station_id=station_id)
    if not can_access_station(actor, station.id):
        raise UnauthorizedError("Not authorized to access this station")

    from_user = resolve_giver(actor=actor, station=station, from_user_id=from_user_id)
    declared = None if expected_amount is None else as_amount(expected_amount, 'expected_amount')

    previous = None
    derived = None
    required_type = predecessor_type(handover_type)
    if required_type is not None:
        scope = chain.scope_user_id(handover_type, from_user.id)
        available = chain.unconsumed_records(station.id, required_type, scope)
        if rule.requires_unconsumed:
            satisfied = available.exists()
        else:
            satisfied = chain.confirmed_records(station.id, required_type, scope).exists()

        if not satisfied and not (rule.permissive_start and not config.is_strict):
            raise SequenceViolationError(rule.missing_message, missing_stage=required_type)

        previous = chain.newest_first(available)
        if available.exists():
            derived = chain.total_expected(available)

    if declared is not None:
        amount = declared
    elif derived is not None:
        amount = derived
    else:
        raise ValidationError("expected_amount is required when there is no confirmed predecessor")

    if handover_type == HandoverType.DEPOSIT_TO_BANK and declared is not None and previous is not None:
        check_deposit_tolerance(amount, previous, config)

    handover = CashHandover(
        station=station,
        handover_type=handover_type,
        handover_date=handover_date or timezone.localdate(),
        from_user=from_user,
        to_user=derive_recipient(handover_type, actor=actor, station=station, from_user=from_user),
        expected_amount=amount,
        previous_handover=previous,
        notes=notes or '',
    )
    if handover_type == HandoverType.DEPOSIT_TO_BANK:
        handover.actual_amount = amount
        handover.difference = Decimal('0.00')
        handover.status = HandoverStatus.CONFIRMED
        handover.confirmed_at = timezone.now()
        handover.confirmed_by = actor
    handover.save()

    logger.info(
        "Handover %s created: %s %s at station %s",
        handover.id, handover_type, amount, station.id,
    )
    schedule_audit(
        actor=actor,
        action='CREATE',
        entity_type='CashHandover',
        entity_id=handover.id,
        station_id=station.id,
        new_values=snapshot(handover),
        category='finance',
        description=f"Created {handover_type} handover of {config.format_amount(amount)}",
    )
    return handover


@transaction.atomic
def create_shift_collection(
    *,
    actor: User,
    station_id: UUID,
    employee_id: UUID,
    cash_collected,
    config: HandoverConfig,
    expected_cash=None,
    handover_date: Optional[date] = None,
) -> CashHandover:
    """
    Record the cash an employee collected during a shift.

    This is the first link of a chain. The handover is addressed to the
    employee's manager, falling back to the station owner when the employee
    reports to nobody.

    Raises:
        UnauthorizedError: If actor cannot close shifts at this station
        StationNotFoundError: If the station doesn't exist
        UserNotFoundError: If the employee doesn't exist
        ValidationError: If the employee works elsewhere
    """
    if actor.role not in CREATOR_ROLES:
        raise UnauthorizedError("Only managers can close shifts")

    station = get_station_for_update(station_id=station_id)
    if not can_access_station(actor, station.id):
        raise UnauthorizedError("Not authorized to access this station")

    employee = resolve_giver(actor=actor, station=station, from_user_id=employee_id)
    collected = as_amount(cash_collected, 'cash_collected')

    notes = ''
    if expected_cash is not None:
        expected = as_amount(expected_cash, 'expected_cash')
        if expected != collected:
            notes = (
                f"Shift sales expected {config.format_amount(expected)}, "
                f"collected {config.format_amount(collected)}"
            )

    handover = CashHandover.objects.create(
        station=station,
        handover_type=HandoverType.SHIFT_COLLECTION,
        handover_date=handover_date or timezone.localdate(),
        from_user=employee,
        to_user=employee.manager or station.owner,
        expected_amount=collected,
        notes=notes,
    )

    logger.info("Shift collection %s recorded for %s at station %s", handover.id, employee.id, station.id)
    schedule_audit(
        actor=actor,
        action='CREATE',
        entity_type='CashHandover',
        entity_id=handover.id,
        station_id=station.id,
        new_values=snapshot(handover),
        category='finance',
        description=f"Shift collection of {config.format_amount(collected)}",
    )
    return handover


@transaction.atomic
def confirm_handover(
    *,
    actor: User,
    handover_id: UUID,
    config: HandoverConfig,
    actual_amount=None,
    accept_as_is: bool = False,
    notes: Optional[str] = None,
) -> CashHandover:
    """
    Confirm receipt of a pending handover.

    The recipient (or an owner/super_admin stepping in) states what was
    actually received. A difference beyond the dispute tolerance marks the
    handover disputed instead of confirmed.

    Raises:
        HandoverNotFoundError: If the handover doesn't exist
        InvalidStateError: If the handover is not pending
        UnauthorizedError: If actor is neither the recipient nor an owner
        MissingAmountError: If neither actual_amount nor accept_as_is is given
    """
    # Station before handover row, the same order create_handover locks in
    get_station_for_update(station_id=handover_station_id(handover_id))
    handover = lock_handover(handover_id)

    if handover.status != HandoverStatus.PENDING:
        raise InvalidStateError(f"Handover is not pending (status: {handover.status})")

    if not can_access_station(actor, handover.station_id):
        raise UnauthorizedError("Not authorized to access this station")
    if handover.to_user_id != actor.id and not is_owner_or_admin(actor):
        raise UnauthorizedError("Only the designated recipient can confirm")

    if accept_as_is:
        actual = handover.expected_amount
    elif actual_amount is None:
        raise MissingAmountError("Provide actual_amount or set accept_as_is")
    else:
        actual = as_amount(actual_amount, 'actual_amount')

    before = snapshot(handover)
    difference = actual - handover.expected_amount
    disputed = abs(difference) > config.dispute_tolerance

    handover.actual_amount = actual
    handover.difference = difference
    handover.status = HandoverStatus.DISPUTED if disputed else HandoverStatus.CONFIRMED
    handover.confirmed_at = timezone.now()
    handover.confirmed_by = actor
    if disputed:
        handover.dispute_notes = f"Discrepancy of {config.format_amount(difference)}"
    if notes:
        handover.notes = notes
    handover.save(update_fields=[
        'actual_amount',
        'difference',
        'status',
        'confirmed_at',
        'confirmed_by',
        'dispute_notes',
        'notes',
        'updated_at',
    ])

    if disputed:
        logger.warning("Handover %s disputed: difference %s", handover.id, difference)
    else:
        logger.info("Handover %s confirmed by %s", handover.id, actor.id)
    schedule_audit(
        actor=actor,
        action='CONFIRM',
        entity_type='CashHandover',
        entity_id=handover.id,
        station_id=handover.station_id,
        old_values=before,
        new_values=snapshot(handover),
        category='finance',
        severity='warning' if disputed else 'info',
        description=(
            f"Confirmed with discrepancy of {config.format_amount(difference)}"
            if disputed else "Handover confirmed"
        ),
    )
    return handover


@transaction.atomic
def resolve_dispute(
    *,
    actor: User,
    handover_id: UUID,
    resolution_notes: str,
) -> CashHandover:
    """
    Close a disputed handover.

    Amounts stay as recorded; only the status, resolver and notes change.

    Raises:
        HandoverNotFoundError: If the handover doesn't exist
        InvalidStateError: If the handover is not disputed
        UnauthorizedError: If actor is not an owner/super_admin of the station
        ValidationError: If resolution notes are blank
    """
    handover = lock_handover(handover_id)

    if handover.status != HandoverStatus.DISPUTED:
        raise InvalidStateError("Only disputed handovers can be resolved")

    if not is_owner_or_admin(actor):
        raise UnauthorizedError("Only owners can resolve disputes")
    if not can_access_station(actor, handover.station_id):
        raise UnauthorizedError("Not authorized to access this station")

    resolution_notes = (resolution_notes or '').strip()
    if not resolution_notes:
        raise ValidationError("resolution_notes is required")

    before = snapshot(handover)
    handover.status = HandoverStatus.RESOLVED
    handover.resolved_by = actor
    handover.resolved_at = timezone.now()
    handover.resolution_notes = resolution_notes
    handover.save(update_fields=['status', 'resolved_by', 'resolved_at', 'resolution_notes', 'updated_at'])

    logger.info("Handover %s dispute resolved by %s", handover.id, actor.id)
    schedule_audit(
        actor=actor,
        action='RESOLVE',
        entity_type='CashHandover',
        entity_id=handover.id,
        station_id=handover.station_id,
        old_values=before,
        new_values=snapshot(handover),
        category='finance',
        description=resolution_notes,
    )
    return handover


@transaction.atomic
def record_bank_deposit(
    *,
    actor: User,
    station_id: UUID,
    amount,
    config: HandoverConfig,
    handover_date: Optional[date] = None,
    bank_name: str = '',
    deposit_reference: str = '',
    deposit_receipt_url: str = '',
    notes: str = '',
) -> CashHandover:
    """
    Record cash deposited at the bank, closing the chain.

    When the station has a confirmed manager_to_owner handover that was not
    deposited yet, the deposit links to it and must match its amount within
    the bank deposit tolerance. A station whose handed-over cash was all
    deposited already cannot record another deposit; one that never had a
    manager_to_owner handover records an unlinked deposit.

    Raises:
        UnauthorizedError: If actor is not an owner/super_admin of the station
        StationNotFoundError: If the station doesn't exist
        AmountMismatchError: If the amount is outside the tolerance
        SequenceViolationError: If every handed-over amount was already deposited
        ValidationError: If the amount is malformed
    """
    if not is_owner_or_admin(actor):
        raise UnauthorizedError("Only owners can record bank deposits")

    station = get_station_for_update(station_id=station_id)
    if not can_access_station(actor, station.id):
        raise UnauthorizedError("Not authorized to access this station")

    amount = as_amount(amount, 'amount')

    reference = chain.newest_first(chain.unconsumed_records(station.id, HandoverType.MANAGER_TO_OWNER))
    if reference is not None:
        check_deposit_tolerance(amount, reference, config)
    elif chain.confirmed_records(station.id, HandoverType.MANAGER_TO_OWNER).exists():
        logger.warning("Bank deposit %s rejected for station %s: nothing left to deposit", amount, station.id)
        raise SequenceViolationError(
            "Every confirmed manager_to_owner handover at this station was already deposited",
            missing_stage=HandoverType.MANAGER_TO_OWNER,
        )

    handover = CashHandover.objects.create(
        station=station,
        handover_type=HandoverType.DEPOSIT_TO_BANK,
        handover_date=handover_date or timezone.localdate(),
        from_user=actor,
        to_user=actor,
        expected_amount=amount,
        actual_amount=amount,
        difference=Decimal('0.00'),
        status=HandoverStatus.CONFIRMED,
        confirmed_at=timezone.now(),
        confirmed_by=actor,
        previous_handover=reference,
        bank_name=bank_name or '',
        deposit_reference=deposit_reference or '',
        deposit_receipt_url=deposit_receipt_url or '',
        notes=notes or '',
    )

    logger.info("Bank deposit %s of %s recorded for station %s", handover.id, amount, station.id)
    schedule_audit(
        actor=actor,
        action='CREATE',
        entity_type='CashHandover',
        entity_id=handover.id,
        station_id=station.id,
        new_values=snapshot(handover),
        category='finance',
        description=f"Bank deposit of {config.format_amount(amount)}",
    )
    return handover
