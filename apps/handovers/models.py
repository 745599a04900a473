# ==========================================
# apps/handovers/models.py
# ==========================================

from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid


class HandoverType(models.TextChoices):
    SHIFT_COLLECTION = 'shift_collection', 'Shift collection'
    EMPLOYEE_TO_MANAGER = 'employee_to_manager', 'Employee to manager'
    MANAGER_TO_OWNER = 'manager_to_owner', 'Manager to owner'
    DEPOSIT_TO_BANK = 'deposit_to_bank', 'Deposit to bank'


class HandoverStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    DISPUTED = 'disputed', 'Disputed'
    RESOLVED = 'resolved', 'Resolved'


# Chain order: each stage may only follow a confirmed record of the stage before it.
HANDOVER_CHAIN = (
    HandoverType.SHIFT_COLLECTION,
    HandoverType.EMPLOYEE_TO_MANAGER,
    HandoverType.MANAGER_TO_OWNER,
    HandoverType.DEPOSIT_TO_BANK,
)


def predecessor_type(handover_type):
    """Return the stage that must precede ``handover_type``, or None for the first stage."""
    index = HANDOVER_CHAIN.index(handover_type)
    return HANDOVER_CHAIN[index - 1] if index > 0 else None


def successor_type(handover_type):
    """Return the stage that follows ``handover_type``, or None for the last stage."""
    index = HANDOVER_CHAIN.index(handover_type)
    return HANDOVER_CHAIN[index + 1] if index + 1 < len(HANDOVER_CHAIN) else None


class CashHandover(models.Model):
    """
    One custody transfer of physical cash.

    Records are append-only: they move through status transitions but are
    never deleted, so the previous_handover links form a permanent chain
    from shift collection to bank deposit.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    station = models.ForeignKey(
        'stations.Station',
        on_delete=models.PROTECT,
        related_name='handovers'
    )
    handover_type = models.CharField(max_length=30, choices=HandoverType.choices)
    handover_date = models.DateField()

    # Participants
    from_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='handovers_given'
    )
    to_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='handovers_received'
    )

    # Amounts
    expected_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    actual_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    difference = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=HandoverStatus.choices,
        default=HandoverStatus.PENDING
    )

    previous_handover = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='next_handovers'
    )

    # Confirmation
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='handovers_confirmed'
    )

    # Dispute resolution
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='handovers_resolved'
    )
    resolution_notes = models.TextField(blank=True)

    # Bank deposit details
    bank_name = models.CharField(max_length=100, blank=True)
    deposit_reference = models.CharField(max_length=50, blank=True)
    deposit_receipt_url = models.URLField(blank=True)

    notes = models.TextField(blank=True)
    dispute_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cash_handovers'
        indexes = [
            models.Index(fields=['station', 'handover_date'], name='handover_station_date_idx'),
            models.Index(fields=['station', 'handover_type', 'status'], name='handover_station_stage_idx'),
            models.Index(fields=['to_user', 'status'], name='handover_to_user_status_idx'),
            models.Index(fields=['from_user'], name='handover_from_user_idx'),
        ]
        ordering = ['-handover_date', '-created_at']

    def __str__(self):
        return f"{self.get_handover_type_display()} {self.expected_amount} ({self.status})"

    @property
    def is_pending(self):
        return self.status == HandoverStatus.PENDING
