from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import CashHandover, HandoverStatus, HandoverType


def _validate_range(attrs):
    start_date = attrs.get('start_date')
    end_date = attrs.get('end_date')
    if start_date and end_date and start_date > end_date:
        raise serializers.ValidationError({
            'end_date': 'End date must be on or after start date'
        })
    return attrs


def _amount_field(**kwargs):
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        **kwargs
    )


# =============================================================================
# Input Serializers
# =============================================================================

class HandoverCreateInputSerializer(serializers.Serializer):
    """
    Validate input for creating a handover.

    Fields:
        station_id (UUID): Station the cash belongs to
        handover_type (str): Chain stage
        handover_date (date): Business date, defaults to today
        from_user_id (UUID): Giver, defaults to the caller
        expected_amount (decimal): Derived from the chain when omitted
        notes (str): Optional notes
    """

    station_id = serializers.UUIDField()
    handover_type = serializers.ChoiceField(choices=HandoverType.choices)
    handover_date = serializers.DateField(required=False)
    from_user_id = serializers.UUIDField(required=False, allow_null=True)
    expected_amount = _amount_field(required=False, allow_null=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class ShiftCloseInputSerializer(serializers.Serializer):
    """
    Validate input for recording a closed shift's cash.

    Fields:
        station_id (UUID): Station of the shift
        employee_id (UUID): Employee who collected the cash
        cash_collected (decimal): Cash counted at shift close
        expected_cash (decimal): Cash the shift's sales should have produced
        handover_date (date): Business date, defaults to today
    """

    station_id = serializers.UUIDField()
    employee_id = serializers.UUIDField()
    cash_collected = _amount_field()
    expected_cash = _amount_field(required=False, allow_null=True)
    handover_date = serializers.DateField(required=False)


class HandoverConfirmInputSerializer(serializers.Serializer):
    """
    Validate input for confirming a handover.

    Either ``actual_amount`` or ``accept_as_is`` must be given; the ledger
    enforces that once the handover's state has been checked.
    """

    actual_amount = _amount_field(required=False, allow_null=True)
    accept_as_is = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class HandoverResolveInputSerializer(serializers.Serializer):
    resolution_notes = serializers.CharField(max_length=1000)


class BankDepositInputSerializer(serializers.Serializer):
    """
    Validate input for recording a bank deposit.

    Fields:
        station_id (UUID): Depositing station
        amount (decimal): Amount deposited
        handover_date (date): Deposit date, defaults to today
        bank_name (str): Optional bank name
        deposit_reference (str): Optional slip/transaction reference
        deposit_receipt_url (url): Optional link to the receipt
        notes (str): Optional notes
    """

    station_id = serializers.UUIDField()
    amount = _amount_field()
    handover_date = serializers.DateField(required=False)
    bank_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    deposit_reference = serializers.CharField(max_length=50, required=False, allow_blank=True)
    deposit_receipt_url = serializers.URLField(required=False, allow_blank=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class PendingFilterSerializer(serializers.Serializer):
    station_id = serializers.UUIDField(required=False)


class StationHandoverFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for a station's handover history.

    Query Parameters:
        start_date (date): Business date from
        end_date (date): Business date to
        handover_type (str): Chain stage
        status (str): Handover status
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    handover_type = serializers.ChoiceField(choices=HandoverType.choices, required=False)
    status = serializers.ChoiceField(choices=HandoverStatus.choices, required=False)

    def validate(self, attrs):
        return _validate_range(attrs)


class OptionalDateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        return _validate_range(attrs)


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        return _validate_range(attrs)


# =============================================================================
# Output Serializers
# =============================================================================

class CashHandoverSerializer(serializers.ModelSerializer):
    """Full handover record."""

    station_name = serializers.CharField(source='station.name', read_only=True)
    from_user = UserMinimalSerializer(read_only=True)
    to_user = UserMinimalSerializer(read_only=True)
    confirmed_by = UserMinimalSerializer(read_only=True)
    resolved_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = CashHandover
        fields = [
            'id',
            'station',
            'station_name',
            'handover_type',
            'handover_date',
            'from_user',
            'to_user',
            'expected_amount',
            'actual_amount',
            'difference',
            'status',
            'previous_handover',
            'confirmed_at',
            'confirmed_by',
            'resolved_at',
            'resolved_by',
            'resolution_notes',
            'bank_name',
            'deposit_reference',
            'deposit_receipt_url',
            'notes',
            'dispute_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BankDepositEntrySerializer(CashHandoverSerializer):
    running_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta(CashHandoverSerializer.Meta):
        fields = CashHandoverSerializer.Meta.fields + ['running_total']
        read_only_fields = fields


class BankDepositReportSerializer(serializers.Serializer):
    station_id = serializers.UUIDField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    deposits = BankDepositEntrySerializer(many=True)
    total_deposited = serializers.DecimalField(max_digits=14, decimal_places=2)


class SummaryGroupSerializer(serializers.Serializer):
    handover_type = serializers.CharField()
    status = serializers.CharField()
    count = serializers.IntegerField()
    total_expected = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_actual = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_difference = serializers.DecimalField(max_digits=14, decimal_places=2)


class TypeTotalsSerializer(serializers.Serializer):
    handover_type = serializers.CharField()
    count = serializers.IntegerField()
    total_expected = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_actual = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_difference = serializers.DecimalField(max_digits=14, decimal_places=2)


class CashFlowSummarySerializer(serializers.Serializer):
    """Cash flow summary for a station and date range."""

    station_id = serializers.UUIDField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    groups = SummaryGroupSerializer(many=True)
    by_type = TypeTotalsSerializer(many=True)
    pending_count = serializers.IntegerField()
    disputed_count = serializers.IntegerField()
