from django.contrib import admin
from .models import CashHandover


@admin.register(CashHandover)
class CashHandoverAdmin(admin.ModelAdmin):
    """Handovers are append-only: the admin can inspect and annotate, never delete."""

    list_display = [
        'handover_date',
        'station',
        'handover_type',
        'from_user',
        'to_user',
        'expected_amount',
        'actual_amount',
        'difference',
        'status',
    ]
    list_filter = ['handover_type', 'status', 'handover_date']
    search_fields = ['station__name', 'from_user__email', 'to_user__email', 'deposit_reference']
    raw_id_fields = ['station', 'from_user', 'to_user', 'previous_handover', 'confirmed_by', 'resolved_by']
    readonly_fields = [
        'expected_amount',
        'actual_amount',
        'difference',
        'status',
        'confirmed_at',
        'confirmed_by',
        'resolved_at',
        'resolved_by',
        'created_at',
        'updated_at',
    ]
    date_hierarchy = 'handover_date'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('station', 'from_user', 'to_user')

    def has_delete_permission(self, request, obj=None):
        return False
