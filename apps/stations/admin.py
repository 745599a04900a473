from django.contrib import admin
from .models import Station


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'city', 'owner', 'is_active', 'created_at']
    list_filter = ['is_active', 'city']
    search_fields = ['name', 'code', 'owner__email']
    raw_id_fields = ['owner']
    readonly_fields = ['created_at', 'updated_at']
