from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, UserRole

ROLE_COLOURS = {
    UserRole.SUPER_ADMIN: '#1F2937',
    UserRole.OWNER: '#B45309',
    UserRole.MANAGER: '#047857',
    UserRole.EMPLOYEE: '#6B7280',
}


@admin.register(User)
class StaffAdmin(BaseUserAdmin):
    """
    Staff accounts.

    The API has no user CRUD; owners and admins assign roles, stations
    and reporting managers here.
    """

    list_display = ['email', 'name', 'role_tag', 'station', 'manager', 'is_active', 'last_login']
    list_filter = ['role', 'is_active', 'station']
    search_fields = ['email', 'name', 'station__name', 'station__code']
    ordering = ['station__name', 'role', 'email']
    raw_id_fields = ['station', 'manager']
    readonly_fields = ['created_at', 'last_login']

    fieldsets = (
        (None, {'fields': ('email', 'name', 'password')}),
        ('Assignment', {'fields': ('role', 'station', 'manager', 'is_active')}),
        ('Django admin access', {
            'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Activity', {'fields': ('created_at', 'last_login')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'station', 'manager', 'password1', 'password2'),
        }),
    )

    @admin.display(description='Role', ordering='role')
    def role_tag(self, obj):
        return format_html(
            '<strong style="color: {};">{}</strong>',
            ROLE_COLOURS.get(obj.role, '#6B7280'),
            obj.get_role_display(),
        )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('station', 'manager')
