from rest_framework import permissions

from apps.accounts.models import ROLE_HIERARCHY
from .access import can_access_station


class CanAccessStation(permissions.BasePermission):
    """
    Permission: user must pass the station access policy.

    Checks the ``station_id`` URL kwarg on list-style routes and the
    Station object on detail routes.
    """

    message = 'Not authorized to access this station.'

    def has_permission(self, request, view):
        station_id = view.kwargs.get('station_id')
        if station_id is None:
            return True
        return can_access_station(request.user, station_id)

    def has_object_permission(self, request, view, obj):
        # obj is a Station instance
        return can_access_station(request.user, obj.id)


class HasMinRole(permissions.BasePermission):
    """
    Permission: user's role must be at or above ``min_role``.

    Usage:
        permission_classes = [IsAuthenticated, HasMinRole.at_least(UserRole.MANAGER)]
    """

    min_role = None

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.role_level >= ROLE_HIERARCHY[self.min_role]

    @classmethod
    def at_least(cls, role):
        return type(f'HasMinRole_{role}', (cls,), {
            'min_role': role,
            'message': f'Requires {role} role or higher.',
        })
