"""
Station access policy.

Answers "can this user act on this station" from role and the ownership
graph. Pure reads, never mutates.
"""

from apps.accounts.models import UserRole
from .models import Station


def can_access_station(user, station_id) -> bool:
    """
    Return True when ``user`` may act on the station with ``station_id``.

    - super_admin: every station
    - owner: stations they own
    - manager / employee: their assigned station only
    """
    if not station_id or user is None or not getattr(user, 'is_authenticated', False):
        return False

    role = user.role
    if role == UserRole.SUPER_ADMIN:
        return True
    if role == UserRole.OWNER:
        return Station.objects.filter(id=station_id, owner_id=user.id).exists()
    if role in (UserRole.MANAGER, UserRole.EMPLOYEE):
        return user.station_id is not None and str(user.station_id) == str(station_id)
    raise ValueError(f"Unknown role: {role}")


def accessible_station_ids(user) -> list:
    """Return IDs of every station ``user`` may act on."""
    role = user.role
    if role == UserRole.SUPER_ADMIN:
        return list(Station.objects.values_list('id', flat=True))
    if role == UserRole.OWNER:
        return list(Station.objects.filter(owner_id=user.id).values_list('id', flat=True))
    if role in (UserRole.MANAGER, UserRole.EMPLOYEE):
        return [user.station_id] if user.station_id else []
    raise ValueError(f"Unknown role: {role}")


def is_owner_or_admin(user) -> bool:
    return user.role in (UserRole.OWNER, UserRole.SUPER_ADMIN)
