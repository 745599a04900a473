"""Read accessors into the tenant store."""

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.stations.models import Station

from .exceptions import StationNotFoundError


def get_station(*, station_id: UUID) -> Station:
    """
    Fetch a station by ID.

    Raises:
        StationNotFoundError: If the station doesn't exist
    """
    try:
        return Station.objects.select_related('owner').get(id=station_id)
    except (Station.DoesNotExist, ValueError, DjangoValidationError):
        raise StationNotFoundError(f"Station with ID {station_id} not found")


def get_station_for_update(*, station_id: UUID) -> Station:
    """
    Fetch and row-lock a station. Must be called inside transaction.atomic.

    Raises:
        StationNotFoundError: If the station doesn't exist
    """
    try:
        return Station.objects.select_for_update().get(id=station_id)
    except (Station.DoesNotExist, ValueError, DjangoValidationError):
        raise StationNotFoundError(f"Station with ID {station_id} not found")
