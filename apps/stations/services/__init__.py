"""Stations app services layer."""

from .exceptions import StationsServiceError, StationNotFoundError
from .station_lookup import get_station, get_station_for_update

__all__ = [
    'StationsServiceError',
    'StationNotFoundError',
    'get_station',
    'get_station_for_update',
]
