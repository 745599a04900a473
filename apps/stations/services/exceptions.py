"""Domain-specific exceptions for stations services."""


class StationsServiceError(Exception):
    """Base exception for stations services."""
    pass


class StationNotFoundError(StationsServiceError):
    """Raised when a station does not exist."""
    pass
