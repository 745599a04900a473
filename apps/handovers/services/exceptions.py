"""
Domain-specific exceptions for the handover workflow.

These represent business rule violations. The API exception handler maps
each family to one HTTP status; none of them carry internal state.
"""


class HandoverServiceError(Exception):
    """Base exception for all handover service errors."""
    pass


class UnauthorizedError(HandoverServiceError):
    """Raised when the actor lacks the role or station ownership for an action."""
    pass


class NotFoundError(HandoverServiceError):
    """Raised when a referenced entity does not exist."""
    pass


class HandoverNotFoundError(NotFoundError):
    """Raised when a handover does not exist."""
    pass


class InvalidStateError(HandoverServiceError):
    """Raised when an operation is not valid for the handover's current status."""
    pass


class SequenceViolationError(HandoverServiceError):
    """Raised when a chain stage is skipped."""

    def __init__(self, message, *, missing_stage=None):
        super().__init__(message)
        self.missing_stage = missing_stage


class AmountMismatchError(HandoverServiceError):
    """Raised when a reconciliation tolerance is exceeded."""

    def __init__(self, message, *, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ValidationError(HandoverServiceError):
    """Raised when input is missing or malformed."""
    pass


class MissingAmountError(ValidationError):
    """Raised when confirm gets neither an actual amount nor accept_as_is."""
    pass
