"""
DRF exception handler.

Turns service-layer exceptions into the API error envelope
``{"success": false, "error": "..."}`` with one status per exception family.
Unexpected exceptions are logged and answered with a generic 500.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.accounts.services import (
    IdentityError,
    InactiveAccountError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from apps.handovers.services import (
    AmountMismatchError,
    HandoverServiceError,
    InvalidStateError,
    NotFoundError,
    SequenceViolationError,
    UnauthorizedError,
    ValidationError,
)
from apps.stations.services import StationNotFoundError

logger = logging.getLogger(__name__)

# Checked in order; subclasses must come before their bases
SERVICE_ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (InactiveAccountError, status.HTTP_403_FORBIDDEN),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StationNotFoundError, status.HTTP_404_NOT_FOUND),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (SequenceViolationError, status.HTTP_409_CONFLICT),
    (AmountMismatchError, status.HTTP_409_CONFLICT),
)


def _error(message, status_code, details=None):
    body = {'success': False, 'error': message}
    if details is not None:
        body['details'] = details
    return Response(body, status=status_code)


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    return str(detail)


def api_exception_handler(exc, context):
    for exc_class, status_code in SERVICE_ERROR_STATUS:
        if isinstance(exc, exc_class):
            return _error(str(exc), status_code)

    if isinstance(exc, exceptions.ValidationError):
        return _error(_first_message(exc.detail), status.HTTP_400_BAD_REQUEST, details=exc.detail)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {'success': False, 'error': _first_message(response.data)}
        return response

    if isinstance(exc, (HandoverServiceError, IdentityError)):
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)

    view = context.get('view')
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
    return _error('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)
