"""Read accessors into the identity store."""

from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError

from .exceptions import UserNotFoundError

User = get_user_model()


def get_user(*, user_id: UUID) -> User:
    """
    Fetch an active or inactive user by ID.

    Raises:
        UserNotFoundError: If no user has this ID
    """
    try:
        return User.objects.select_related('station', 'manager').get(id=user_id)
    except (User.DoesNotExist, ValueError, DjangoValidationError):
        raise UserNotFoundError(f"User with ID {user_id} not found")
