"""Login for station staff."""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import InactiveAccountError, InvalidCredentialsError

User = get_user_model()

logger = logging.getLogger(__name__)


def issue_tokens(user) -> dict:
    """Return a fresh refresh/access pair for ``user``."""
    refresh = RefreshToken.for_user(user)
    return {'refresh': str(refresh), 'access': str(refresh.access_token)}


@transaction.atomic
def start_session(*, email: str, password: str) -> dict:
    """
    Check staff credentials and hand out JWTs.

    The user row is locked while last_login is stamped.

    Returns:
        {'user': User, 'tokens': {'refresh': str, 'access': str}}

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Account switched off by an owner or admin
    """
    user = User.objects.select_for_update().filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        logger.info("Rejected login for %s", email)
        raise InvalidCredentialsError("Invalid email or password")
    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    logger.info("Staff %s (%s) logged in", user.id, user.role)

    return {'user': user, 'tokens': issue_tokens(user)}
