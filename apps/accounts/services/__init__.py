"""Accounts services: staff login and user lookup."""

from .exceptions import (
    IdentityError,
    InactiveAccountError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from .staff_session import issue_tokens, start_session
from .user_lookup import get_user

__all__ = [
    'IdentityError',
    'InactiveAccountError',
    'InvalidCredentialsError',
    'UserNotFoundError',
    'get_user',
    'issue_tokens',
    'start_session',
]
