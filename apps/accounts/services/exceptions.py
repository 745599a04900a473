"""Identity errors raised by accounts services."""


class IdentityError(Exception):
    """Base class for login and user lookup failures."""


class InvalidCredentialsError(IdentityError):
    """Email unknown or password wrong. Never says which."""


class InactiveAccountError(IdentityError):
    pass


class UserNotFoundError(IdentityError):
    pass
