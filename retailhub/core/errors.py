"""Error taxonomy shared by the auth services and translated to HTTP in the API layer."""


class AuthError(Exception):
    """Base class for errors raised by the authentication and authorization services."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthorizedError(AuthError):
    """Bad credentials, or a missing, invalid, expired or forged token."""

    status_code = 401


class ForbiddenError(AuthError):
    """Authenticated, but the account's role grants none of the required permissions."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class BadRequestError(AuthError):
    status_code = 400


class NotFoundError(AuthError):
    status_code = 404


class ConflictError(AuthError):
    status_code = 409


class InternalError(AuthError):
    """Store unavailable or an unexpected failure; message is safe to return to clients."""

    def __init__(self, message: str = "Unexpected error") -> None:
        super().__init__(message)
