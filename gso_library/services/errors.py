from typing import Optional


class ServiceError(Exception):
    """Base class for service-layer failures that map onto an HTTP status.

    The ``message`` is what the caller sees; anything more specific (for
    example why a login failed) belongs in the audit trail, not here.
    """

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class InvalidOrExpiredToken(AuthenticationError):
    """Refresh token is unknown, revoked, expired or lost a rotation race."""


class AccountDisabledError(AuthenticationError):
    """Refresh token belongs to a disabled (or vanished) account."""


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
