"""Error taxonomy shared by the storage layer, identity services and API."""


class PortalError(Exception):
    """Base class; every error carries a user-facing message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(PortalError):
    """Malformed input (username/password length, bio length)."""


class ConflictError(PortalError):
    """Username already taken."""


class AuthFailure(PortalError):
    """Bad credentials. The message never says which of username/password was wrong."""


class Unauthenticated(PortalError):
    """Caller has no valid session."""


class Forbidden(PortalError):
    """Caller is authenticated but lacks the required role or ownership."""


class NotFoundError(PortalError):
    """Referenced record does not exist."""


class StorageError(PortalError):
    """Backend I/O failure. Raised only by backends that perform I/O."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)
