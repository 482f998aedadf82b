class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a lesson or session does not exist."""


class InvalidOrExpiredTokenError(DomainError):
    """Raised for unknown, superseded or expired attendance tokens.

    Unknown and expired tokens deliberately share this class and message so
    callers cannot probe which tokens ever existed.
    """

    def __init__(self, message: str = "Invalid or expired QR code"):
        super().__init__(message)


class NotEnrolledError(DomainError):
    """Raised when a student is not a member of the lesson's class."""


class DuplicateAttendanceError(DomainError):
    """Raised when attendance was already recorded for the lesson."""


class StorageUnavailableError(DomainError):
    """Raised when the underlying store fails. Callers decide whether to retry."""
