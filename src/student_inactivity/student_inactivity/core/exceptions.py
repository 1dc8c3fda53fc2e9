class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced student (or other entity) does not exist."""


class ConfigurationError(DomainError):
    """Raised at startup when settings cannot be turned into a working policy."""


class StoreUnavailableError(DomainError):
    """Raised when the attendance/student store cannot be reached at all.

    Propagates out of a job attempt so the reliability wrapper retries it.
    """


class NotificationError(DomainError):
    """Raised when a notice cannot be created for a recipient."""
