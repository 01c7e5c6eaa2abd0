class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when no caller identity could be resolved or login fails."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when an operation is blocked by existing data (e.g. a referential guard)."""
