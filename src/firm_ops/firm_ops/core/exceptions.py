class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist (or is not visible to the caller)."""


class ConflictError(DomainError):
    """Raised when an action clashes with the current state of a record."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConfigurationError(DomainError):
    """Raised when an optional collaborator (renderer, mail gateway) is not configured."""
