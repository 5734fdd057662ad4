class DomainError(Exception):
    """Base exception for the application."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when a bearer token is missing, malformed or expired."""


class DependencyError(DomainError):
    """Raised when the database or another backing service is unavailable."""


class DuplicateKeyError(DomainError):
    """Raised when an insert hits a unique key."""


class MailDeliveryError(DependencyError):
    """Raised when an email could not be rendered or delivered."""
