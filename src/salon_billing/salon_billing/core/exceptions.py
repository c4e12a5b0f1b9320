class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class InvalidStatusError(ValidationError):
    """Raised when a payment status is not one of the allowed values."""


class NotFoundError(DomainError):
    """Raised when a referenced bill, client or configuration does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a write would duplicate a unique value (e.g. phone number)."""

    status_code = 409


class DependencyError(DomainError):
    """Raised when the document store or another collaborator fails."""

    status_code = 500
