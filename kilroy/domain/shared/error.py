"""Error hierarchy for Kilroy.

Error layers:
- KilroyError: Base class for all Kilroy errors, carries an HTTP status
- DomainError: Bad requests, missing resources, failed authentication (4xx responses)
- InfrastructureError: System-level failures like storage issues (503 responses)

These errors are mapped to HTTP responses by the error pipeline in
kilroy.application.api.errors.
"""


class KilroyError(Exception):
    """Base class for all Kilroy errors."""

    status: int = 500

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (typically 4xx)
# =============================================================================


class DomainError(KilroyError):
    """Base class for domain errors."""

    status = 400


class ValidationError(DomainError):
    """Input validation failed, including identifiers that escape their collection."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class AuthenticationError(DomainError):
    """Missing or bad credentials. Recoverable by retrying with other credentials."""

    status = 401


class NotFoundError(DomainError):
    """Resource not found."""

    status = 404


class ConflictError(DomainError):
    """Write would change content that must never change."""

    status = 409


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(KilroyError):
    """Base class for infrastructure/system errors."""

    status = 503


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
