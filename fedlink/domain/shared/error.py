"""Error hierarchy for fedlink.

Error layers:
- FedlinkError: Base class for all fedlink errors
- DomainError: Business rule violations, lookups that miss (Conflict, NotFound)
- InfrastructureError: System-level failures like storage/connectivity issues

Callers receive one of these typed errors, never a raw driver exception.
"""


class FedlinkError(Exception):
    """Base class for all fedlink errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(FedlinkError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ConflictError(DomainError):
    """Resource already exists."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(FedlinkError):
    """Base class for infrastructure/system errors."""


class DatabaseError(InfrastructureError):
    """Storage backend failed: connectivity, syntax, constraint or consistency."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
