"""Federation domain services."""

from .federation import FederationService

__all__ = ["FederationService"]
