"""Federation domain models."""

from .link import FederationLink

__all__ = ["FederationLink"]
