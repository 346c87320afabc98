"""Federation domain ports."""

from .repository import FederationLinkRepository

__all__ = ["FederationLinkRepository"]
