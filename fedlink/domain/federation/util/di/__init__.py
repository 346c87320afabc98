from .provider import FederationProvider

__all__ = ["FederationProvider"]
