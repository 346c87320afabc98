"""Repository port for FederationLink persistence."""

from abc import abstractmethod
from typing import Protocol

from fedlink.domain.federation.model.link import FederationLink
from fedlink.domain.shared.port import Port


class FederationLinkRepository(Port, Protocol):
    """Repository for FederationLink persistence.

    Uniqueness of `(provider_id, federation_uid)` and `(user_id, provider_id)`
    is enforced by the storage engine, not checked before writing.
    """

    @abstractmethod
    async def create(
        self, user_id: str, provider_id: str, federation_uid: str
    ) -> FederationLink:
        """Insert a link. Raises ConflictError if either uniqueness rule is violated."""
        ...

    @abstractmethod
    async def find_for_user(self, user_id: str) -> list[FederationLink]:
        """Get all links for a user, in no particular order. Empty if none."""
        ...

    @abstractmethod
    async def find_by_federation_id(
        self, provider_id: str, federation_uid: str
    ) -> FederationLink:
        """Get the single link for an upstream identity. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, user_id: str, provider_id: str) -> None:
        """Delete one link. Succeeds when nothing matches."""
        ...

    @abstractmethod
    async def delete_by_user_id(self, user_id: str) -> None:
        """Delete every link of a user. Succeeds when nothing matches."""
        ...
