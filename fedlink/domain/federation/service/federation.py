"""Federation service: link, resolve and unlink upstream identities."""

import logfire

from fedlink.domain.federation.model.link import FederationLink
from fedlink.domain.federation.port.repository import FederationLinkRepository
from fedlink.domain.shared.service import Service


class FederationService(Service):
    """Entry point for account-linking and federated-login flows."""

    _store: FederationLinkRepository

    async def link(
        self, user_id: str, provider_id: str, federation_uid: str
    ) -> FederationLink:
        """Link an upstream identity to a user. Raises ConflictError if already taken."""
        with logfire.span("LinkFederation", provider_id=provider_id):
            link = await self._store.create(user_id, provider_id, federation_uid)
            logfire.info("Federation linked", user_id=user_id, provider_id=provider_id)
            return link

    async def resolve(self, provider_id: str, federation_uid: str) -> FederationLink:
        """Find the link for an upstream identity. Raises NotFoundError if none."""
        with logfire.span("ResolveFederation", provider_id=provider_id):
            return await self._store.find_by_federation_id(provider_id, federation_uid)

    async def list_for_user(self, user_id: str) -> list[FederationLink]:
        with logfire.span("ListFederations"):
            return await self._store.find_for_user(user_id)

    async def unlink(self, user_id: str, provider_id: str) -> None:
        """Remove one link. Unlinking a provider that is not linked is a no-op."""
        with logfire.span("UnlinkFederation", provider_id=provider_id):
            await self._store.delete(user_id, provider_id)
            logfire.info("Federation unlinked", user_id=user_id, provider_id=provider_id)

    async def remove_user(self, user_id: str) -> None:
        """Drop every link of a user, e.g. when the account is deleted."""
        with logfire.span("RemoveUserFederations"):
            await self._store.delete_by_user_id(user_id)
            logfire.info("Federations removed for user", user_id=user_id)
