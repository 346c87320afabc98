"""FederationLinkRepository implementation over a StorageEngine."""

import logging
from typing import Any

from fedlink.domain.federation.model.link import FederationLink
from fedlink.domain.federation.port.repository import FederationLinkRepository
from fedlink.domain.shared.error import DatabaseError, NotFoundError
from fedlink.domain.shared.port.storage import StorageEngine
from fedlink.infrastructure.persistence.engine import DEFAULT_SIZE_HINT
from fedlink.infrastructure.persistence.errors import map_unique_violation

logger = logging.getLogger(__name__)

INSERT_LINK = (
    "INSERT INTO user_federations (user_id, provider_id, federation_uid) VALUES ($1, $2, $3)"
)
SELECT_BY_USER = "SELECT * FROM user_federations WHERE user_id = $1"
SELECT_BY_FEDERATION_ID = (
    "SELECT * FROM user_federations WHERE provider_id = $1 AND federation_uid = $2"
)
DELETE_LINK = "DELETE FROM user_federations WHERE user_id = $1 AND provider_id = $2"
DELETE_BY_USER = "DELETE FROM user_federations WHERE user_id = $1"


def _row_to_link(row: dict[str, Any]) -> FederationLink:
    """Convert a database row to a FederationLink."""
    return FederationLink(
        user_id=row["user_id"],
        provider_id=row["provider_id"],
        federation_uid=row["federation_uid"],
    )


class FederationLinkStore(FederationLinkRepository):
    """Runs the fixed federation statements on whichever backend was selected."""

    def __init__(self, engine: StorageEngine, size_hint: int = DEFAULT_SIZE_HINT) -> None:
        self.engine = engine
        self.size_hint = size_hint

    async def create(
        self, user_id: str, provider_id: str, federation_uid: str
    ) -> FederationLink:
        link = FederationLink(
            user_id=user_id,
            provider_id=provider_id,
            federation_uid=federation_uid,
        )
        try:
            await self.engine.execute(
                INSERT_LINK, (link.user_id, link.provider_id, link.federation_uid)
            )
        except DatabaseError as e:
            mapped = map_unique_violation(e)
            if mapped is e:
                raise
            raise mapped from e
        # No server defaults, so the constructed link is what was stored
        return link

    async def find_for_user(self, user_id: str) -> list[FederationLink]:
        rows = await self.engine.query(SELECT_BY_USER, (user_id,), size_hint=self.size_hint)
        return [_row_to_link(row) for row in rows]

    async def find_by_federation_id(
        self, provider_id: str, federation_uid: str
    ) -> FederationLink:
        rows = await self.engine.query(SELECT_BY_FEDERATION_ID, (provider_id, federation_uid))
        if not rows:
            raise NotFoundError(
                f"No federation link for provider {provider_id}",
                code="federation_not_found",
            )
        if len(rows) > 1:
            logger.error(
                "Found %d links for one upstream identity (provider=%s); "
                "the (provider_id, federation_uid) unique index is missing or broken",
                len(rows),
                provider_id,
            )
            raise DatabaseError(
                "Federation lookup matched more than one link",
                code="federation_inconsistent",
            )
        return _row_to_link(rows[0])

    async def delete(self, user_id: str, provider_id: str) -> None:
        await self.engine.execute(DELETE_LINK, (user_id, provider_id))

    async def delete_by_user_id(self, user_id: str) -> None:
        deleted = await self.engine.execute(DELETE_BY_USER, (user_id,))
        logger.debug("Deleted %d federation links for user %s", deleted, user_id)
