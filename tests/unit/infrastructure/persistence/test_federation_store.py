"""Unit tests for FederationLinkStore against in-memory SQLite."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from fedlink.domain.federation.model.link import FederationLink
from fedlink.domain.shared.error import ConflictError, DatabaseError, NotFoundError
from fedlink.infrastructure.persistence.engine import EmbeddedStorageEngine
from fedlink.infrastructure.persistence.errors import (
    FEDERATION_CONFLICT_CODE,
    FEDERATION_CONFLICT_MESSAGE,
)
from fedlink.infrastructure.persistence.repository.federation import (
    DELETE_BY_USER,
    INSERT_LINK,
    SELECT_BY_FEDERATION_ID,
    FederationLinkStore,
)


class TestCreate:
    @pytest.mark.asyncio
    async def test_returns_constructed_link(self, store: FederationLinkStore):
        link = await store.create("u1", "github", "583231")

        assert link == FederationLink(user_id="u1", provider_id="github", federation_uid="583231")

    @pytest.mark.asyncio
    async def test_round_trip_through_federation_id(self, store: FederationLinkStore):
        created = await store.create("u1", "github", "583231")

        found = await store.find_by_federation_id("github", "583231")

        assert found == created

    @pytest.mark.asyncio
    async def test_same_upstream_identity_for_second_user_conflicts(
        self, store: FederationLinkStore
    ):
        await store.create("u1", "idp", "x")

        with pytest.raises(ConflictError) as exc_info:
            await store.create("u2", "idp", "x")

        assert exc_info.value.message == FEDERATION_CONFLICT_MESSAGE
        assert exc_info.value.code == FEDERATION_CONFLICT_CODE

    @pytest.mark.asyncio
    async def test_second_link_to_same_provider_conflicts(self, store: FederationLinkStore):
        await store.create("u1", "idp", "x")

        with pytest.raises(ConflictError) as exc_info:
            await store.create("u1", "idp", "y")

        assert exc_info.value.message == FEDERATION_CONFLICT_MESSAGE

    @pytest.mark.asyncio
    async def test_conflict_does_not_leak_backend_detail(self, store: FederationLinkStore):
        await store.create("u1", "idp", "x")

        with pytest.raises(ConflictError) as exc_info:
            await store.create("u2", "idp", "x")

        assert "user_federations" not in str(exc_info.value)
        assert "UNIQUE" not in str(exc_info.value)
        # The driver error stays available for logs via chaining
        assert isinstance(exc_info.value.__cause__, DatabaseError)

    @pytest.mark.asyncio
    async def test_conflicting_create_leaves_original_link(self, store: FederationLinkStore):
        await store.create("u1", "idp", "x")

        with pytest.raises(ConflictError):
            await store.create("u2", "idp", "x")

        assert await store.find_by_federation_id("idp", "x") == FederationLink(
            user_id="u1", provider_id="idp", federation_uid="x"
        )
        assert await store.find_for_user("u2") == []

    @pytest.mark.asyncio
    async def test_same_uid_at_different_providers_is_allowed(self, store: FederationLinkStore):
        await store.create("u1", "github", "42")
        await store.create("u2", "gitlab", "42")

        assert (await store.find_by_federation_id("gitlab", "42")).user_id == "u2"

    @pytest.mark.asyncio
    async def test_other_database_errors_pass_through_unchanged(self):
        engine = AsyncMock()
        error = DatabaseError("connection refused")
        engine.execute.side_effect = error
        store = FederationLinkStore(engine)

        with pytest.raises(DatabaseError) as exc_info:
            await store.create("u1", "idp", "x")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_issues_insert_with_values_in_column_order(self):
        engine = AsyncMock()
        engine.execute.return_value = 1
        store = FederationLinkStore(engine)

        await store.create("u1", "idp", "x")

        engine.execute.assert_awaited_once_with(INSERT_LINK, ("u1", "idp", "x"))

    @pytest.mark.asyncio
    async def test_missing_table_surfaces_as_database_error(self, sqlite_engine: AsyncEngine):
        async with sqlite_engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE user_federations")
        store = FederationLinkStore(EmbeddedStorageEngine(sqlite_engine))

        with pytest.raises(DatabaseError, match="no such table"):
            await store.create("u1", "idp", "x")


class TestFindForUser:
    @pytest.mark.asyncio
    async def test_unknown_user_returns_empty_list(self, store: FederationLinkStore):
        assert await store.find_for_user("unknown") == []

    @pytest.mark.asyncio
    async def test_returns_every_link_of_user(self, store: FederationLinkStore):
        await store.create("u1", "github", "a")
        await store.create("u1", "gitlab", "b")
        await store.create("u2", "github", "c")

        links = await store.find_for_user("u1")

        assert {(link.provider_id, link.federation_uid) for link in links} == {
            ("github", "a"),
            ("gitlab", "b"),
        }

    @pytest.mark.asyncio
    async def test_size_hint_never_truncates(self, storage: EmbeddedStorageEngine):
        store = FederationLinkStore(storage, size_hint=2)
        for i in range(15):
            await store.create("u1", f"idp-{i}", f"uid-{i}")

        links = await store.find_for_user("u1")

        assert len(links) == 15


class TestFindByFederationId:
    @pytest.mark.asyncio
    async def test_missing_link_raises_not_found(self, store: FederationLinkStore):
        with pytest.raises(NotFoundError) as exc_info:
            await store.find_by_federation_id("github", "nobody")

        assert exc_info.value.code == "federation_not_found"

    @pytest.mark.asyncio
    async def test_multiple_rows_is_a_consistency_failure(self):
        engine = AsyncMock()
        engine.query.return_value = [
            {"user_id": "u1", "provider_id": "idp", "federation_uid": "x"},
            {"user_id": "u2", "provider_id": "idp", "federation_uid": "x"},
        ]
        store = FederationLinkStore(engine)

        with pytest.raises(DatabaseError) as exc_info:
            await store.find_by_federation_id("idp", "x")

        assert exc_info.value.code == "federation_inconsistent"
        engine.query.assert_awaited_once_with(SELECT_BY_FEDERATION_ID, ("idp", "x"))


class TestDelete:
    @pytest.mark.asyncio
    async def test_deleted_link_is_no_longer_found(self, store: FederationLinkStore):
        await store.create("u1", "github", "583231")

        await store.delete("u1", "github")

        with pytest.raises(NotFoundError):
            await store.find_by_federation_id("github", "583231")

    @pytest.mark.asyncio
    async def test_deleting_missing_link_succeeds(self, store: FederationLinkStore):
        await store.delete("u1", "github")
        await store.delete("u1", "github")

    @pytest.mark.asyncio
    async def test_only_removes_the_given_provider(self, store: FederationLinkStore):
        await store.create("u1", "github", "a")
        await store.create("u1", "gitlab", "b")

        await store.delete("u1", "github")

        assert await store.find_for_user("u1") == [
            FederationLink(user_id="u1", provider_id="gitlab", federation_uid="b")
        ]

    @pytest.mark.asyncio
    async def test_uid_can_be_relinked_after_delete(self, store: FederationLinkStore):
        await store.create("u1", "idp", "x")
        await store.delete("u1", "idp")

        relinked = await store.create("u2", "idp", "x")

        assert await store.find_by_federation_id("idp", "x") == relinked


class TestDeleteByUserId:
    @pytest.mark.asyncio
    async def test_removes_all_links_of_user(self, store: FederationLinkStore):
        for provider in ("github", "gitlab", "google"):
            await store.create("u1", provider, f"{provider}-u1")
        await store.create("u2", "github", "github-u2")

        await store.delete_by_user_id("u1")

        assert await store.find_for_user("u1") == []
        assert len(await store.find_for_user("u2")) == 1

    @pytest.mark.asyncio
    async def test_user_without_links_succeeds(self, store: FederationLinkStore):
        await store.delete_by_user_id("unknown")

    @pytest.mark.asyncio
    async def test_uses_single_statement(self):
        engine = AsyncMock()
        engine.execute.return_value = 3
        store = FederationLinkStore(engine)

        await store.delete_by_user_id("u1")

        engine.execute.assert_awaited_once_with(DELETE_BY_USER, ("u1",))
