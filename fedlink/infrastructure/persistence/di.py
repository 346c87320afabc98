from typing import AsyncIterable

from dishka import Provider, from_context, provide
from sqlalchemy.ext.asyncio import AsyncEngine

from fedlink.config import Config
from fedlink.domain.federation.port.repository import FederationLinkRepository
from fedlink.domain.shared.port.storage import StorageEngine
from fedlink.infrastructure.persistence.database import create_db_engine
from fedlink.infrastructure.persistence.repository.federation import FederationLinkStore
from fedlink.infrastructure.persistence.selector import select_storage_engine
from fedlink.util.di.scope import Scope


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    # APP-scoped: the backend is chosen once and shared by every unit of work
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_storage_engine(self, config: Config, engine: AsyncEngine) -> StorageEngine:
        return select_storage_engine(config.database.backend, engine)

    @provide(scope=Scope.APP)
    def get_federation_store(
        self, storage: StorageEngine, config: Config
    ) -> FederationLinkRepository:
        return FederationLinkStore(storage, size_hint=config.database.query_size_hint)
