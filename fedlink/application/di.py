from dishka import AsyncContainer, make_async_container

from fedlink.config import Config
from fedlink.domain.federation.util.di import FederationProvider
from fedlink.infrastructure.persistence import PersistenceProvider
from fedlink.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    if config is None:
        config = Config()  # type: ignore[call-arg]

    return make_async_container(
        PersistenceProvider(),
        FederationProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
