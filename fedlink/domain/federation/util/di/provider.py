"""DI provider for the federation domain."""

from dishka import Provider, provide

from fedlink.domain.federation.service.federation import FederationService
from fedlink.util.di.scope import Scope


class FederationProvider(Provider):
    """DI provider for federation domain services."""

    # Services
    federation_service = provide(FederationService, scope=Scope.UOW)
