"""Main CLI application using Cyclopts.

Each command opens one unit of work on the configured backend, runs a single
federation operation and exits non-zero on any fedlink error.
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import NoReturn, TypeVar

import cyclopts
import logfire

from fedlink.application.di import create_container
from fedlink.cli.console import get_console
from fedlink.config import Backend, Config, configure_logging
from fedlink.domain.federation.model.link import FederationLink
from fedlink.domain.federation.service.federation import FederationService
from fedlink.domain.shared.error import DomainError, FedlinkError, InfrastructureError
from fedlink.infrastructure.persistence.migrate import run_migrations
from fedlink.util.di.scope import Scope

T = TypeVar("T")

app = cyclopts.App(
    name="fedlink",
    help="Federation link store - CLI",
)

LINK_COLUMNS = [
    ("user_id", "User"),
    ("provider_id", "Provider"),
    ("federation_uid", "Upstream ID"),
]


def _load_config() -> Config:
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    logfire.configure(send_to_logfire="if-token-present", console=False)
    return config


async def _with_service(
    config: Config, operation: Callable[[FederationService], Awaitable[T]]
) -> T:
    container = create_container(config)
    try:
        async with container(scope=Scope.UOW) as uow:
            service = await uow.get(FederationService)
            return await operation(service)
    finally:
        await container.close()


def _exit_on_error(config: Config, error: FedlinkError) -> NoReturn:
    console = get_console()
    if isinstance(error, InfrastructureError):
        console.error(
            f"Storage failure ({config.database.backend}): {error.message}",
            hint="Check FEDLINK_DATABASE__URL and that the database is reachable",
        )
    else:
        console.error(error.message)
    sys.exit(1)


def _run(operation: Callable[[FederationService], Awaitable[T]]) -> T:
    """Run one federation operation, turning fedlink errors into exit code 1."""
    config = _load_config()

    try:
        # Auto-migrate the embedded database; PostgreSQL is migrated explicitly
        if config.database.auto_migrate and config.database.backend is Backend.EMBEDDED:
            run_migrations(config.database.url)
        return asyncio.run(_with_service(config, operation))
    except (DomainError, InfrastructureError) as e:
        _exit_on_error(config, e)


def _as_rows(links: list[FederationLink]) -> list[dict[str, str]]:
    return [link.model_dump() for link in links]


@app.command
def migrate() -> None:
    """Upgrade the configured database to the latest schema."""
    config = _load_config()
    try:
        run_migrations(config.database.url)
    except InfrastructureError as e:
        _exit_on_error(config, e)
    get_console().success(f"Migrated {config.database.backend} database")


@app.command
def link(user_id: str, provider_id: str, federation_uid: str) -> None:
    """Link an upstream identity to a local user.

    Args:
        user_id: Local user id.
        provider_id: Identity provider id.
        federation_uid: Subject id issued by the provider.
    """
    created = _run(lambda service: service.link(user_id, provider_id, federation_uid))
    get_console().success(
        f"Linked {created.provider_id}:{created.federation_uid} to user {created.user_id}"
    )


@app.command
def unlink(user_id: str, provider_id: str) -> None:
    """Remove a user's link to one provider. Succeeds if it does not exist."""
    _run(lambda service: service.unlink(user_id, provider_id))
    get_console().success(f"Unlinked provider {provider_id} from user {user_id}")


@app.command(name="list")
def list_links(user_id: str) -> None:
    """List every provider linked to a user."""
    console = get_console()
    links = _run(lambda service: service.list_for_user(user_id))
    if not links:
        console.info(f"No federation links for user {user_id}")
        return
    console.table(_as_rows(links), LINK_COLUMNS, title=f"Federation links of {user_id}")


@app.command
def lookup(provider_id: str, federation_uid: str) -> None:
    """Find the local user an upstream identity is linked to."""
    found = _run(lambda service: service.resolve(provider_id, federation_uid))
    get_console().table(_as_rows([found]), LINK_COLUMNS)


@app.command
def purge(user_id: str, force: bool = False) -> None:
    """Remove all federation links of a user.

    Args:
        user_id: Local user id.
        force: Skip confirmation prompt.
    """
    if not force:
        response = input(f"Remove all federation links of {user_id}? [y/N] ").strip().lower()
        if response != "y":
            print("Aborted")
            sys.exit(1)
    _run(lambda service: service.remove_user(user_id))
    get_console().success(f"Removed all federation links of user {user_id}")
