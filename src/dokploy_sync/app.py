"""Application entry points used by the CLI."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from dokploy_sync.adapters.dokploy import DokployClient
from dokploy_sync.config import get_dokploy_config
from dokploy_sync.domain.owners import OwnerRef

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from dokploy_sync.adapters.dokploy import EnvironmentVariable, Project
    from dokploy_sync.config import DokployConfig

type ClientFactory = Callable[[], DokployClient]

log = getLogger(__name__)


def build_client(config: DokployConfig | None = None) -> DokployClient:
    """Create a client from ``config`` or from ``DOKPLOY_*`` environment variables."""

    return DokployClient(config or get_dokploy_config())


def _run[T](
    operation: Callable[[DokployClient], Awaitable[T]],
    client_factory: ClientFactory | None,
) -> T:
    async def runner() -> T:
        async with (client_factory or build_client)() as client:
            return await operation(client)

    return asyncio.run(runner())


def list_variables(
    owner: OwnerRef,
    *,
    client_factory: ClientFactory | None = None,
) -> list[EnvironmentVariable]:
    return _run(lambda client: client.variables.list_for(owner), client_factory)


def set_variables(
    owner: OwnerRef,
    values: Mapping[str, str],
    *,
    create_env_file: bool | None = None,
    client_factory: ClientFactory | None = None,
) -> None:
    _run(
        lambda client: client.variables.merge(owner, values, create_env_file=create_env_file),
        client_factory,
    )
    log.info(f"Set {len(values)} variable(s) on {owner}")


def unset_variables(
    owner: OwnerRef,
    keys: Sequence[str],
    *,
    create_env_file: bool | None = None,
    client_factory: ClientFactory | None = None,
) -> None:
    _run(
        lambda client: client.variables.remove_keys(owner, keys, create_env_file=create_env_file),
        client_factory,
    )
    log.info(f"Removed {len(keys)} variable(s) from {owner}")


def show_project(project_id: str, *, client_factory: ClientFactory | None = None) -> Project:
    return _run(lambda client: client.projects.get(project_id), client_factory)


def delete_application(
    application_id: str,
    *,
    client_factory: ClientFactory | None = None,
) -> None:
    _run(lambda client: client.applications.delete(application_id), client_factory)


def delete_compose(
    compose_id: str,
    *,
    delete_volumes: bool = False,
    client_factory: ClientFactory | None = None,
) -> None:
    _run(
        lambda client: client.composes.delete(compose_id, delete_volumes=delete_volumes),
        client_factory,
    )


def delete_database(
    database_id: str,
    db_type: str,
    *,
    client_factory: ClientFactory | None = None,
) -> None:
    _run(lambda client: client.databases.delete(database_id, db_type), client_factory)


__all__ = [
    "OwnerRef",
    "build_client",
    "delete_application",
    "delete_compose",
    "delete_database",
    "list_variables",
    "set_variables",
    "show_project",
    "unset_variables",
]
