"""Entry point bundling every Dokploy service over one HTTP client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from dokploy_sync.adapters.http_resilience import ResilientClient

from .applications import ApplicationService
from .composes import ComposeService
from .databases import DatabaseService
from .destinations import BackupDestinationService
from .domains import DomainService
from .fallback import DeleteChain
from .merge import EnvMergeLoop
from .mounts import MountService
from .ports import PortService
from .projects import EnvironmentService, ProjectService
from .ssh_keys import SSHKeyService
from .transport import DokployTransport
from .variables import VariableService
from .volume_backups import VolumeBackupService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from dokploy_sync.config.dokploy import DokployConfig
    from dokploy_sync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class DokployClient:
    """Async context manager exposing one service per Dokploy entity.

    ``client_factory`` builds the underlying :class:`ResilientClient`; tests
    pass one backed by ``httpx.MockTransport``. ``sleep`` is used for merge
    backoff and delete settling.
    """

    def __init__(
        self,
        config: DokployConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self._http = client_factory(config.resilience)
        transport = DokployTransport(self._http)
        self.transport = transport

        self.merge_loop = EnvMergeLoop(transport, config.merge, sleep=sleep)
        delete_chain = DeleteChain(transport, config.delete, sleep=sleep)

        self.projects = ProjectService(transport)
        self.environments = EnvironmentService(transport, self.projects)
        self.ports = PortService(transport)
        self.mounts = MountService(transport)
        self.applications = ApplicationService(
            transport, ports=self.ports, mounts=self.mounts, delete_chain=delete_chain
        )
        self.composes = ComposeService(transport, delete_chain=delete_chain)
        self.databases = DatabaseService(transport)
        self.domains = DomainService(transport)
        self.ssh_keys = SSHKeyService(transport)
        self.destinations = BackupDestinationService(transport)
        self.volume_backups = VolumeBackupService(transport, destinations=self.destinations)
        self.variables = VariableService(self.merge_loop)

    async def __aenter__(self) -> DokployClient:
        log.debug(f"Opening Dokploy client for {self.config.base_url}")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()
