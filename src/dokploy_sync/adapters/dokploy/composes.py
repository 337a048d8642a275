"""Compose stacks: two-phase create, update, deploy, stop and delete."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import OwnerKind, SourceType

from .fallback import compose_steps
from .provisioning import ProvisionResult, TwoPhaseProvisioner, compact
from .schema import Compose

if TYPE_CHECKING:
    from .fallback import DeleteChain
    from .transport import DokployTransport

log = getLogger(__name__)

DEFAULT_COMPOSE_PATH = "./docker-compose.yml"

_CONFIG_FIELDS = frozenset(
    {
        "description",
        "compose_type",
        "compose_file",
        "compose_path",
        "custom_git_url",
        "custom_git_branch",
        "custom_git_ssh_key_id",
    }
)


def default_source_type(compose: Compose) -> str:
    """Explicit type, else ``git`` with a custom URL, ``raw`` with inline text, else GitHub."""

    if compose.source_type and compose.source_type.strip():
        return compose.source_type.strip()
    if compose.custom_git_url and compose.custom_git_url.strip():
        return SourceType.GIT.value
    if compose.compose_file and compose.compose_file.strip():
        return SourceType.RAW.value
    return SourceType.GITHUB.value


def update_payload(compose: Compose, *, include_environment: bool = False) -> dict[str, Any]:
    fields = set(_CONFIG_FIELDS)
    if include_environment:
        fields.add("environment_id")
    payload: dict[str, Any] = {
        "name": compose.name,
        "sourceType": default_source_type(compose),
        "autoDeploy": compose.auto_deploy,
    }
    payload.update(compact(compose.model_dump(by_alias=True, include=fields, exclude_none=True)))
    if payload["sourceType"] == SourceType.GIT.value:
        payload.setdefault("composePath", DEFAULT_COMPOSE_PATH)
    return payload


class ComposeService:
    def __init__(self, transport: DokployTransport, *, delete_chain: DeleteChain) -> None:
        self._transport = transport
        self._delete_chain = delete_chain
        self._provisioner = TwoPhaseProvisioner(transport, OwnerKind.COMPOSE, Compose)

    async def create(
        self,
        compose: Compose,
        *,
        deploy_on_create: bool = False,
    ) -> ProvisionResult[Compose]:
        if not compose.name or not compose.environment_id:
            raise ValueError("compose name and environment_id are required")

        result = await self._provisioner.provision(
            compose.name, compose.environment_id, update_payload(compose)
        )
        if deploy_on_create:
            await result.advisory("deploy", self.deploy(result.entity.primary_id))
        return result

    async def get(self, compose_id: str) -> Compose:
        return await self._provisioner.get(compose_id)

    async def update(self, compose_id: str, compose: Compose) -> Compose:
        return await self._provisioner.configure(
            compose_id, update_payload(compose, include_environment=True)
        )

    async def deploy(self, compose_id: str) -> None:
        await self._transport.post("compose.deploy", {"composeId": compose_id})
        log.info(f"Triggered deploy of compose {compose_id}")

    async def stop(self, compose_id: str) -> None:
        await self._transport.post("compose.stop", {"composeId": compose_id})

    async def delete(self, compose_id: str, *, delete_volumes: bool = False) -> None:
        steps = compose_steps(compose_id, self._delete_chain.policy, delete_volumes=delete_volumes)
        await self._delete_chain.run("compose", compose_id, steps)
