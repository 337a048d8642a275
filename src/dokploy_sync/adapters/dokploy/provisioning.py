"""Two-phase creation for applications and compose stacks.

``*.create`` only accepts a name and an environment id. Everything else is
applied by a follow-up ``*.update``. When that second call fails the entity
already exists on the platform, so the failure carries its identifier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.errors import (
    DokployError,
    PartialProvisioningFailure,
    ProvisioningWarning,
)

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .resolver import resolve_by_name
from .schema import Application, Compose, Environment

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping

    from dokploy_sync.domain.enums import OwnerKind

    from .transport import DokployTransport

log = getLogger(__name__)


@dataclass(slots=True)
class ProvisionResult[M: Application | Compose]:
    entity: M
    warnings: list[ProvisioningWarning] = field(default_factory=list[ProvisioningWarning])

    async def advisory[T](self, step: str, action: Awaitable[T]) -> T | None:
        """Await ``action``; a failure becomes a warning instead of an error."""

        try:
            return await action
        except DokployError as exc:
            log.warning(f"{step} failed for {self.entity.primary_id}: {exc}")
            self.warnings.append(ProvisioningWarning(step, str(exc)))
            return None


def compact(values: Mapping[str, Any]) -> dict[str, Any]:
    """Drop unset values so server-side defaults are not overwritten."""

    compacted: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, (list, tuple, dict)) and not value:
            continue
        compacted[key] = value
    return compacted


class TwoPhaseProvisioner[M: Application | Compose]:
    def __init__(self, transport: DokployTransport, kind: OwnerKind, model: type[M]) -> None:
        self._transport = transport
        self.kind = kind
        self.model = model

    async def get(self, entity_id: str) -> M:
        endpoint = f"{self.kind}.one"
        raw = await self._transport.get(endpoint, {self.kind.id_field: entity_id})
        return expect_entity(endpoint, raw, self.model, self.kind.value)

    async def create_minimal(self, name: str, environment_id: str) -> M:
        endpoint = f"{self.kind}.create"
        raw = await self._transport.post(endpoint, {"name": name, "environmentId": environment_id})
        result = normalize_response(raw, self.model, self.kind.value)
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            log.debug(f"{endpoint} returned no payload; resolving {name!r} by name")
            return await self._find_in_environment(name, environment_id)
        raise result.error(endpoint)

    async def configure(self, entity_id: str, payload: Mapping[str, Any]) -> M:
        """Send ``*.update``; read the entity back when the reply carries none."""

        endpoint = f"{self.kind}.update"
        raw = await self._transport.post(
            endpoint, {**payload, self.kind.id_field: entity_id}
        )
        result = normalize_response(raw, self.model, self.kind.value)
        if isinstance(result, Resolved):
            return result.entity
        return await self.get(entity_id)

    async def provision(
        self,
        name: str,
        environment_id: str,
        payload: Mapping[str, Any],
    ) -> ProvisionResult[M]:
        created = await self.create_minimal(name, environment_id)
        entity_id = created.primary_id
        log.info(f"Created {self.kind} {name!r} ({entity_id})")
        try:
            configured = await self.configure(entity_id, payload)
        except DokployError as exc:
            raise PartialProvisioningFailure(
                self.kind.value, entity_id, phase="update config", cause=exc
            ) from exc
        return ProvisionResult(configured)

    async def _find_in_environment(self, name: str, environment_id: str) -> M:
        endpoint = "environment.one"
        raw = await self._transport.get(endpoint, {"environmentId": environment_id})
        environment = expect_entity(endpoint, raw, Environment, "environment")
        candidates: list[Any] = (
            environment.applications if self.model is Application else environment.compose
        )
        return resolve_by_name(candidates, name, kind=self.kind.value, endpoint=endpoint)
