"""Optimistic read-modify-write-verify loop over environment blobs.

Dokploy stores an owner's environment variables as one ``KEY=VALUE`` text
blob with no per-key operations and no version token. Concurrent writers are
detected after the fact by re-reading the owner and retried.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import OwnerKind
from dokploy_sync.domain.env_blob import EnvBlob
from dokploy_sync.domain.errors import ConflictExhausted, DokployError

from .normalizer import expect_entity
from .schema import Application, Compose, Project

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from dokploy_sync.config.dokploy import MergePolicy
    from dokploy_sync.domain.owners import OwnerRef

    from .schema import DokployModel
    from .transport import DokployTransport

    type EnvTransform = Callable[[EnvBlob], None]
    type Sleep = Callable[[float], Awaitable[None]]

log = getLogger(__name__)

_OWNER_MODELS: dict[OwnerKind, type[Application | Compose | Project]] = {
    OwnerKind.APPLICATION: Application,
    OwnerKind.COMPOSE: Compose,
    OwnerKind.PROJECT: Project,
}


class EnvConflict(DokployError):
    """The blob read back after a write is not the one that was written."""

    def __init__(self, owner: OwnerRef) -> None:
        super().__init__(f"environment update conflict on {owner}")
        self.owner = owner


@dataclass(frozen=True, slots=True)
class EnvSnapshot:
    owner: OwnerRef
    blob: EnvBlob
    entity: DokployModel = field(repr=False)


class EnvMergeLoop:
    def __init__(
        self,
        transport: DokployTransport,
        policy: MergePolicy,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._policy = policy
        self._sleep = sleep

    async def read(self, owner: OwnerRef) -> EnvSnapshot:
        model = _OWNER_MODELS[owner.kind]
        endpoint = f"{owner.kind}.one"
        raw = await self._transport.get(endpoint, owner.wire())
        entity = expect_entity(endpoint, raw, model, owner.kind.value)
        return EnvSnapshot(owner=owner, blob=EnvBlob.parse(entity.env), entity=entity)

    async def merge(
        self,
        owner: OwnerRef,
        transform: EnvTransform,
        *,
        create_env_file: bool | None = None,
    ) -> EnvBlob:
        """Apply ``transform`` to the owner's blob until the write sticks.

        Returns the blob as confirmed by the platform. A failed initial read
        propagates immediately; failed writes, failed verification reads and
        conflicts are retried up to ``policy.max_attempts`` times.
        """

        attempts = self._policy.max_attempts
        last_error: DokployError | None = None
        for attempt in range(1, attempts + 1):
            snapshot = await self.read(owner)
            desired = snapshot.blob.copy()
            transform(desired)
            if desired == snapshot.blob:
                log.debug(f"Environment of {owner} already up to date")
                return desired

            try:
                await self._write(snapshot, desired.serialize(), create_env_file)
                confirmed = await self.read(owner)
            except DokployError as exc:
                last_error = exc
                log.warning(f"Environment write for {owner} failed (attempt {attempt}): {exc}")
            else:
                if confirmed.blob == desired:
                    return confirmed.blob
                last_error = EnvConflict(owner)
                log.warning(f"Environment of {owner} changed concurrently (attempt {attempt})")

            if attempt < attempts:
                await self._sleep(self._policy.delay_for(attempt))

        raise ConflictExhausted(str(owner), attempts, last_error)

    async def _write(
        self,
        snapshot: EnvSnapshot,
        env: str,
        create_env_file: bool | None,
    ) -> None:
        owner = snapshot.owner
        payload: dict[str, Any] = {**owner.wire(), "env": env}
        if owner.kind is OwnerKind.APPLICATION:
            endpoint = "application.saveEnvironment"
            if create_env_file is not None:
                payload["createEnvFile"] = create_env_file
        elif owner.kind is OwnerKind.COMPOSE:
            endpoint = "compose.update"
        else:
            # project.update replaces name and description as well
            endpoint = "project.update"
            payload["name"] = getattr(snapshot.entity, "name", None) or ""
            payload["description"] = getattr(snapshot.entity, "description", None) or ""
        await self._transport.post(endpoint, payload)
