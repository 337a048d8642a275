"""Delete chains that tolerate endpoint churn across Dokploy versions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.errors import DeleteAttempt, DeleteChainError, DokployError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from dokploy_sync.config.dokploy import DeletePolicy

    from .transport import DokployTransport

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeleteStep:
    """One call in a chain.

    A ``best_effort`` step is issued but its failure is only logged and never
    ends or fails the chain.
    """

    endpoint: str
    payload: Mapping[str, Any] = field(default_factory=dict[str, Any])
    best_effort: bool = False
    label: str = "failed"


def application_steps(application_id: str, policy: DeletePolicy) -> list[DeleteStep]:
    payload = {"applicationId": application_id}
    steps = [
        DeleteStep("application.delete", payload),
        DeleteStep("application.remove", payload, label="fallback failed"),
    ]
    if policy.stop_before_delete:
        steps.insert(0, DeleteStep("application.stop", payload, best_effort=True))
    return steps


def compose_steps(
    compose_id: str,
    policy: DeletePolicy,
    *,
    delete_volumes: bool = False,
) -> list[DeleteStep]:
    payload = {"composeId": compose_id}
    steps = [
        DeleteStep("compose.delete", {**payload, "deleteVolumes": delete_volumes}),
        # older releases have no deleteVolumes flag
        DeleteStep("compose.remove", payload, label="fallback failed"),
    ]
    if policy.stop_before_delete:
        steps.insert(0, DeleteStep("compose.stop", payload, best_effort=True))
    return steps


class DeleteChain:
    """Runs steps in order until one non-best-effort call succeeds."""

    def __init__(
        self,
        transport: DokployTransport,
        policy: DeletePolicy,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self.policy = policy
        self._sleep = sleep

    async def run(self, kind: str, entity_id: str, steps: Sequence[DeleteStep]) -> str:
        """Return the endpoint that performed the delete.

        Raises :class:`DeleteChainError` listing every failed attempt when no
        step succeeds.
        """

        attempts: list[DeleteAttempt] = []
        for step in steps:
            try:
                await self._transport.post(step.endpoint, step.payload)
            except DokployError as exc:
                if step.best_effort:
                    log.warning(f"Ignoring {step.endpoint} failure for {kind} {entity_id}: {exc}")
                else:
                    log.debug(f"{step.endpoint} failed for {kind} {entity_id}: {exc}")
                    attempts.append(DeleteAttempt(step.endpoint, exc, step.label))
                    continue
            if step.best_effort:
                if self.policy.settle_seconds > 0:
                    await self._sleep(self.policy.settle_seconds)
                continue
            log.info(f"Deleted {kind} {entity_id} via {step.endpoint}")
            return step.endpoint
        raise DeleteChainError(kind, entity_id, attempts)
