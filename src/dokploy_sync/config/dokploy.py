"""Dokploy connection and reconciliation settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_float, optional_int, require_env_vars
from .http_resilience import ResilienceConfig

DOKPLOY_TIMEOUT_SECONDS = 30.0
DEFAULT_MERGE_ATTEMPTS = 5
DEFAULT_MERGE_BACKOFF_SECONDS = 0.1

API_KEY_HEADER = "x-api-key"


@dataclass(slots=True, frozen=True)
class MergePolicy:
    """Bounds for the environment blob read-modify-write-verify loop.

    The pause before attempt ``n + 1`` is ``backoff_seconds * n``.
    """

    max_attempts: int = DEFAULT_MERGE_ATTEMPTS
    backoff_seconds: float = DEFAULT_MERGE_BACKOFF_SECONDS

    def delay_for(self, attempt: int) -> float:
        return self.backoff_seconds * attempt


@dataclass(slots=True, frozen=True)
class DeletePolicy:
    """Knobs for stop-then-delete chains.

    ``settle_seconds`` pauses between the best-effort stop and the first delete
    call, for platforms where stopping is asynchronous.
    """

    stop_before_delete: bool = True
    settle_seconds: float = 0.0


@dataclass(frozen=True)
class DokployConfig:
    """Holds everything needed to talk to one Dokploy instance."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig
    merge: MergePolicy = field(default_factory=MergePolicy)
    delete: DeletePolicy = field(default_factory=DeletePolicy)


def build_resilience(
    base_url: str,
    api_key: str,
    *,
    timeout_seconds: float = DOKPLOY_TIMEOUT_SECONDS,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="dokploy",
        base_url=base_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
        default_headers={
            "Content-Type": "application/json",
            API_KEY_HEADER: api_key,
        },
    )


def get_dokploy_config(*, resilience: ResilienceConfig | None = None) -> DokployConfig:
    values = require_env_vars(("DOKPLOY_HOST", "DOKPLOY_API_KEY"))
    base_url = values["DOKPLOY_HOST"].rstrip("/")
    api_key = values["DOKPLOY_API_KEY"]
    timeout = optional_float("DOKPLOY_TIMEOUT_SECONDS", DOKPLOY_TIMEOUT_SECONDS)
    merge = MergePolicy(
        max_attempts=optional_int("DOKPLOY_MERGE_ATTEMPTS", DEFAULT_MERGE_ATTEMPTS, minimum=1),
        backoff_seconds=optional_float(
            "DOKPLOY_MERGE_BACKOFF_SECONDS", DEFAULT_MERGE_BACKOFF_SECONDS
        ),
    )
    return DokployConfig(
        base_url=base_url,
        api_key=api_key,
        resilience=resilience or build_resilience(base_url, api_key, timeout_seconds=timeout),
        merge=merge,
    )
