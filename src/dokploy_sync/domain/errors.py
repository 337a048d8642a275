"""Error kinds raised by the reconciliation core.

Every error keeps enough context (endpoint, entity kind, and for partial
failures the identifier that already exists remotely) for an operator to
inspect or repair remote state by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class DokployError(RuntimeError):
    """Base class for all reconciliation failures."""


class TransportFailure(DokployError):
    """The request never produced an HTTP response (network error, timeout)."""

    def __init__(self, endpoint: str, message: str) -> None:
        super().__init__(f"{endpoint}: transport failure: {message}")
        self.endpoint = endpoint


class RemoteAPIError(DokployError):
    """The platform answered with a non-2xx status."""

    def __init__(self, endpoint: str, status_code: int, body: str) -> None:
        super().__init__(f"{endpoint}: API error {status_code} - {body}")
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ParseFailure(DokployError):
    """A response matched none of the known shapes."""

    def __init__(self, endpoint: str, *, wrapper_keys: Sequence[str], shape: str) -> None:
        keys = ", ".join(wrapper_keys) or "<none>"
        super().__init__(
            f"{endpoint}: unrecognised response; tried wrapper key(s) {keys} and bare {shape}"
        )
        self.endpoint = endpoint
        self.wrapper_keys = tuple(wrapper_keys)
        self.shape = shape


class NotFoundAfterCreate(DokployError):
    """An ack-only create could not be matched back to the created entity."""

    def __init__(self, kind: str, name: str, *, endpoint: str, detail: str = "") -> None:
        message = f"{kind} {name!r} created but not found by name via {endpoint}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.endpoint = endpoint


class ConflictExhausted(DokployError):
    """The environment merge loop ran out of attempts."""

    def __init__(self, owner: str, attempts: int, last_error: Exception | None) -> None:
        super().__init__(
            f"environment update for {owner} did not settle after {attempts} attempt(s): "
            f"{last_error}"
        )
        self.owner = owner
        self.attempts = attempts
        self.last_error = last_error


class UnsupportedTypeError(DokployError, ValueError):
    """An enum-like tag (database engine, owner kind, ...) is not supported."""

    def __init__(self, kind: str, value: object) -> None:
        super().__init__(f"unsupported {kind}: {value!r}")
        self.kind = kind
        self.value = value


class InvalidOwnerError(DokployError, ValueError):
    """An owner-scoped entity referenced both or neither of its owners."""


class PartialProvisioningFailure(DokployError):
    """Phase 1 created the entity but a later phase failed.

    ``entity_id`` is the identifier of the object that already exists on the
    platform. It is never rolled back automatically.
    """

    def __init__(self, kind: str, entity_id: str, *, phase: str, cause: Exception) -> None:
        super().__init__(f"created {kind} {entity_id} but failed to {phase}: {cause}")
        self.kind = kind
        self.entity_id = entity_id
        self.phase = phase
        self.cause = cause


@dataclass(frozen=True, slots=True)
class DeleteAttempt:
    endpoint: str
    error: DokployError
    label: str = "failed"

    def describe(self) -> str:
        return f"{self.endpoint} {self.label}: {self.error}"


class DeleteChainError(DokployError):
    """Every step of a delete fallback chain failed."""

    def __init__(self, kind: str, entity_id: str, attempts: Sequence[DeleteAttempt]) -> None:
        details = "; ".join(attempt.describe() for attempt in attempts)
        super().__init__(f"failed to delete {kind} {entity_id}: {details}")
        self.kind = kind
        self.entity_id = entity_id
        self.attempts = tuple(attempts)


@dataclass(frozen=True, slots=True)
class ProvisioningWarning:
    """Advisory failure of an auxiliary step after the primary entity exists."""

    step: str
    message: str

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"
