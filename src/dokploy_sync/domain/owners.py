"""Owner references for owner-scoped entities.

Domains, ports, mounts, variables and volume backups belong to exactly one
application *or* one compose stack. Environment blobs can additionally live on
a project. The union is closed and checked when it is built, so downstream
code never sees two ids or none.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import OwnerKind
from .errors import InvalidOwnerError


@dataclass(frozen=True, slots=True)
class OwnerRef:
    kind: OwnerKind
    id: str

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise InvalidOwnerError(f"{self.kind} owner requires a non-empty id")

    @property
    def id_field(self) -> str:
        return self.kind.id_field

    def wire(self) -> dict[str, str]:
        return {self.id_field: self.id}

    def __str__(self) -> str:
        return f"{self.kind} {self.id}"


def application(app_id: str) -> OwnerRef:
    return OwnerRef(OwnerKind.APPLICATION, app_id)


def compose(compose_id: str) -> OwnerRef:
    return OwnerRef(OwnerKind.COMPOSE, compose_id)


def project(project_id: str) -> OwnerRef:
    return OwnerRef(OwnerKind.PROJECT, project_id)


def owner_from_ids(
    *,
    application_id: str | None = None,
    compose_id: str | None = None,
) -> OwnerRef:
    """Build the application-or-compose owner from two optional ids."""

    has_application = bool(application_id and application_id.strip())
    has_compose = bool(compose_id and compose_id.strip())
    if has_application and has_compose:
        raise InvalidOwnerError("only one of application_id or compose_id can be provided")
    if has_application:
        return application(application_id.strip())  # type: ignore[union-attr]
    if has_compose:
        return compose(compose_id.strip())  # type: ignore[union-attr]
    raise InvalidOwnerError("either application_id or compose_id must be provided")


def parse_owner(value: str) -> OwnerRef:
    """Parse ``application:<id>``, ``compose:<id>`` or ``project:<id>``.

    A bare id is treated as an application id.
    """

    kind, sep, owner_id = value.strip().partition(":")
    if not sep:
        return application(kind)
    try:
        owner_kind = OwnerKind(kind.strip().lower())
    except ValueError as exc:
        raise InvalidOwnerError(f"unknown owner kind in {value!r}") from exc
    return OwnerRef(owner_kind, owner_id.strip())


def require_service_owner(owner: OwnerRef) -> OwnerRef:
    if owner.kind is OwnerKind.PROJECT:
        raise InvalidOwnerError("a project cannot own this resource")
    return owner
