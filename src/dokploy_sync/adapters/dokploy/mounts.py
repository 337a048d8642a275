"""Volume, bind and file mounts of applications and compose stacks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import MountType, OwnerKind
from dokploy_sync.domain.errors import NotFoundAfterCreate, UnsupportedTypeError
from dokploy_sync.domain.owners import require_service_owner

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .schema import Application, Compose, Mount

if TYPE_CHECKING:
    from dokploy_sync.domain.owners import OwnerRef

    from .transport import DokployTransport


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def mount_payload(
    mount_path: str,
    *,
    mount_type: MountType | str | None = None,
    volume_name: str | None = None,
    host_path: str | None = None,
    content: str | None = None,
    file_path: str | None = None,
) -> dict[str, Any]:
    """Build the mount body; the type defaults to a named volume."""

    raw_type = _clean(str(mount_type) if mount_type is not None else None)
    try:
        resolved_type = MountType(raw_type.lower()) if raw_type else MountType.VOLUME
    except ValueError as exc:
        raise UnsupportedTypeError("mount type", mount_type) from exc

    payload: dict[str, Any] = {"type": resolved_type.value, "mountPath": mount_path.strip()}
    optional = {
        "volumeName": _clean(volume_name),
        "hostPath": _clean(host_path),
        "content": content,
        "filePath": _clean(file_path),
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


class MountService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(self, owner: OwnerRef, mount_path: str, **options: Any) -> Mount:
        """Create a mount for ``owner``; ``options`` as for :func:`mount_payload`."""

        owner = require_service_owner(owner)
        endpoint = "mounts.create"
        payload = {
            **mount_payload(mount_path, **options),
            "serviceId": owner.id,
            "serviceType": owner.kind.value,
        }
        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, Mount, "mount")
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            return await self._find(owner, payload["mountPath"])
        raise result.error(endpoint)

    async def get(self, mount_id: str) -> Mount:
        endpoint = "mounts.one"
        raw = await self._transport.get(endpoint, {"mountId": mount_id})
        return expect_entity(endpoint, raw, Mount, "mount")

    async def update(self, mount_id: str, mount_path: str, **options: Any) -> Mount:
        endpoint = "mounts.update"
        raw = await self._transport.post(
            endpoint, {"mountId": mount_id, **mount_payload(mount_path, **options)}
        )
        result = normalize_response(raw, Mount, "mount")
        if isinstance(result, Resolved):
            return result.entity
        return await self.get(mount_id)

    async def delete(self, mount_id: str) -> None:
        await self._transport.post("mounts.remove", {"mountId": mount_id})

    async def _find(self, owner: OwnerRef, mount_path: str) -> Mount:
        endpoint = f"{owner.kind}.one"
        raw = await self._transport.get(endpoint, owner.wire())
        model = Application if owner.kind is OwnerKind.APPLICATION else Compose
        entity = expect_entity(endpoint, raw, model, owner.kind.value)
        for mount in entity.mounts:
            if mount.mount_path == mount_path and mount.primary_id:
                return mount
        raise NotFoundAfterCreate("mount", mount_path, endpoint=endpoint)
