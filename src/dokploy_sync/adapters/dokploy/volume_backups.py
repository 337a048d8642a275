"""Scheduled backups of named volumes.

Volume names are returned in their logical form (``data``); the
``<appName>_`` prefix Dokploy uses on the wire is added and stripped here.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import OwnerKind
from dokploy_sync.domain.errors import DokployError
from dokploy_sync.domain.owners import require_service_owner
from dokploy_sync.domain.volumes import from_wire_volume_name, to_wire_volume_name

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response, parse_collection
from .resolver import resolve_by_name
from .schema import Application, Compose, VolumeBackup

if TYPE_CHECKING:
    from dokploy_sync.domain.owners import OwnerRef

    from .destinations import BackupDestinationService
    from .transport import DokployTransport

log = getLogger(__name__)

DEFAULT_CRON_EXPRESSION = "0 3 * * *"
DEFAULT_KEEP_LATEST_COUNT = 14


@dataclass(slots=True, kw_only=True)
class VolumeBackupSettings:
    """Desired state of a volume backup.

    Either ``destination_id`` or ``destination_name`` must be set. ``app_name``
    defaults to the owner's app name.
    """

    name: str
    volume_name: str
    destination_id: str | None = None
    destination_name: str | None = None
    app_name: str | None = None
    service_name: str | None = None
    cron_expression: str = DEFAULT_CRON_EXPRESSION
    prefix: str | None = None
    keep_latest_count: int = DEFAULT_KEEP_LATEST_COUNT
    enabled: bool = True


def to_logical(backup: VolumeBackup) -> VolumeBackup:
    if not backup.volume_name:
        return backup
    return backup.model_copy(
        update={"volume_name": from_wire_volume_name(backup.app_name, backup.volume_name)}
    )


class VolumeBackupService:
    def __init__(
        self,
        transport: DokployTransport,
        *,
        destinations: BackupDestinationService,
    ) -> None:
        self._transport = transport
        self._destinations = destinations

    async def create(self, owner: OwnerRef, settings: VolumeBackupSettings) -> VolumeBackup:
        owner = require_service_owner(owner)
        payload = await self._payload(owner, settings)
        endpoint = "volumeBackups.create"
        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, VolumeBackup, "volumeBackup")
        if isinstance(result, Resolved):
            created = result.entity
        elif isinstance(result, AckOnly):
            created = resolve_by_name(
                await self.list_for(owner, logical=False),
                settings.name,
                kind="volume backup",
                endpoint="volumeBackups.list",
            )
        else:
            raise result.error(endpoint)
        log.info(f"Created volume backup {settings.name!r} for {owner}")
        return to_logical(self._with_app_name(created, payload["appName"]))

    async def get(self, volume_backup_id: str, *, app_name: str | None = None) -> VolumeBackup:
        """Fetch one backup with its logical volume name.

        When the response omits ``appName`` the prefix is stripped using
        ``app_name``, or the owner's app name looked up from its id.
        """

        endpoint = "volumeBackups.one"
        raw = await self._transport.get(endpoint, {"volumeBackupId": volume_backup_id})
        backup = expect_entity(endpoint, raw, VolumeBackup, "volumeBackup")
        if not backup.app_name:
            if app_name and app_name.strip():
                backup = self._with_app_name(backup, app_name.strip())
            elif backup.application_id or backup.compose_id:
                backup = self._with_app_name(backup, await self.resolve_app_name(backup.owner))
        return to_logical(backup)

    async def list_for(
        self,
        owner: OwnerRef,
        *,
        logical: bool = True,
        app_name: str | None = None,
    ) -> list[VolumeBackup]:
        owner = require_service_owner(owner)
        endpoint = "volumeBackups.list"
        raw = await self._transport.get(
            endpoint, {"id": owner.id, "volumeBackupType": owner.kind.value}
        )
        backups = parse_collection(endpoint, raw, VolumeBackup, "volumeBackups")
        if not logical:
            return backups
        if any(not backup.app_name for backup in backups):
            known = await self.resolve_app_name(owner, app_name)
            backups = [self._with_app_name(backup, known) for backup in backups]
        return [to_logical(backup) for backup in backups]

    async def update(
        self,
        volume_backup_id: str,
        owner: OwnerRef,
        settings: VolumeBackupSettings,
    ) -> VolumeBackup:
        owner = require_service_owner(owner)
        payload = await self._payload(owner, settings)
        endpoint = "volumeBackups.update"
        raw = await self._transport.post(endpoint, {**payload, "volumeBackupId": volume_backup_id})
        result = normalize_response(raw, VolumeBackup, "volumeBackup")
        if isinstance(result, Resolved):
            return to_logical(self._with_app_name(result.entity, payload["appName"]))
        return await self.get(volume_backup_id, app_name=payload["appName"])

    async def delete(self, volume_backup_id: str) -> None:
        await self._transport.post("volumeBackups.delete", {"volumeBackupId": volume_backup_id})

    async def resolve_app_name(self, owner: OwnerRef, app_name: str | None = None) -> str:
        if app_name and app_name.strip():
            return app_name.strip()
        endpoint = f"{owner.kind}.one"
        raw = await self._transport.get(endpoint, owner.wire())
        model = Application if owner.kind is OwnerKind.APPLICATION else Compose
        entity = expect_entity(endpoint, raw, model, owner.kind.value)
        for candidate in (entity.app_name, entity.name):
            if candidate and candidate.strip():
                return candidate.strip()
        raise DokployError(f"{owner} did not return an app name")

    async def resolve_destination_id(self, settings: VolumeBackupSettings) -> str:
        if settings.destination_id and settings.destination_id.strip():
            return settings.destination_id.strip()
        if settings.destination_name and settings.destination_name.strip():
            destination = await self._destinations.find_by_name(settings.destination_name)
            return destination.primary_id
        raise ValueError("set either destination_id or destination_name")

    async def _payload(self, owner: OwnerRef, settings: VolumeBackupSettings) -> dict[str, Any]:
        app_name = await self.resolve_app_name(owner, settings.app_name)
        payload: dict[str, Any] = {
            **owner.wire(),
            "name": settings.name,
            "serviceType": owner.kind.value,
            "appName": app_name,
            "volumeName": to_wire_volume_name(app_name, settings.volume_name),
            "destinationId": await self.resolve_destination_id(settings),
            "cronExpression": settings.cron_expression or DEFAULT_CRON_EXPRESSION,
            "keepLatestCount": settings.keep_latest_count,
            "enabled": settings.enabled,
            "turnOff": not settings.enabled,
        }
        if settings.service_name:
            payload["serviceName"] = settings.service_name
        if settings.prefix:
            payload["prefix"] = settings.prefix
        return payload

    @staticmethod
    def _with_app_name(backup: VolumeBackup, app_name: str) -> VolumeBackup:
        if backup.app_name:
            return backup
        return backup.model_copy(update={"app_name": app_name})
