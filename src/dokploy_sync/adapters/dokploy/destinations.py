"""S3-compatible backup destinations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.errors import DokployError

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response, parse_collection
from .resolver import find_by_name, resolve_by_name
from .schema import BackupDestination

if TYPE_CHECKING:
    from .transport import DokployTransport

DEFAULT_PROVIDER = "s3"


def destination_payload(destination: BackupDestination) -> dict[str, Any]:
    """Wire body using the canonical field names (``accessKey``/``secretAccessKey``)."""

    payload = destination.model_dump(
        by_alias=True,
        exclude={"destination_id"},
        exclude_none=True,
    )
    if not (destination.provider_type or "").strip():
        payload["provider"] = DEFAULT_PROVIDER
    return payload


class BackupDestinationService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(self, destination: BackupDestination) -> BackupDestination:
        if not destination.name:
            raise ValueError("backup destination name is required")
        endpoint = "destination.create"
        raw = await self._transport.post(endpoint, destination_payload(destination))
        result = normalize_response(raw, BackupDestination, "destination")
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            return resolve_by_name(
                await self.list_all(),
                destination.name,
                kind="backup destination",
                endpoint="destination.all",
            )
        raise result.error(endpoint)

    async def get(self, destination_id: str) -> BackupDestination:
        endpoint = "destination.one"
        raw = await self._transport.get(endpoint, {"destinationId": destination_id})
        return expect_entity(endpoint, raw, BackupDestination, "destination")

    async def list_all(self) -> list[BackupDestination]:
        endpoint = "destination.all"
        raw = await self._transport.get(endpoint)
        return parse_collection(endpoint, raw, BackupDestination, "destinations")

    async def find_by_name(self, name: str) -> BackupDestination:
        match = find_by_name(await self.list_all(), name.strip())
        if match is None:
            raise DokployError(f"backup destination {name!r} not found via destination.all")
        return match

    async def update(self, destination_id: str, destination: BackupDestination) -> BackupDestination:
        endpoint = "destination.update"
        raw = await self._transport.post(
            endpoint, {**destination_payload(destination), "destinationId": destination_id}
        )
        result = normalize_response(raw, BackupDestination, "destination")
        if isinstance(result, Resolved):
            return result.entity
        return await self.get(destination_id)

    async def delete(self, destination_id: str) -> None:
        await self._transport.post("destination.remove", {"destinationId": destination_id})
