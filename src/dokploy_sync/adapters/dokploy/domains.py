"""Domains routed to applications or compose services."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import OwnerKind
from dokploy_sync.domain.errors import DokployError, NotFoundAfterCreate
from dokploy_sync.domain.owners import require_service_owner

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .schema import Application, Compose, Domain

if TYPE_CHECKING:
    from dokploy_sync.domain.owners import OwnerRef

    from .transport import DokployTransport

log = getLogger(__name__)

DEFAULT_PATH = "/"
DEFAULT_PORT = 3000


def _parse_generated_host(raw: bytes) -> str:
    try:
        payload = json.loads(raw)
    except ValueError:
        return raw.decode().strip().strip('"')
    if isinstance(payload, dict) and isinstance(payload.get("domain"), str):
        return payload["domain"]
    if isinstance(payload, str):
        return payload
    return raw.decode().strip().strip('"')


class DomainService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(
        self,
        owner: OwnerRef,
        *,
        host: str | None = None,
        path: str = DEFAULT_PATH,
        port: int = DEFAULT_PORT,
        https: bool = True,
        certificate_type: str | None = None,
        service_name: str | None = None,
        generate_host: bool = False,
        redeploy: bool = False,
    ) -> Domain:
        """Attach a domain to ``owner``.

        With ``generate_host`` the host is requested from Dokploy based on the
        owner's app name instead of being passed in.
        """

        owner = require_service_owner(owner)
        if generate_host:
            entity = await self._owner_entity(owner)
            host = await self.generate_host(entity.app_name or entity.name or "")
        if not host:
            raise ValueError("host is required unless generate_host is set")

        endpoint = "domain.create"
        payload: dict[str, Any] = {
            **owner.wire(),
            "domainType": owner.kind.value,
            **self._settings(host, path, port, https, certificate_type, service_name),
        }
        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, Domain, "domain")
        if isinstance(result, Resolved):
            domain = result.entity
        elif isinstance(result, AckOnly):
            domain = await self._find(owner, payload["host"], payload["path"])
        else:
            raise result.error(endpoint)

        if redeploy:
            await self._redeploy(owner)
        return domain

    async def list_for(self, owner: OwnerRef) -> list[Domain]:
        entity = await self._owner_entity(require_service_owner(owner))
        return list(entity.domains)

    async def get(self, owner: OwnerRef, domain_id: str) -> Domain | None:
        """Domains have no detail endpoint; scan the owner's list."""

        domains = await self.list_for(owner)
        return next((domain for domain in domains if domain.domain_id == domain_id), None)

    async def update(
        self,
        domain_id: str,
        *,
        host: str,
        path: str = DEFAULT_PATH,
        port: int = DEFAULT_PORT,
        https: bool = True,
        certificate_type: str | None = None,
        service_name: str | None = None,
        redeploy_owner: OwnerRef | None = None,
    ) -> Domain:
        endpoint = "domain.update"
        payload = {
            "domainId": domain_id,
            **self._settings(host, path, port, https, certificate_type, service_name),
        }
        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, Domain, "domain")
        if isinstance(result, Resolved):
            domain = result.entity
        elif isinstance(result, AckOnly):
            domain = Domain.model_validate(payload)
        else:
            raise result.error(endpoint)

        if redeploy_owner is not None:
            await self._redeploy(require_service_owner(redeploy_owner))
        return domain

    async def delete(self, domain_id: str) -> None:
        await self._transport.post("domain.remove", {"domainId": domain_id})

    async def generate_host(self, app_name: str) -> str:
        raw = await self._transport.post("domain.generateDomain", {"appName": app_name})
        return _parse_generated_host(raw)

    @staticmethod
    def _settings(
        host: str,
        path: str,
        port: int,
        https: bool,
        certificate_type: str | None,
        service_name: str | None,
    ) -> dict[str, Any]:
        settings: dict[str, Any] = {
            "host": host.strip(),
            "path": path or DEFAULT_PATH,
            "port": port,
            "https": https,
        }
        if certificate_type:
            settings["certificateType"] = certificate_type
        if service_name:
            settings["serviceName"] = service_name
        return settings

    async def _owner_entity(self, owner: OwnerRef) -> Application | Compose:
        endpoint = f"{owner.kind}.one"
        raw = await self._transport.get(endpoint, owner.wire())
        model = Application if owner.kind is OwnerKind.APPLICATION else Compose
        return expect_entity(endpoint, raw, model, owner.kind.value)

    async def _find(self, owner: OwnerRef, host: str, path: str) -> Domain:
        entity = await self._owner_entity(owner)
        for domain in entity.domains:
            if domain.host == host and (domain.path or DEFAULT_PATH) == path and domain.primary_id:
                return domain
        raise NotFoundAfterCreate("domain", host, endpoint=f"{owner.kind}.one")

    async def _redeploy(self, owner: OwnerRef) -> None:
        try:
            await self._transport.post(f"{owner.kind}.deploy", owner.wire())
        except DokployError as exc:
            log.warning(f"Redeploy of {owner} after domain change failed: {exc}")
