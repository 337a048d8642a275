"""Published ports of applications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.errors import NotFoundAfterCreate

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .schema import Application, Port

if TYPE_CHECKING:
    from .transport import DokployTransport

DEFAULT_PROTOCOL = "tcp"
DEFAULT_PUBLISH_MODE = "ingress"


def port_payload(
    published_port: int,
    target_port: int,
    protocol: str | None,
    publish_mode: str | None,
) -> dict[str, Any]:
    return {
        "publishedPort": published_port,
        "targetPort": target_port,
        "protocol": (protocol or "").strip() or DEFAULT_PROTOCOL,
        "publishMode": (publish_mode or "").strip() or DEFAULT_PUBLISH_MODE,
    }


class PortService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(
        self,
        application_id: str,
        published_port: int,
        target_port: int,
        *,
        protocol: str | None = None,
        publish_mode: str | None = None,
    ) -> Port:
        endpoint = "port.create"
        raw = await self._transport.post(
            endpoint,
            {
                "applicationId": application_id,
                **port_payload(published_port, target_port, protocol, publish_mode),
            },
        )
        result = normalize_response(raw, Port, "port")
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            return await self._find(application_id, published_port, target_port)
        raise result.error(endpoint)

    async def get(self, port_id: str) -> Port:
        endpoint = "port.one"
        raw = await self._transport.get(endpoint, {"portId": port_id})
        return expect_entity(endpoint, raw, Port, "port")

    async def update(
        self,
        port_id: str,
        published_port: int,
        target_port: int,
        *,
        protocol: str | None = None,
        publish_mode: str | None = None,
    ) -> Port:
        endpoint = "port.update"
        raw = await self._transport.post(
            endpoint,
            {"portId": port_id, **port_payload(published_port, target_port, protocol, publish_mode)},
        )
        result = normalize_response(raw, Port, "port")
        if isinstance(result, Resolved):
            return result.entity
        return await self.get(port_id)

    async def delete(self, port_id: str) -> None:
        await self._transport.post("port.delete", {"portId": port_id})

    async def _find(self, application_id: str, published_port: int, target_port: int) -> Port:
        endpoint = "application.one"
        raw = await self._transport.get(endpoint, {"applicationId": application_id})
        application = expect_entity(endpoint, raw, Application, "application")
        for port in application.ports:
            if (
                port.published_port == published_port
                and port.target_port == target_port
                and port.primary_id
            ):
                return port
        raise NotFoundAfterCreate("port", f"{published_port}:{target_port}", endpoint=endpoint)
