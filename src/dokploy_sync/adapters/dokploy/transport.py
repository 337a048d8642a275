"""Single-request transport for the Dokploy API.

Endpoints are addressed as ``<resource>.<verb>`` below the configured base
URL. GET parameters travel as a query string; POST bodies as JSON.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from dokploy_sync.domain.errors import RemoteAPIError, TransportFailure

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dokploy_sync.adapters.http_resilience import RequestOptions, ResilientClient

log = getLogger(__name__)


class DokployTransport:
    """Returns raw response bytes or raises a structured failure."""

    def __init__(self, client: ResilientClient) -> None:
        self._client = client

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> bytes:
        options: RequestOptions = {}
        if params:
            options["params"] = dict(params)
        if timeout is not None:
            options["timeout"] = timeout
        return await self._send("GET", endpoint, options)

    async def post(
        self,
        endpoint: str,
        body: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> bytes:
        options: RequestOptions = {"json": dict(body) if body is not None else {}}
        if timeout is not None:
            options["timeout"] = timeout
        return await self._send("POST", endpoint, options)

    async def _send(self, method: str, endpoint: str, options: RequestOptions) -> bytes:
        log.debug(f"{method} {endpoint}")
        try:
            if method == "GET":
                response = await self._client.get(endpoint, **options)
            else:
                response = await self._client.post(endpoint, **options)
        except httpx.HTTPError as exc:
            raise TransportFailure(endpoint, str(exc) or type(exc).__name__) from exc

        if response.status_code >= 400:
            body = response.text
            log.debug(f"{method} {endpoint} -> {response.status_code}: {body}")
            raise RemoteAPIError(endpoint, response.status_code, body)
        return response.content
