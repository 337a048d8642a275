"""In-memory Dokploy API served through ``httpx.MockTransport``."""

from __future__ import annotations

import json
from collections import defaultdict, deque
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import httpx

from dokploy_sync.adapters.dokploy import DokployClient
from dokploy_sync.adapters.http_resilience import ResilientClient
from dokploy_sync.config import DokployConfig, MergePolicy, build_resilience

if TYPE_CHECKING:
    from collections.abc import Callable

    from dokploy_sync.config import DeletePolicy, ResilienceConfig

BASE_URL = "https://dokploy.test/api"
API_KEY = "test-key"

type Reply = object


@dataclass(frozen=True, slots=True)
class Call:
    method: str
    endpoint: str
    params: dict[str, str]
    body: Any
    headers: httpx.Headers = field(repr=False)


def failure(status_code: int = 500, message: str = "boom") -> httpx.Response:
    return httpx.Response(status_code, text=message)


def ack() -> httpx.Response:
    return httpx.Response(200, content=b"true")


class FakeDokploy:
    """Queue replies per endpoint and record every request.

    A reply is a JSON-serialisable value, an ``httpx.Response``, an exception
    instance (raised as a transport error) or a callable receiving the
    :class:`Call`. The last queued reply for an endpoint is repeated.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._replies: defaultdict[str, deque[Reply]] = defaultdict(deque)

    def on(self, endpoint: str, *replies: Reply) -> FakeDokploy:
        self._replies[endpoint].extend(replies)
        return self

    def calls_to(self, endpoint: str) -> list[Call]:
        return [call for call in self.calls if call.endpoint == endpoint]

    @property
    def endpoints(self) -> list[str]:
        return [call.endpoint for call in self.calls]

    def handle(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content) if request.content else None
        call = Call(
            method=request.method,
            endpoint=endpoint,
            params=dict(request.url.params),
            body=body,
            headers=request.headers,
        )
        self.calls.append(call)

        queue = self._replies.get(endpoint)
        if not queue:
            return httpx.Response(404, text=f"no route for {endpoint}")
        reply = queue.popleft() if len(queue) > 1 else queue[0]
        if callable(reply):
            reply = reply(call)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def client_factory(self, resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(self.handle))

    def client(
        self,
        *,
        merge: MergePolicy | None = None,
        delete: DeletePolicy | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> DokployClient:
        config = make_config(merge=merge, delete=delete)
        if sleep is None:
            return DokployClient(config, client_factory=self.client_factory, sleep=_no_sleep)
        return DokployClient(config, client_factory=self.client_factory, sleep=sleep)


async def _no_sleep(_seconds: float) -> None:
    return None


def make_config(
    *,
    merge: MergePolicy | None = None,
    delete: DeletePolicy | None = None,
) -> DokployConfig:
    resilience = replace(build_resilience(BASE_URL, API_KEY), retry=None)
    config = DokployConfig(
        base_url=BASE_URL,
        api_key=API_KEY,
        resilience=resilience,
        merge=merge or MergePolicy(backoff_seconds=0.0),
    )
    if delete is not None:
        config = replace(config, delete=delete)
    return config


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
