from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from tests.support.fake_dokploy import FakeDokploy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from dokploy_sync.adapters.dokploy import DokployClient

    type Scenario[T] = Callable[[DokployClient], Awaitable[T]]


@pytest.fixture
def fake_api() -> FakeDokploy:
    return FakeDokploy()


@pytest.fixture
def run_client(fake_api: FakeDokploy) -> Callable[[Scenario[object]], object]:
    """Run an async scenario against a client wired to ``fake_api``."""

    def runner(scenario: Scenario[object]) -> object:
        async def main() -> object:
            async with fake_api.client() as client:
                return await scenario(client)

        return asyncio.run(main())

    return runner


@pytest.fixture(autouse=True)
def _clear_dokploy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DOKPLOY_HOST",
        "DOKPLOY_API_KEY",
        "DOKPLOY_TIMEOUT_SECONDS",
        "DOKPLOY_MERGE_ATTEMPTS",
        "DOKPLOY_MERGE_BACKOFF_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
