from __future__ import annotations

import asyncio

import pytest

from dokploy_sync.config import DeletePolicy
from dokploy_sync.domain.errors import DeleteChainError
from tests.support.fake_dokploy import FakeDokploy, SleepRecorder, ack, failure


def _delete_application(fake_api: FakeDokploy, **client_options: object) -> None:
    async def main() -> None:
        async with fake_api.client(**client_options) as client:  # type: ignore[arg-type]
            await client.applications.delete("a1")

    asyncio.run(main())


def test_primary_delete_succeeds(fake_api: FakeDokploy) -> None:
    fake_api.on("application.stop", ack())
    fake_api.on("application.delete", ack())

    _delete_application(fake_api)

    assert fake_api.endpoints == ["application.stop", "application.delete"]
    assert fake_api.calls[1].body == {"applicationId": "a1"}


def test_fallback_after_primary_failure(fake_api: FakeDokploy) -> None:
    fake_api.on("application.stop", ack())
    fake_api.on("application.delete", failure(404, "no such procedure"))
    fake_api.on("application.remove", ack())

    _delete_application(fake_api)

    assert fake_api.endpoints == ["application.stop", "application.delete", "application.remove"]


def test_both_failing_lists_both_errors(fake_api: FakeDokploy) -> None:
    fake_api.on("application.stop", ack())
    fake_api.on("application.delete", failure(500, "first"))
    fake_api.on("application.remove", failure(500, "second"))

    with pytest.raises(DeleteChainError) as excinfo:
        _delete_application(fake_api)

    message = str(excinfo.value)
    assert message.startswith("failed to delete application a1: application.delete failed:")
    assert "; application.remove fallback failed:" in message
    assert [attempt.endpoint for attempt in excinfo.value.attempts] == [
        "application.delete",
        "application.remove",
    ]


def test_stop_failure_does_not_block_delete(fake_api: FakeDokploy) -> None:
    fake_api.on("application.stop", failure(500, "not running"))
    fake_api.on("application.delete", ack())

    _delete_application(fake_api)

    assert fake_api.endpoints == ["application.stop", "application.delete"]


def test_stop_can_be_skipped(fake_api: FakeDokploy) -> None:
    fake_api.on("application.delete", ack())

    _delete_application(fake_api, delete=DeletePolicy(stop_before_delete=False))

    assert fake_api.endpoints == ["application.delete"]


def test_settle_pause_after_stop(fake_api: FakeDokploy) -> None:
    fake_api.on("application.stop", ack())
    fake_api.on("application.delete", ack())
    sleep = SleepRecorder()

    _delete_application(fake_api, delete=DeletePolicy(settle_seconds=2.0), sleep=sleep)

    assert sleep.delays == [2.0]
