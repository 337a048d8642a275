from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from dokploy_sync.domain.errors import DokployError, NotFoundAfterCreate
from tests.support.fake_dokploy import FakeDokploy, ack, failure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from dokploy_sync.adapters.dokploy import DokployClient, SSHKey


def _create(client: DokployClient) -> Awaitable[SSHKey]:
    return client.ssh_keys.create("deploy", private_key="PRIV", public_key="PUB")


def test_create_sends_organization_and_resolves_ack(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("user.get", {"user": {"userId": "u1", "organizationId": "org1"}})
    fake_api.on("sshKey.create", ack())
    fake_api.on("sshKey.all", [{"sshKeyId": "k1", "name": "deploy"}])

    key: SSHKey = run_client(_create)

    assert key.ssh_key_id == "k1"
    assert fake_api.calls_to("sshKey.create")[0].body == {
        "name": "deploy",
        "description": "",
        "privateKey": "PRIV",
        "publicKey": "PUB",
        "organizationId": "org1",
    }


def test_empty_create_response_is_resolved_by_list(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("user.get", {"userId": "u1", "organizationId": "org1"})
    fake_api.on("sshKey.create", httpx.Response(200, content=b""))
    fake_api.on("sshKey.all", {"sshKeys": [{"sshKeyId": "k2", "name": "deploy"}]})

    assert run_client(_create).ssh_key_id == "k2"


def test_missing_key_after_create(fake_api: FakeDokploy, run_client: Callable) -> None:
    fake_api.on("user.get", {"userId": "u1", "organizationId": "org1"})
    fake_api.on("sshKey.create", ack())
    fake_api.on("sshKey.all", [])

    with pytest.raises(NotFoundAfterCreate):
        run_client(_create)


def test_user_lookup_failure(fake_api: FakeDokploy, run_client: Callable) -> None:
    fake_api.on("user.get", failure(401, "unauthorized"))

    with pytest.raises(DokployError, match="failed to get user for organization id"):
        run_client(_create)

    assert fake_api.calls_to("sshKey.create") == []
