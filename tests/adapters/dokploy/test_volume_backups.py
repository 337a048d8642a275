from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dokploy_sync.adapters.dokploy import VolumeBackup, VolumeBackupSettings
from dokploy_sync.domain.errors import DokployError, InvalidOwnerError
from dokploy_sync.domain.owners import application, compose, project
from tests.support.fake_dokploy import FakeDokploy, ack

if TYPE_CHECKING:
    from collections.abc import Callable

    from dokploy_sync.adapters.dokploy import DokployClient


def test_volume_name_is_prefixed_on_the_wire_and_logical_on_read(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on(
        "volumeBackups.create",
        {
            "volumeBackupId": "vb1",
            "name": "nightly",
            "appName": "ghost-1",
            "volumeName": "ghost-1_data",
            "composeId": "c1",
        },
    )
    fake_api.on(
        "volumeBackups.one",
        {"volumeBackupId": "vb1", "appName": "ghost-1", "volumeName": "ghost-1_data"},
    )
    settings = VolumeBackupSettings(
        name="nightly", volume_name="data", destination_id="d1", app_name="ghost-1"
    )

    async def scenario(client: DokployClient) -> tuple[VolumeBackup, VolumeBackup]:
        created = await client.volume_backups.create(compose("c1"), settings)
        return created, await client.volume_backups.get("vb1")

    created, fetched = run_client(scenario)

    body = fake_api.calls_to("volumeBackups.create")[0].body
    assert body["volumeName"] == "ghost-1_data"
    assert body["composeId"] == "c1"
    assert body["serviceType"] == "compose"
    assert body["cronExpression"] == "0 3 * * *"
    assert body["keepLatestCount"] == 14
    assert body["enabled"] is True
    assert body["turnOff"] is False
    assert created.volume_name == "data"
    assert fetched.volume_name == "data"
    assert created.owner == compose("c1")


def test_app_name_and_destination_are_looked_up(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.one", {"applicationId": "a1", "name": "web", "appName": "web-abc"})
    fake_api.on(
        "destination.all",
        [{"destinationId": "d0", "name": "other"}, {"destinationId": "d9", "name": "s3-main"}],
    )
    fake_api.on("volumeBackups.create", ack())
    fake_api.on(
        "volumeBackups.list",
        [
            {
                "volumeBackupId": "vb2",
                "name": "nightly",
                "appName": "web-abc",
                "volumeName": "web-abc_uploads",
                "enabled": False,
            }
        ],
    )
    settings = VolumeBackupSettings(
        name="nightly", volume_name="uploads", destination_name="s3-main", enabled=False
    )

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.create(application("a1"), settings)

    backup = run_client(scenario)

    body = fake_api.calls_to("volumeBackups.create")[0].body
    assert body["appName"] == "web-abc"
    assert body["destinationId"] == "d9"
    assert body["volumeName"] == "web-abc_uploads"
    assert body["turnOff"] is True
    assert fake_api.calls_to("volumeBackups.list")[0].params == {
        "id": "a1",
        "volumeBackupType": "application",
    }
    assert backup.volume_backup_id == "vb2"
    assert backup.volume_name == "uploads"
    assert backup.is_enabled is False


def test_unknown_destination_name(fake_api: FakeDokploy, run_client: Callable) -> None:
    fake_api.on("destination.all", {"destinations": []})
    settings = VolumeBackupSettings(
        name="n", volume_name="data", destination_name="missing", app_name="x"
    )

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.create(compose("c1"), settings)

    with pytest.raises(DokployError, match="'missing' not found"):
        run_client(scenario)

    assert fake_api.calls_to("volumeBackups.create") == []


def test_destination_is_required(run_client: Callable) -> None:
    settings = VolumeBackupSettings(name="n", volume_name="data", app_name="x")

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.create(compose("c1"), settings)

    with pytest.raises(ValueError, match="destination"):
        run_client(scenario)


def test_project_owner_is_rejected(run_client: Callable) -> None:
    settings = VolumeBackupSettings(name="n", volume_name="data", destination_id="d1")

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.create(project("p1"), settings)

    with pytest.raises(InvalidOwnerError):
        run_client(scenario)


def test_turn_off_wins_over_enabled() -> None:
    assert VolumeBackup(volume_backup_id="v", enabled=True, turn_off=True).is_enabled is False
    assert VolumeBackup(volume_backup_id="v").is_enabled is True


def test_read_without_app_name_uses_owner_app_name(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on(
        "volumeBackups.one",
        {"volumeBackupId": "vb1", "composeId": "c1", "volumeName": "ghost-1_data"},
    )
    fake_api.on("compose.one", {"composeId": "c1", "name": "ghost", "appName": "ghost-1"})

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.get("vb1")

    backup = run_client(scenario)

    assert backup.volume_name == "data"
    assert backup.app_name == "ghost-1"
    assert fake_api.calls_to("compose.one")[0].params == {"composeId": "c1"}


def test_read_without_app_name_uses_known_app_name(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on(
        "volumeBackups.one",
        {"volumeBackupId": "vb1", "composeId": "c1", "volumeName": "ghost-1_data"},
    )

    async def scenario(client: DokployClient) -> VolumeBackup:
        return await client.volume_backups.get("vb1", app_name="ghost-1")

    backup = run_client(scenario)

    assert backup.volume_name == "data"
    assert fake_api.endpoints == ["volumeBackups.one"]


def test_list_without_app_name_uses_owner_app_name(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on(
        "volumeBackups.list",
        [
            {"volumeBackupId": "vb1", "volumeName": "web-abc_data"},
            {"volumeBackupId": "vb2", "appName": "web-abc", "volumeName": "web-abc_uploads"},
        ],
    )
    fake_api.on("application.one", {"applicationId": "a1", "appName": "web-abc"})

    async def scenario(client: DokployClient) -> list[VolumeBackup]:
        return await client.volume_backups.list_for(application("a1"))

    backups = run_client(scenario)

    assert [backup.volume_name for backup in backups] == ["data", "uploads"]
    assert len(fake_api.calls_to("application.one")) == 1
