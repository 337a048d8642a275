from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dokploy_sync.adapters.dokploy import Application, Mount, Port, ProvisionResult
from dokploy_sync.adapters.dokploy.applications import github_provider_payload, update_payload
from dokploy_sync.domain.errors import PartialProvisioningFailure
from tests.support.fake_dokploy import FakeDokploy, ack, failure

if TYPE_CHECKING:
    from collections.abc import Callable

    from dokploy_sync.adapters.dokploy import DokployClient


def _created(app_id: str = "a1", **fields: object) -> dict[str, object]:
    return {"application": {"applicationId": app_id, "name": "web", **fields}}


def test_source_type_defaults_to_git_with_custom_url() -> None:
    app = Application(name="web", custom_git_url="https://git.example/web.git")

    payload = update_payload(app)

    assert payload["sourceType"] == "git"
    assert payload["customGitUrl"] == "https://git.example/web.git"
    assert "description" not in payload


def test_source_type_defaults_to_github_and_explicit_wins() -> None:
    assert update_payload(Application(name="web"))["sourceType"] == "github"
    explicit = Application(name="web", source_type="docker", custom_git_url="https://x")
    assert update_payload(explicit)["sourceType"] == "docker"


def test_github_provider_payload_only_with_github_id() -> None:
    assert github_provider_payload(Application(name="web")) is None

    payload = github_provider_payload(
        Application(
            name="web",
            github_id="gh1",
            github_repository="web",
            github_owner="acme",
            github_branch="main",
            github_build_path="/",
        )
    )

    assert payload == {
        "enableSubmodules": False,
        "triggerType": "push",
        "githubId": "gh1",
        "repository": "web",
        "branch": "main",
        "owner": "acme",
        "buildPath": "/",
    }


def test_create_sends_minimal_body_then_configuration(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.create", _created())
    fake_api.on("application.update", _created(customGitUrl="https://git.example/web.git"))
    app = Application(
        name="web",
        environment_id="env1",
        custom_git_url="https://git.example/web.git",
        custom_git_branch="main",
    )

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(app)

    result = run_client(scenario)

    assert fake_api.endpoints == ["application.create", "application.update"]
    assert fake_api.calls[0].body == {"name": "web", "environmentId": "env1"}
    update = fake_api.calls[1].body
    assert update["applicationId"] == "a1"
    assert update["sourceType"] == "git"
    assert update["customGitBranch"] == "main"
    assert result.entity.custom_git_url == "https://git.example/web.git"
    assert result.warnings == []


def test_failed_configuration_reports_existing_id(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.create", _created("a42"))
    fake_api.on("application.update", failure(400, "invalid build type"))

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(Application(name="web", environment_id="env1"))

    with pytest.raises(PartialProvisioningFailure) as excinfo:
        run_client(scenario)

    error = excinfo.value
    assert error.entity_id == "a42"
    assert str(error).startswith("created application a42 but failed to update config:")
    assert "invalid build type" in str(error)
    assert not any(endpoint.startswith("application.delete") for endpoint in fake_api.endpoints)


def test_ack_create_is_resolved_from_environment(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.create", ack())
    fake_api.on(
        "environment.one",
        {
            "environmentId": "env1",
            "applications": [
                {"applicationId": "other", "name": "api"},
                {"applicationId": "a7", "name": "web"},
            ],
        },
    )
    fake_api.on("application.update", ack())
    fake_api.on("application.one", _created("a7"))

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(Application(name="web", environment_id="env1"))

    result = run_client(scenario)

    assert result.entity.application_id == "a7"
    assert fake_api.calls_to("environment.one")[0].params == {"environmentId": "env1"}
    assert fake_api.calls_to("application.update")[0].body["applicationId"] == "a7"


def test_auto_deploy_is_enabled_after_ports_and_mounts(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.create", _created())
    fake_api.on("application.update", _created(autoDeploy=False), _created(autoDeploy=True))
    fake_api.on("port.create", {"port": {"portId": "p1", "publishedPort": 8080, "targetPort": 80}})
    fake_api.on("mounts.create", {"mountId": "m1", "mountPath": "/data", "type": "volume"})
    app = Application(name="web", environment_id="env1", auto_deploy=True)

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(
            app,
            ports=[Port(published_port=8080, target_port=80)],
            mounts=[Mount(mount_path="/data", volume_name="web-data")],
        )

    result = run_client(scenario)

    assert fake_api.endpoints == [
        "application.create",
        "application.update",
        "port.create",
        "mounts.create",
        "application.update",
    ]
    first, second = fake_api.calls_to("application.update")
    assert first.body["autoDeploy"] is False
    assert second.body["autoDeploy"] is True
    assert fake_api.calls_to("port.create")[0].body == {
        "applicationId": "a1",
        "publishedPort": 8080,
        "targetPort": 80,
        "protocol": "tcp",
        "publishMode": "ingress",
    }
    assert fake_api.calls_to("mounts.create")[0].body == {
        "type": "volume",
        "mountPath": "/data",
        "volumeName": "web-data",
        "serviceId": "a1",
        "serviceType": "application",
    }
    assert result.entity.auto_deploy is True
    assert result.warnings == []


def test_auxiliary_failures_become_warnings(fake_api: FakeDokploy, run_client: Callable) -> None:
    fake_api.on("application.create", _created())
    fake_api.on("application.update", _created(autoDeploy=False), _created(autoDeploy=True))
    fake_api.on("port.create", failure(409, "port already published"))

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(
            Application(name="web", environment_id="env1", auto_deploy=True),
            ports=[Port(published_port=8080, target_port=80)],
        )

    result = run_client(scenario)

    assert result.entity.application_id == "a1"
    assert [warning.step for warning in result.warnings] == ["ports[0]"]
    assert "port already published" in result.warnings[0].message
    assert result.entity.auto_deploy is True


def test_github_provider_is_saved_after_configuration(
    fake_api: FakeDokploy, run_client: Callable
) -> None:
    fake_api.on("application.create", _created())
    fake_api.on("application.update", _created())
    fake_api.on("application.saveGithubProvider", ack())
    app = Application(name="web", environment_id="env1", github_id="gh1", github_repository="web")

    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(app, deploy_on_create=True)

    fake_api.on("application.deploy", ack())
    run_client(scenario)

    assert fake_api.endpoints[-2:] == ["application.saveGithubProvider", "application.deploy"]
    saved = fake_api.calls_to("application.saveGithubProvider")[0].body
    assert saved["applicationId"] == "a1"
    assert saved["githubId"] == "gh1"


def test_create_requires_name_and_environment(run_client: Callable) -> None:
    async def scenario(client: DokployClient) -> ProvisionResult[Application]:
        return await client.applications.create(Application(name="web"))

    with pytest.raises(ValueError, match="environment_id"):
        run_client(scenario)
