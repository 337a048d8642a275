"""Application lifecycle: two-phase create, update, deploy and delete."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import OwnerKind, SourceType
from dokploy_sync.domain.owners import application as application_owner

from .fallback import application_steps
from .provisioning import ProvisionResult, TwoPhaseProvisioner, compact
from .schema import Application

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .fallback import DeleteChain
    from .mounts import MountService
    from .ports import PortService
    from .schema import Mount, Port
    from .transport import DokployTransport

log = getLogger(__name__)

DEFAULT_TRIGGER_TYPE = "push"

# Settings carried by application.update besides id, name, source type and
# the auto-deploy flag.
_CONFIG_FIELDS = frozenset(
    {
        "description",
        "repository",
        "branch",
        "build_type",
        "dockerfile",
        "docker_context_path",
        "docker_build_stage",
        "docker_image",
        "custom_git_url",
        "custom_git_branch",
        "custom_git_ssh_key_id",
        "custom_git_build_path",
        "username",
        "password",
        "is_preview_deployments_active",
        "preview_wildcard",
        "preview_port",
        "preview_path",
        "preview_https",
        "preview_certificate_type",
        "preview_custom_cert_resolver",
        "preview_limit",
        "preview_require_collaborator_permissions",
        "preview_env",
        "preview_build_args",
        "preview_labels",
    }
)


def default_source_type(app: Application) -> str:
    if app.source_type and app.source_type.strip():
        return app.source_type.strip()
    if app.custom_git_url and app.custom_git_url.strip():
        return SourceType.GIT.value
    return SourceType.GITHUB.value


def update_payload(
    app: Application,
    *,
    auto_deploy: bool | None = None,
    include_environment: bool = False,
) -> dict[str, Any]:
    """Body for application.update without the id; unset fields are omitted."""

    fields = set(_CONFIG_FIELDS)
    if include_environment:
        fields.add("environment_id")
    payload: dict[str, Any] = {
        "name": app.name,
        "sourceType": default_source_type(app),
        "autoDeploy": app.auto_deploy if auto_deploy is None else auto_deploy,
    }
    payload.update(compact(app.model_dump(by_alias=True, include=fields, exclude_none=True)))
    return payload


def github_provider_payload(app: Application) -> dict[str, Any] | None:
    """Body for application.saveGithubProvider, or ``None`` without a GitHub id."""

    if not (app.github_id and app.github_id.strip()):
        return None
    return {
        "enableSubmodules": app.enable_submodules,
        "triggerType": (app.trigger_type or "").strip() or DEFAULT_TRIGGER_TYPE,
        **compact(
            {
                "githubId": app.github_id,
                "repository": app.github_repository,
                "branch": app.github_branch,
                "owner": app.github_owner,
                "buildPath": app.github_build_path,
                "watchPaths": app.watch_paths,
            }
        ),
    }


class ApplicationService:
    def __init__(
        self,
        transport: DokployTransport,
        *,
        ports: PortService,
        mounts: MountService,
        delete_chain: DeleteChain,
    ) -> None:
        self._transport = transport
        self._ports = ports
        self._mounts = mounts
        self._delete_chain = delete_chain
        self._provisioner = TwoPhaseProvisioner(transport, OwnerKind.APPLICATION, Application)

    async def create(
        self,
        app: Application,
        *,
        ports: Sequence[Port] = (),
        mounts: Sequence[Mount] = (),
        deploy_on_create: bool = False,
    ) -> ProvisionResult[Application]:
        """Create and configure an application, then its ports and mounts.

        Only the minimal create and the configuration update can fail the
        call. Later steps report problems through ``result.warnings``.
        With ports or mounts, auto-deploy is switched on only after they
        exist so the first automatic deploy sees them.
        """

        if not app.name or not app.environment_id:
            raise ValueError("application name and environment_id are required")

        has_dependents = bool(ports or mounts)
        defer_auto_deploy = app.auto_deploy and has_dependents
        result = await self._provisioner.provision(
            app.name,
            app.environment_id,
            update_payload(app, auto_deploy=False if defer_auto_deploy else None),
        )
        app_id = result.entity.primary_id

        for index, port in enumerate(ports):
            await result.advisory(
                f"ports[{index}]",
                self._ports.create(
                    app_id,
                    port.published_port or 0,
                    port.target_port or 0,
                    protocol=port.protocol,
                    publish_mode=port.publish_mode,
                ),
            )
        for index, mount in enumerate(mounts):
            await result.advisory(
                f"mounts[{index}]",
                self._mounts.create(
                    application_owner(app_id),
                    mount.mount_path or "",
                    mount_type=mount.type,
                    volume_name=mount.volume_name,
                    host_path=mount.host_path,
                    content=mount.content,
                    file_path=mount.file_path,
                ),
            )

        github = github_provider_payload(app)
        if github is not None:
            await result.advisory("github provider", self.save_github_provider(app_id, github))

        if defer_auto_deploy and not result.entity.auto_deploy:
            enabled = await result.advisory(
                "auto deploy",
                self._provisioner.configure(app_id, update_payload(app, auto_deploy=True)),
            )
            if enabled is not None:
                result.entity = enabled

        if deploy_on_create and not (has_dependents and result.entity.auto_deploy):
            await result.advisory("deploy", self.deploy(app_id))
        return result

    async def get(self, application_id: str) -> Application:
        return await self._provisioner.get(application_id)

    async def update(self, application_id: str, app: Application) -> Application:
        payload = update_payload(app, include_environment=True)
        updated = await self._provisioner.configure(application_id, payload)
        github = github_provider_payload(app)
        if github is not None:
            await self.save_github_provider(application_id, github)
        return updated

    async def save_github_provider(self, application_id: str, config: dict[str, Any]) -> None:
        await self._transport.post(
            "application.saveGithubProvider", {**config, "applicationId": application_id}
        )

    async def deploy(self, application_id: str) -> None:
        await self._transport.post("application.deploy", {"applicationId": application_id})
        log.info(f"Triggered deploy of application {application_id}")

    async def stop(self, application_id: str) -> None:
        await self._transport.post("application.stop", {"applicationId": application_id})

    async def delete(self, application_id: str) -> None:
        steps = application_steps(application_id, self._delete_chain.policy)
        await self._delete_chain.run("application", application_id, steps)

