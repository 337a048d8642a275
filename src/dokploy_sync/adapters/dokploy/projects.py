"""Projects and their environments."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dokploy_sync.domain.errors import DokployError, NotFoundAfterCreate

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .resolver import find_by_name
from .schema import Environment, Project

if TYPE_CHECKING:
    from .transport import DokployTransport

log = getLogger(__name__)


class ProjectService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(self, name: str, description: str = "") -> Project:
        endpoint = "project.create"
        raw = await self._transport.post(endpoint, {"name": name, "description": description})
        return expect_entity(endpoint, raw, Project, "project")

    async def get(self, project_id: str) -> Project:
        endpoint = "project.one"
        raw = await self._transport.get(endpoint, {"projectId": project_id})
        return expect_entity(endpoint, raw, Project, "project")

    async def update(self, project_id: str, name: str, description: str = "") -> Project:
        endpoint = "project.update"
        raw = await self._transport.post(
            endpoint,
            {"projectId": project_id, "name": name, "description": description},
        )
        result = normalize_response(raw, Project, "project")
        if isinstance(result, Resolved):
            return result.entity
        return await self.get(project_id)

    async def delete(self, project_id: str) -> None:
        await self._transport.post("project.remove", {"projectId": project_id})


class EnvironmentService:
    """Environments are nested in projects and have no list endpoint of their own."""

    def __init__(self, transport: DokployTransport, projects: ProjectService) -> None:
        self._transport = transport
        self._projects = projects

    async def create(self, project_id: str, name: str, description: str = "") -> Environment:
        """Create an environment, or adopt an existing one with the same name.

        Dokploy rejects creating reserved names such as ``production`` while
        still listing that environment in the project; in that case the
        existing environment is returned.
        """

        endpoint = "environment.create"
        try:
            raw = await self._transport.post(
                endpoint,
                {"projectId": project_id, "name": name, "description": description},
            )
        except DokployError as exc:
            existing = await self._recover(project_id, name, exc)
            log.info(f"Adopted existing environment {name!r} ({existing.environment_id})")
            return existing

        result = normalize_response(raw, Environment, "environment")
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            project = await self._projects.get(project_id)
            match = find_by_name(project.environments, name, casefold=True)
            if match is None:
                raise NotFoundAfterCreate("environment", name, endpoint="project.one")
            return match
        raise result.error(endpoint)

    async def get(self, environment_id: str, *, project_id: str | None = None) -> Environment | None:
        """Return the environment, or ``None`` when the project no longer has it."""

        if project_id:
            project = await self._projects.get(project_id)
            return project.environment(environment_id)
        endpoint = "environment.one"
        raw = await self._transport.get(endpoint, {"environmentId": environment_id})
        return expect_entity(endpoint, raw, Environment, "environment")

    async def update(
        self,
        environment_id: str,
        *,
        name: str,
        description: str = "",
        project_id: str | None = None,
    ) -> Environment:
        endpoint = "environment.update"
        payload = {"environmentId": environment_id, "name": name, "description": description}
        if project_id:
            payload["projectId"] = project_id
        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, Environment, "environment")
        if isinstance(result, Resolved):
            return result.entity
        refreshed = await self.get(environment_id, project_id=project_id)
        if refreshed is None:
            raise DokployError(
                f"environment {environment_id} missing from project {project_id} after {endpoint}"
            )
        return refreshed

    async def delete(self, environment_id: str) -> None:
        await self._transport.post("environment.remove", {"environmentId": environment_id})

    async def _recover(self, project_id: str, name: str, cause: DokployError) -> Environment:
        try:
            project = await self._projects.get(project_id)
        except DokployError as lookup_error:
            raise DokployError(
                f"environment.create failed: {cause}; "
                f"project.one lookup for recovery failed: {lookup_error}"
            ) from cause
        match = find_by_name(project.environments, name, casefold=True)
        if match is None:
            raise cause
        return match
