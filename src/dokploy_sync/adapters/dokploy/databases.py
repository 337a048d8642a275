"""Database services, dispatched by engine.

Each engine has its own endpoint family (``postgres.create``, ``mysql.one``,
...) and its own identifier field (``postgresId``, ``mysqlId``, ...). The
engine tag is validated before any request is made.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from dokploy_sync.domain.enums import DatabaseType

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response
from .resolver import resolve_database
from .schema import Database, Environment, Project

if TYPE_CHECKING:
    from .transport import DokployTransport

log = getLogger(__name__)

_GENERIC_WRAPPER = "database"


def docker_image_for(db_type: DatabaseType, version: str | None) -> str | None:
    version = (version or "").strip()
    return f"{db_type.value}:{version}" if version else None


class DatabaseService:
    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def create(
        self,
        db_type: DatabaseType | str,
        *,
        environment_id: str,
        name: str,
        password: str,
        project_id: str | None = None,
        app_name: str | None = None,
        database_name: str | None = None,
        database_user: str | None = None,
        version: str | None = None,
        docker_image: str | None = None,
        description: str | None = None,
    ) -> Database:
        engine = DatabaseType.parse(db_type)
        endpoint = engine.endpoint("create")
        payload: dict[str, Any] = {
            "environmentId": environment_id,
            "name": name,
            "appName": app_name or name,
            "databaseName": database_name or name,
            "databasePassword": password,
            "databaseUser": database_user or engine.default_user,
        }
        image = docker_image or docker_image_for(engine, version)
        if image:
            payload["dockerImage"] = image
        if description:
            payload["description"] = description

        raw = await self._transport.post(endpoint, payload)
        result = normalize_response(raw, Database, engine.value, _GENERIC_WRAPPER)
        if isinstance(result, Resolved):
            return result.entity.with_identity(engine)
        if isinstance(result, AckOnly):
            log.debug(f"{endpoint} returned no payload; resolving {name!r} by name")
            return await self._resolve_created(engine, name, environment_id, project_id)
        raise result.error(endpoint)

    async def get(self, database_id: str, db_type: DatabaseType | str) -> Database:
        engine = DatabaseType.parse(db_type)
        endpoint = engine.endpoint("one")
        raw = await self._transport.get(endpoint, {engine.id_field: database_id})
        database = expect_entity(endpoint, raw, Database, engine.value, _GENERIC_WRAPPER)
        return database.with_identity(engine)

    async def delete(self, database_id: str, db_type: DatabaseType | str | None) -> None:
        """Remove a database; the engine tag is mandatory, there is no generic endpoint."""

        engine = DatabaseType.parse(db_type)
        await self._transport.post(engine.endpoint("remove"), {engine.id_field: database_id})

    async def _resolve_created(
        self,
        engine: DatabaseType,
        name: str,
        environment_id: str,
        project_id: str | None,
    ) -> Database:
        if project_id:
            endpoint = "project.one"
            raw = await self._transport.get(endpoint, {"projectId": project_id})
            project = expect_entity(endpoint, raw, Project, "project")
            environment = project.environment(environment_id)
            environments = [environment] if environment else project.environments
        else:
            endpoint = "environment.one"
            raw = await self._transport.get(endpoint, {"environmentId": environment_id})
            environments = [expect_entity(endpoint, raw, Environment, "environment")]
        return resolve_database(environments, engine, name, endpoint=endpoint)
