"""Pydantic models for Dokploy entities.

Field names are snake_case in Python and camelCase on the wire. Where the
platform has used several names for one value over time, every known name is
accepted on input and one canonical name is written out.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dokploy_sync.domain.enums import DatabaseType
from dokploy_sync.domain.owners import OwnerRef, owner_from_ids


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _null_to_list(value: object) -> object:
    return [] if value is None else value


class DokployModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    # Python attribute names checked, in order, for the entity identifier.
    id_fields: ClassVar[tuple[str, ...]] = ()
    name_field: ClassVar[str] = "name"

    @property
    def primary_id(self) -> str:
        for field_name in self.id_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, str) and value.strip():
                return value
        return ""

    @property
    def display_name(self) -> str:
        value = getattr(self, self.name_field, None)
        return value if isinstance(value, str) else ""


class User(DokployModel):
    id_fields = ("user_id",)

    user_id: str | None = None
    email: str | None = None
    organization_id: str | None = None


class Domain(DokployModel):
    id_fields = ("domain_id",)
    name_field = "host"

    domain_id: str | None = None
    application_id: str | None = None
    compose_id: str | None = None
    service_name: str | None = None
    host: str | None = None
    path: str | None = None
    port: int | None = None
    https: bool = False
    certificate_type: str | None = None
    custom_cert_resolver: str | None = None

    @property
    def owner(self) -> OwnerRef:
        return owner_from_ids(application_id=self.application_id, compose_id=self.compose_id)


class Port(DokployModel):
    id_fields = ("port_id",)

    port_id: str | None = None
    application_id: str | None = None
    published_port: int | None = None
    target_port: int | None = None
    protocol: str | None = None
    publish_mode: str | None = None


class Mount(DokployModel):
    id_fields = ("mount_id",)
    name_field = "mount_path"

    mount_id: str | None = None
    type: str | None = None
    mount_path: str | None = None
    volume_name: str | None = None
    host_path: str | None = None
    content: str | None = None
    file_path: str | None = None
    service_type: str | None = None
    application_id: str | None = None
    compose_id: str | None = None

    @property
    def owner(self) -> OwnerRef:
        return owner_from_ids(application_id=self.application_id, compose_id=self.compose_id)


class Application(DokployModel):
    id_fields = ("application_id",)

    application_id: str | None = None
    name: str | None = None
    app_name: str | None = None
    description: str | None = None
    project_id: str | None = None
    environment_id: str | None = None

    source_type: str | None = None
    repository: str | None = None
    branch: str | None = None
    build_type: str | None = None
    dockerfile: str | None = None
    docker_context_path: str | None = None
    docker_build_stage: str | None = None
    docker_image: str | None = None
    custom_git_url: str | None = None
    custom_git_branch: str | None = None
    custom_git_ssh_key_id: str | None = Field(default=None, alias="customGitSSHKeyId")
    custom_git_build_path: str | None = None
    username: str | None = None
    password: str | None = None

    github_id: str | None = None
    github_repository: str | None = None
    github_owner: str | None = Field(default=None, alias="owner")
    github_branch: str | None = None
    github_build_path: str | None = Field(default=None, alias="buildPath")
    watch_paths: list[str] | None = None
    enable_submodules: bool = False
    trigger_type: str | None = None

    env: str | None = None
    auto_deploy: bool = False

    is_preview_deployments_active: bool | None = None
    preview_wildcard: str | None = None
    preview_port: int | None = None
    preview_path: str | None = None
    preview_https: bool | None = None
    preview_certificate_type: str | None = None
    preview_custom_cert_resolver: str | None = None
    preview_limit: int | None = None
    preview_require_collaborator_permissions: bool | None = None
    preview_env: str | None = None
    preview_build_args: str | None = None
    preview_labels: list[str] | None = None

    domains: list[Domain] = Field(default_factory=list["Domain"])
    ports: list[Port] = Field(default_factory=list["Port"])
    mounts: list[Mount] = Field(default_factory=list["Mount"])

    _normalize_lists = field_validator("domains", "ports", "mounts", mode="before")(
        _null_to_list
    )


class Compose(DokployModel):
    id_fields = ("compose_id",)

    compose_id: str | None = None
    name: str | None = None
    app_name: str | None = None
    description: str | None = None
    project_id: str | None = None
    environment_id: str | None = None
    compose_type: str | None = None
    compose_file: str | None = None
    compose_path: str | None = None
    source_type: str | None = None
    custom_git_url: str | None = None
    custom_git_branch: str | None = None
    custom_git_ssh_key_id: str | None = Field(default=None, alias="customGitSSHKeyId")
    env: str | None = None
    auto_deploy: bool = False
    domains: list[Domain] = Field(default_factory=list["Domain"])
    mounts: list[Mount] = Field(default_factory=list["Mount"])

    _normalize_lists = field_validator("domains", "mounts", mode="before")(_null_to_list)


class Database(DokployModel):
    """A database service of any engine.

    ``id`` and ``type`` are not sent by every endpoint; the dispatcher stamps
    them once the engine is known.
    """

    id_fields = (
        "id",
        "postgres_id",
        "mysql_id",
        "mariadb_id",
        "mongo_id",
        "redis_id",
        "database_id",
    )

    id: str | None = None
    type: DatabaseType | None = None
    database_id: str | None = None
    postgres_id: str | None = None
    mysql_id: str | None = None
    mariadb_id: str | None = None
    mongo_id: str | None = None
    redis_id: str | None = None
    name: str | None = None
    app_name: str | None = None
    description: str | None = None
    project_id: str | None = None
    environment_id: str | None = None
    version: str | None = None
    docker_image: str | None = None
    database_name: str | None = None
    database_user: str | None = None
    password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("databasePassword", "password"),
        serialization_alias="databasePassword",
    )
    internal_port: int | None = None
    external_port: int | None = None

    def identifier_for(self, db_type: DatabaseType) -> str:
        """First non-empty id: engine-specific field, then the generic one."""

        for candidate in (
            getattr(self, f"{db_type.value}_id"),
            self.database_id,
            self.id,
        ):
            if candidate:
                return candidate
        return ""

    def with_identity(self, db_type: DatabaseType) -> Database:
        return self.model_copy(update={"id": self.identifier_for(db_type), "type": db_type})


class Environment(DokployModel):
    id_fields = ("environment_id",)

    environment_id: str | None = None
    name: str | None = None
    description: str | None = None
    project_id: str | None = None
    postgres: list[Database] = Field(default_factory=list["Database"])
    mysql: list[Database] = Field(default_factory=list["Database"])
    mariadb: list[Database] = Field(default_factory=list["Database"])
    mongo: list[Database] = Field(default_factory=list["Database"])
    redis: list[Database] = Field(default_factory=list["Database"])
    applications: list[Application] = Field(default_factory=list["Application"])
    compose: list[Compose] = Field(default_factory=list["Compose"])

    _normalize_lists = field_validator(
        "postgres",
        "mysql",
        "mariadb",
        "mongo",
        "redis",
        "applications",
        "compose",
        mode="before",
    )(_null_to_list)

    def databases(self, db_type: DatabaseType) -> list[Database]:
        return getattr(self, db_type.value)


class Project(DokployModel):
    id_fields = ("project_id",)

    project_id: str | None = None
    name: str | None = None
    description: str | None = None
    env: str | None = None
    environments: list[Environment] = Field(default_factory=list["Environment"])

    _normalize_lists = field_validator("environments", mode="before")(_null_to_list)

    def environment(self, environment_id: str) -> Environment | None:
        return next(
            (env for env in self.environments if env.environment_id == environment_id),
            None,
        )


class SSHKey(DokployModel):
    id_fields = ("ssh_key_id",)

    ssh_key_id: str | None = None
    name: str | None = None
    description: str | None = None
    private_key: str | None = None
    public_key: str | None = None
    organization_id: str | None = None


class BackupDestination(DokployModel):
    id_fields = ("destination_id",)

    destination_id: str | None = None
    name: str | None = None
    provider_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("provider", "providerType", "type"),
        serialization_alias="provider",
    )
    bucket: str | None = None
    region: str | None = None
    endpoint: str | None = None
    access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("accessKey", "accessKeyId"),
        serialization_alias="accessKey",
    )
    secret_access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("secretAccessKey", "secretKey"),
        serialization_alias="secretAccessKey",
    )

    _normalize_keys = field_validator("access_key", "secret_access_key", mode="before")(
        _blank_to_none
    )


class VolumeBackup(DokployModel):
    """A scheduled volume backup.

    On the wire ``volume_name`` carries the ``<appName>_`` prefix. The volume
    backup service returns it in logical form.
    """

    id_fields = ("volume_backup_id",)

    volume_backup_id: str | None = None
    name: str | None = None
    service_type: str | None = None
    application_id: str | None = None
    compose_id: str | None = None
    app_name: str | None = None
    service_name: str | None = None
    volume_name: str | None = None
    destination_id: str | None = None
    cron_expression: str | None = None
    prefix: str | None = None
    keep_latest_count: int | None = None
    enabled: bool | None = None
    turn_off: bool | None = None

    @property
    def owner(self) -> OwnerRef:
        return owner_from_ids(application_id=self.application_id, compose_id=self.compose_id)

    @property
    def is_enabled(self) -> bool:
        if self.turn_off:
            return False
        return self.enabled is not False
