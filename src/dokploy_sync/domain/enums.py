"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum

from .errors import UnsupportedTypeError


class DatabaseType(StrEnum):
    """Database engine tag; selects the endpoint family and identifier field."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    MONGO = "mongo"
    REDIS = "redis"

    @classmethod
    def parse(cls, value: object) -> DatabaseType:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedTypeError("database type", value)

    @property
    def id_field(self) -> str:
        return f"{self.value}Id"

    def endpoint(self, verb: str) -> str:
        return f"{self.value}.{verb}"

    @property
    def default_user(self) -> str:
        return _DEFAULT_USERS[self]


_DEFAULT_USERS = {
    DatabaseType.POSTGRES: "postgres",
    DatabaseType.MYSQL: "root",
    DatabaseType.MARIADB: "root",
    DatabaseType.MONGO: "mongo",
    DatabaseType.REDIS: "default",
}

GENERIC_DATABASE_ID_FIELD = "databaseId"


class OwnerKind(StrEnum):
    APPLICATION = "application"
    COMPOSE = "compose"
    PROJECT = "project"

    @property
    def id_field(self) -> str:
        return f"{self.value}Id"


class SourceType(StrEnum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    GITEA = "gitea"
    GIT = "git"
    DOCKER = "docker"
    DROP = "drop"
    RAW = "raw"


class MountType(StrEnum):
    BIND = "bind"
    VOLUME = "volume"
    FILE = "file"
