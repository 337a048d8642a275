"""Recover identifiers after ack-only creates by matching on name."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dokploy_sync.domain.errors import NotFoundAfterCreate

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dokploy_sync.domain.enums import DatabaseType

    from .schema import Database, DokployModel, Environment


def _names_match(candidate: str | None, wanted: str, *, casefold: bool) -> bool:
    if not candidate:
        return False
    if casefold:
        return candidate.strip().casefold() == wanted.strip().casefold()
    return candidate == wanted


def find_by_name[M: DokployModel](
    items: Iterable[M],
    name: str,
    *,
    casefold: bool = False,
) -> M | None:
    """First item whose name field equals ``name``."""

    return next(
        (item for item in items if _names_match(item.display_name, name, casefold=casefold)),
        None,
    )


def resolve_by_name[M: DokployModel](
    items: Iterable[M],
    name: str,
    *,
    kind: str,
    endpoint: str,
    casefold: bool = False,
) -> M:
    match = find_by_name(items, name, casefold=casefold)
    if match is None or not match.primary_id:
        raise NotFoundAfterCreate(kind, name, endpoint=endpoint)
    return match


def find_database(
    environments: Iterable[Environment],
    db_type: DatabaseType,
    name: str,
) -> Database | None:
    """Scan every environment's typed list for ``name`` (or app name)."""

    for environment in environments:
        for database in environment.databases(db_type):
            if name in (database.name, database.app_name) and database.identifier_for(db_type):
                return database.with_identity(db_type)
    return None


def resolve_database(
    environments: Sequence[Environment],
    db_type: DatabaseType,
    name: str,
    *,
    endpoint: str,
) -> Database:
    database = find_database(environments, db_type, name)
    if database is None:
        raise NotFoundAfterCreate(
            f"{db_type} database",
            name,
            endpoint=endpoint,
            detail=f"searched {len(environments)} environment(s)",
        )
    return database
