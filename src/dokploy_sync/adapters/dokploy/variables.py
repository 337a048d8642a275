"""Environment variables as a keyed view over an owner's env blob.

Every mutation goes through :class:`EnvMergeLoop`; nothing here writes the
blob directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dokploy_sync.domain.enums import OwnerKind
from dokploy_sync.domain.env_blob import split_variable_id, variable_id
from dokploy_sync.domain.owners import OwnerRef

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from dokploy_sync.domain.env_blob import EnvBlob

    from .merge import EnvMergeLoop

DEFAULT_SCOPE = "runtime"


@dataclass(frozen=True, slots=True)
class EnvironmentVariable:
    owner: OwnerRef
    key: str
    value: str
    scope: str = DEFAULT_SCOPE

    @property
    def id(self) -> str:
        return variable_id(self.owner.id, self.key)


def validate_entry(key: str, value: str = "") -> None:
    if not key or not key.strip():
        raise ValueError("environment variable key must not be empty")
    if "=" in key or any(ch in key for ch in "\r\n") or key.strip().startswith("#"):
        raise ValueError(f"invalid environment variable key: {key!r}")
    if any(ch in value for ch in "\r\n"):
        raise ValueError(f"value of {key} must be a single line")


class VariableService:
    def __init__(self, merge_loop: EnvMergeLoop) -> None:
        self._merge = merge_loop

    async def list_for(self, owner: OwnerRef) -> list[EnvironmentVariable]:
        snapshot = await self._merge.read(owner)
        return [EnvironmentVariable(owner, key, value) for key, value in snapshot.blob.items()]

    async def get(self, owner: OwnerRef, key: str) -> EnvironmentVariable | None:
        snapshot = await self._merge.read(owner)
        if key not in snapshot.blob:
            return None
        return EnvironmentVariable(owner, key, snapshot.blob[key])

    async def set(
        self,
        owner: OwnerRef,
        key: str,
        value: str,
        *,
        scope: str = DEFAULT_SCOPE,
        create_env_file: bool | None = None,
    ) -> EnvironmentVariable:
        validate_entry(key, value)

        def assign(blob: EnvBlob) -> None:
            blob[key] = value

        await self._merge.merge(owner, assign, create_env_file=create_env_file)
        return EnvironmentVariable(owner, key, value, scope)

    async def delete(
        self,
        owner: OwnerRef,
        key: str,
        *,
        create_env_file: bool | None = None,
    ) -> None:
        await self.remove_keys(owner, (key,), create_env_file=create_env_file)

    async def delete_by_id(
        self,
        value: str,
        *,
        kind: OwnerKind = OwnerKind.APPLICATION,
        owner_id: str | None = None,
        create_env_file: bool | None = None,
    ) -> None:
        """Delete by synthesized id ``<ownerId>_<key>``."""

        parsed_owner, key = split_variable_id(value, owner_id=owner_id)
        await self.delete(OwnerRef(kind, parsed_owner), key, create_env_file=create_env_file)

    async def remove_keys(
        self,
        owner: OwnerRef,
        keys: Iterable[str],
        *,
        create_env_file: bool | None = None,
    ) -> EnvBlob:
        doomed = tuple(keys)

        def remove(blob: EnvBlob) -> None:
            for key in doomed:
                blob.pop(key, None)

        return await self._merge.merge(owner, remove, create_env_file=create_env_file)

    async def merge(
        self,
        owner: OwnerRef,
        values: Mapping[str, str],
        *,
        create_env_file: bool | None = None,
    ) -> EnvBlob:
        """Set every key in ``values``, keeping unrelated keys."""

        for key, value in values.items():
            validate_entry(key, value)

        def update(blob: EnvBlob) -> None:
            blob.update(values)

        return await self._merge.merge(owner, update, create_env_file=create_env_file)

    async def replace(
        self,
        owner: OwnerRef,
        values: Mapping[str, str],
        *,
        create_env_file: bool | None = None,
    ) -> EnvBlob:
        """Make ``values`` the complete set of variables."""

        for key, value in values.items():
            validate_entry(key, value)

        def overwrite(blob: EnvBlob) -> None:
            blob.replace_all(values)

        return await self._merge.merge(owner, overwrite, create_env_file=create_env_file)

    async def clear(self, owner: OwnerRef, *, create_env_file: bool | None = None) -> EnvBlob:
        return await self.replace(owner, {}, create_env_file=create_env_file)
