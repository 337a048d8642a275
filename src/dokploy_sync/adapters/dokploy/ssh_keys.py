"""SSH keys and the current user they are registered under."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dokploy_sync.domain.errors import DokployError

from .normalizer import AckOnly, Resolved, expect_entity, normalize_response, parse_collection
from .resolver import resolve_by_name
from .schema import SSHKey, User

if TYPE_CHECKING:
    from .transport import DokployTransport


class SSHKeyService:
    """SSH keys are immutable; changing key material means replacing the key."""

    def __init__(self, transport: DokployTransport) -> None:
        self._transport = transport

    async def current_user(self) -> User:
        return expect_entity("user.get", await self._transport.get("user.get"), User, "user")

    async def create(
        self,
        name: str,
        *,
        private_key: str,
        public_key: str,
        description: str = "",
    ) -> SSHKey:
        try:
            user = await self.current_user()
        except DokployError as exc:
            raise DokployError(f"failed to get user for organization id: {exc}") from exc

        endpoint = "sshKey.create"
        raw = await self._transport.post(
            endpoint,
            {
                "name": name,
                "description": description,
                "privateKey": private_key,
                "publicKey": public_key,
                "organizationId": user.organization_id or "",
            },
        )
        if not raw.strip():
            return await self._find(name)
        result = normalize_response(raw, SSHKey, "sshKey")
        if isinstance(result, Resolved):
            return result.entity
        if isinstance(result, AckOnly):
            return await self._find(name)
        raise result.error(endpoint)

    async def list_all(self) -> list[SSHKey]:
        endpoint = "sshKey.all"
        return parse_collection(endpoint, await self._transport.get(endpoint), SSHKey, "sshKeys")

    async def get(self, ssh_key_id: str) -> SSHKey:
        endpoint = "sshKey.one"
        raw = await self._transport.get(endpoint, {"sshKeyId": ssh_key_id})
        return expect_entity(endpoint, raw, SSHKey, "sshKey")

    async def delete(self, ssh_key_id: str) -> None:
        await self._transport.post("sshKey.remove", {"sshKeyId": ssh_key_id})

    async def _find(self, name: str) -> SSHKey:
        try:
            keys = await self.list_all()
        except DokployError as exc:
            raise DokployError(f"ssh key created but failed to list keys: {exc}") from exc
        return resolve_by_name(keys, name, kind="ssh key", endpoint="sshKey.all")
