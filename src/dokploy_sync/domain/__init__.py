"""Pure reconciliation domain: enums, errors, owner references and value types."""

from __future__ import annotations

from .enums import DatabaseType, MountType, OwnerKind, SourceType
from .env_blob import EnvBlob, split_variable_id, variable_id
from .errors import (
    ConflictExhausted,
    DeleteAttempt,
    DeleteChainError,
    DokployError,
    InvalidOwnerError,
    NotFoundAfterCreate,
    ParseFailure,
    PartialProvisioningFailure,
    ProvisioningWarning,
    RemoteAPIError,
    TransportFailure,
    UnsupportedTypeError,
)
from .owners import OwnerRef, owner_from_ids, parse_owner
from .volumes import from_wire_volume_name, to_wire_volume_name

__all__ = [
    "ConflictExhausted",
    "DatabaseType",
    "DeleteAttempt",
    "DeleteChainError",
    "DokployError",
    "EnvBlob",
    "InvalidOwnerError",
    "MountType",
    "NotFoundAfterCreate",
    "OwnerKind",
    "OwnerRef",
    "ParseFailure",
    "PartialProvisioningFailure",
    "ProvisioningWarning",
    "RemoteAPIError",
    "SourceType",
    "TransportFailure",
    "UnsupportedTypeError",
    "from_wire_volume_name",
    "owner_from_ids",
    "parse_owner",
    "split_variable_id",
    "to_wire_volume_name",
    "variable_id",
]
