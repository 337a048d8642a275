"""Public interface for the Dokploy adapter."""

from __future__ import annotations

from .applications import ApplicationService
from .client import DokployClient
from .composes import ComposeService
from .databases import DatabaseService
from .destinations import BackupDestinationService
from .domains import DomainService
from .fallback import DeleteChain, DeleteStep
from .merge import EnvConflict, EnvMergeLoop, EnvSnapshot
from .mounts import MountService
from .normalizer import AckOnly, Resolved, Unparsed, normalize_response
from .ports import PortService
from .projects import EnvironmentService, ProjectService
from .provisioning import ProvisionResult, TwoPhaseProvisioner
from .schema import (
    Application,
    BackupDestination,
    Compose,
    Database,
    Domain,
    Environment,
    Mount,
    Port,
    Project,
    SSHKey,
    User,
    VolumeBackup,
)
from .ssh_keys import SSHKeyService
from .transport import DokployTransport
from .variables import EnvironmentVariable, VariableService
from .volume_backups import VolumeBackupService, VolumeBackupSettings

__all__ = [
    "AckOnly",
    "Application",
    "ApplicationService",
    "BackupDestination",
    "BackupDestinationService",
    "Compose",
    "ComposeService",
    "Database",
    "DatabaseService",
    "DeleteChain",
    "DeleteStep",
    "DokployClient",
    "DokployTransport",
    "Domain",
    "DomainService",
    "EnvConflict",
    "EnvMergeLoop",
    "EnvSnapshot",
    "Environment",
    "EnvironmentService",
    "EnvironmentVariable",
    "Mount",
    "MountService",
    "Port",
    "PortService",
    "Project",
    "ProjectService",
    "ProvisionResult",
    "Resolved",
    "SSHKey",
    "SSHKeyService",
    "TwoPhaseProvisioner",
    "Unparsed",
    "User",
    "VariableService",
    "VolumeBackup",
    "VolumeBackupService",
    "VolumeBackupSettings",
    "normalize_response",
]
