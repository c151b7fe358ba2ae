"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core,
engine or plugins. Settings classes live in ghcr_cleaner.core.config.

Import patterns:
    from ghcr_cleaner.contracts import Version, RetentionDecision
    from ghcr_cleaner.core.config import CleanerSettings
"""

from ghcr_cleaner.contracts.enums import DeletionStatus, OwnerType, UnwantedReason
from ghcr_cleaner.contracts.errors import (
    APIError,
    CleanerError,
    ConfigurationError,
    DeletionError,
    RegistryError,
    RemoteCallError,
)
from ghcr_cleaner.contracts.events import (
    CleanupEvent,
    CleanupSummary,
    PackageFailed,
    PackageProcessed,
    VersionDeleted,
)
from ghcr_cleaner.contracts.packages import (
    INDEX_MEDIA_TYPES,
    ManifestDescriptor,
    Package,
    Version,
)
from ghcr_cleaner.contracts.results import (
    CleanupPlan,
    DeletionResult,
    PackagePlan,
    RetentionDecision,
    RunResult,
)

__all__ = [
    "INDEX_MEDIA_TYPES",
    "APIError",
    "CleanerError",
    "CleanupEvent",
    "CleanupPlan",
    "CleanupSummary",
    "ConfigurationError",
    "DeletionError",
    "DeletionResult",
    "DeletionStatus",
    "ManifestDescriptor",
    "OwnerType",
    "Package",
    "PackageFailed",
    "PackagePlan",
    "PackageProcessed",
    "RegistryError",
    "RemoteCallError",
    "RetentionDecision",
    "RunResult",
    "UnwantedReason",
    "Version",
    "VersionDeleted",
]
