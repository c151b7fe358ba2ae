"""Observability events for a cleanup run.

Events are emitted by the orchestrator and the deletion executor and
consumed by CLI formatters for human-readable or structured output.
"""

from dataclasses import dataclass

from ghcr_cleaner.contracts.enums import DeletionStatus


@dataclass(frozen=True, slots=True)
class PackageProcessed:
    """Emitted once the retention decision for a package is known."""

    package: str
    total: int
    tagged: int
    untagged: int
    unwanted: int
    unwanted_by_recency: int
    unwanted_untagged: int
    manifest_failures: int = 0


@dataclass(frozen=True, slots=True)
class PackageFailed:
    """Emitted when a package's versions could not be enumerated."""

    package: str
    error_message: str


@dataclass(frozen=True, slots=True)
class VersionDeleted:
    """Emitted after each delete call (or skipped call in dry-run)."""

    package: str
    version_id: int
    digest: str
    status: DeletionStatus
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class CleanupSummary:
    """Emitted when all deletions have been applied."""

    deletions: int
    errors: int
    dry_run: bool
    duration_seconds: float
    exit_code: int  # 0=all deletions succeeded, 1=at least one failed


CleanupEvent = PackageProcessed | PackageFailed | VersionDeleted | CleanupSummary
