# src/ghcr_cleaner/core/retention/executor.py
"""Deletion executor: applies a retention decision.

Issues one delete call per version, sequentially, and tallies outcomes.
A failed delete is counted and logged; it never stops the remaining
deletions.
"""

from __future__ import annotations

from collections.abc import Iterable
from time import perf_counter
from typing import Protocol

import structlog

from ghcr_cleaner.contracts.enums import DeletionStatus
from ghcr_cleaner.contracts.errors import DeletionError
from ghcr_cleaner.contracts.events import VersionDeleted
from ghcr_cleaner.contracts.packages import Version
from ghcr_cleaner.contracts.results import DeletionResult
from ghcr_cleaner.core.events import EventBus

logger = structlog.get_logger(__name__)


class VersionDeleter(Protocol):
    """Anything that can delete a package version."""

    def delete_version(self, version: Version) -> None:
        """Delete ``version``.

        Raises:
            DeletionError: If the host did not confirm the deletion
        """
        ...


class DeletionExecutor:
    """Deletes versions and reports success/error counts."""

    def __init__(
        self,
        deleter: VersionDeleter,
        *,
        dry_run: bool = False,
        event_bus: EventBus | None = None,
    ) -> None:
        """Initialize DeletionExecutor.

        Args:
            deleter: Client performing the delete calls
            dry_run: Skip delete calls and report every entry as deleted
            event_bus: Receives a VersionDeleted event per version
        """
        self._deleter = deleter
        self._dry_run = dry_run
        self._event_bus = event_bus if event_bus is not None else EventBus()

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def apply(self, versions: Iterable[Version]) -> DeletionResult:
        """Delete each version in order.

        Args:
            versions: Versions to delete

        Returns:
            DeletionResult with success and error counts
        """
        start_time = perf_counter()
        result = DeletionResult(dry_run=self._dry_run)

        for version in versions:
            package_name = version.package.name if version.package is not None else ""

            if self._dry_run:
                logger.info("version_delete_skipped", package=package_name, digest=version.digest, dry_run=True)
                result.success_count += 1
                self._event_bus.emit(
                    VersionDeleted(
                        package=package_name,
                        version_id=version.id,
                        digest=version.digest,
                        status=DeletionStatus.DRY_RUN,
                    )
                )
                continue

            try:
                self._deleter.delete_version(version)
            except DeletionError as e:
                logger.error(
                    "version_delete_failed",
                    package=package_name,
                    digest=version.digest,
                    status_code=e.status_code,
                    error=str(e),
                )
                result.error_count += 1
                result.failed.append(version)
                self._event_bus.emit(
                    VersionDeleted(
                        package=package_name,
                        version_id=version.id,
                        digest=version.digest,
                        status=DeletionStatus.FAILED,
                        error_message=str(e),
                    )
                )
                continue

            logger.info("version_deleted", package=package_name, digest=version.digest)
            result.success_count += 1
            self._event_bus.emit(
                VersionDeleted(
                    package=package_name,
                    version_id=version.id,
                    digest=version.digest,
                    status=DeletionStatus.DELETED,
                )
            )

        result.duration_seconds = perf_counter() - start_time
        return result
