# src/ghcr_cleaner/engine/orchestrator.py
"""Orchestrator: drives a complete cleanup run.

Packages are enumerated once, then processed one at a time: list the
versions, let the retention engine decide, collect the unwanted versions.
Deletions are applied only after every package has been decided.

Failure policy:
- Package listing errors propagate; nothing can be decided without them.
- A package whose versions cannot be listed is reported and skipped.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from ghcr_cleaner.contracts.enums import OwnerType
from ghcr_cleaner.contracts.errors import APIError
from ghcr_cleaner.contracts.events import CleanupSummary, PackageFailed, PackageProcessed
from ghcr_cleaner.contracts.packages import Package, Version
from ghcr_cleaner.contracts.results import CleanupPlan, PackagePlan, RunResult
from ghcr_cleaner.core.events import EventBus
from ghcr_cleaner.core.retention.engine import RetentionEngine
from ghcr_cleaner.core.retention.executor import DeletionExecutor

logger = structlog.get_logger(__name__)


class PackageDirectory(Protocol):
    """Listing side of the package host."""

    def list_packages(
        self,
        owner_type: OwnerType,
        owner: str,
        repo_name: str = "",
        package_name: str = "",
    ) -> Sequence[Package]: ...

    def list_versions(self, package: Package) -> Sequence[Version]: ...


class Orchestrator:
    """Runs retention over every selected package of an owner.

    Example:
        orchestrator = Orchestrator(directory, engine, executor, event_bus=bus)
        result = orchestrator.run(OwnerType.ORG, "acme")
        raise SystemExit(result.exit_code)
    """

    def __init__(
        self,
        directory: PackageDirectory,
        engine: RetentionEngine,
        executor: DeletionExecutor,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._directory = directory
        self._engine = engine
        self._executor = executor
        self._event_bus = event_bus if event_bus is not None else EventBus()

    def plan(
        self,
        owner_type: OwnerType,
        owner: str,
        repo_name: str = "",
        package_name: str = "",
    ) -> CleanupPlan:
        """Decide retention for every selected package without deleting.

        Raises:
            APIError: If the package listing itself fails
        """
        packages = self._directory.list_packages(owner_type, owner, repo_name, package_name)
        plan = CleanupPlan()

        for package in packages:
            log = logger.bind(package=package.name)
            try:
                versions = tuple(self._directory.list_versions(package))
            except APIError as e:
                log.error("version_listing_failed", status_code=e.status_code, error=str(e))
                plan.failed_packages.append(package)
                self._event_bus.emit(PackageFailed(package=package.name, error_message=str(e)))
                continue

            decision = self._engine.decide(package, versions)
            package_plan = PackagePlan(package=package, versions=versions, decision=decision)
            plan.packages.append(package_plan)

            log.info(
                "package_decided",
                total=len(versions),
                tagged=package_plan.tagged_count,
                untagged=package_plan.untagged_count,
                unwanted=len(decision.unwanted),
            )
            self._event_bus.emit(
                PackageProcessed(
                    package=package.name,
                    total=len(versions),
                    tagged=package_plan.tagged_count,
                    untagged=package_plan.untagged_count,
                    unwanted=len(decision.unwanted),
                    unwanted_by_recency=len(decision.unwanted_by_recency),
                    unwanted_untagged=len(decision.unwanted_untagged),
                    manifest_failures=len(decision.manifest_failures),
                )
            )

        return plan

    def run(
        self,
        owner_type: OwnerType,
        owner: str,
        repo_name: str = "",
        package_name: str = "",
    ) -> RunResult:
        """Plan, then delete every unwanted version.

        Raises:
            APIError: If the package listing itself fails
        """
        plan = self.plan(owner_type, owner, repo_name, package_name)
        deletions = self._executor.apply(plan.unwanted)

        logger.info(
            "cleanup_completed",
            deletions=deletions.success_count,
            errors=deletions.error_count,
            dry_run=deletions.dry_run,
            failed_packages=len(plan.failed_packages),
        )
        self._event_bus.emit(
            CleanupSummary(
                deletions=deletions.success_count,
                errors=deletions.error_count,
                dry_run=deletions.dry_run,
                duration_seconds=deletions.duration_seconds,
                exit_code=deletions.exit_code,
            )
        )
        return RunResult(plan=plan, deletions=deletions)
