"""Operation outcomes and results.

These types answer: "What did the retention engine decide?" and
"What happened when the decision was applied?"
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ghcr_cleaner.contracts.packages import Package, Version


@dataclass(frozen=True)
class RetentionDecision:
    """Retention outcome for one package.

    ``kept``, ``unwanted_by_recency`` and ``unwanted_untagged`` partition the
    package's version list: every input version is in exactly one of them.

    Attributes:
        kept: Versions that survive both retention rules (input order)
        unwanted_by_recency: Tagged versions beyond the keep-at-most cap
        unwanted_untagged: Untagged versions no retained tag depends on
        manifest_failures: Retained tagged versions whose manifest could
            not be fetched and therefore contributed no dependencies
        untagged_pass_skipped: True when strict mode suppressed the
            untagged pass because of a manifest failure
    """

    kept: tuple[Version, ...] = ()
    unwanted_by_recency: tuple[Version, ...] = ()
    unwanted_untagged: tuple[Version, ...] = ()
    manifest_failures: tuple[Version, ...] = ()
    untagged_pass_skipped: bool = False

    @property
    def unwanted(self) -> tuple[Version, ...]:
        """Versions to delete, recency first then untagged."""
        return self.unwanted_by_recency + self.unwanted_untagged

    @property
    def total(self) -> int:
        return len(self.kept) + len(self.unwanted)


@dataclass(frozen=True)
class PackagePlan:
    """Versions of one package together with the decision taken on them."""

    package: Package
    versions: tuple[Version, ...]
    decision: RetentionDecision

    @property
    def tagged_count(self) -> int:
        return sum(1 for v in self.versions if v.is_tagged)

    @property
    def untagged_count(self) -> int:
        return len(self.versions) - self.tagged_count


@dataclass
class CleanupPlan:
    """Decisions for every package that could be enumerated."""

    packages: list[PackagePlan] = field(default_factory=list)
    failed_packages: list[Package] = field(default_factory=list)

    @property
    def unwanted(self) -> list[Version]:
        result: list[Version] = []
        for plan in self.packages:
            result.extend(plan.decision.unwanted)
        return result


@dataclass
class DeletionResult:
    """Result of applying deletions.

    Attributes:
        success_count: Versions deleted (or reported deleted in dry-run)
        error_count: Versions whose delete call failed
        failed: The versions behind ``error_count``
        dry_run: Whether delete calls were skipped
        duration_seconds: Wall time spent applying deletions
    """

    success_count: int = 0
    error_count: int = 0
    failed: list[Version] = field(default_factory=list)
    dry_run: bool = False
    duration_seconds: float = 0.0

    @property
    def exit_code(self) -> int:
        return 1 if self.error_count > 0 else 0


@dataclass
class RunResult:
    """Plan plus deletion outcome for a complete run."""

    plan: CleanupPlan
    deletions: DeletionResult

    @property
    def exit_code(self) -> int:
        return self.deletions.exit_code
