# src/ghcr_cleaner/core/retention/engine.py
"""Retention engine: computes the versions of one package to delete.

Two independent rules are applied:

1. Recency cap - tagged versions beyond the ``keep_at_most`` most recent
   candidates are unwanted.
2. Untagged cleanup - untagged versions are unwanted unless a retained
   tagged version's manifest list references their digest.

Manifest lookups are the only I/O and go through the injectable
ManifestSource protocol, so tests can drive the engine with a fake.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from typing import Protocol

import structlog

from ghcr_cleaner.contracts.enums import UnwantedReason
from ghcr_cleaner.contracts.errors import RegistryError
from ghcr_cleaner.contracts.packages import ManifestDescriptor, Package, Version
from ghcr_cleaner.contracts.results import RetentionDecision
from ghcr_cleaner.core.retention.policy import (
    RetentionPolicy,
    build_decision,
    partition_versions,
    select_unwanted_by_recency,
    select_unwanted_untagged,
)

logger = structlog.get_logger(__name__)


class ManifestSource(Protocol):
    """Anything that can list the child manifests of a manifest list."""

    def get_manifest_descriptors(self, repository: str, reference: str) -> list[ManifestDescriptor]:
        """Return the child descriptors of ``repository@reference``.

        Single-platform manifests have no children and return an empty list.

        Raises:
            RegistryError: If the manifest cannot be fetched or parsed
        """
        ...


def collect_dependencies(
    repository: str,
    references: Iterable[str],
    manifests: ManifestSource,
) -> tuple[set[str], list[tuple[str, RegistryError]]]:
    """Collect every digest reachable from ``references`` through manifest lists.

    Children that are themselves indexes are queued and expanded in turn
    (worklist, no recursion); already visited digests are never fetched
    twice, which also guards against reference cycles.

    A reference that cannot be fetched loses only its own subtree: digests
    gathered from every successful fetch are still returned.

    Returns:
        Tuple of (dependencies, failures) where failures pairs each
        unfetchable reference with its error
    """
    dependencies: set[str] = set()
    failures: list[tuple[str, RegistryError]] = []
    visited: set[str] = set()
    queue: deque[str] = deque(references)
    while queue:
        reference = queue.popleft()
        if reference in visited:
            continue
        visited.add(reference)
        try:
            children = manifests.get_manifest_descriptors(repository, reference)
        except RegistryError as e:
            failures.append((reference, e))
            continue
        for child in children:
            dependencies.add(child.digest)
            if child.is_index and child.digest not in visited:
                queue.append(child.digest)
    return dependencies, failures


class RetentionEngine:
    """Applies a RetentionPolicy to one package at a time.

    Example:
        engine = RetentionEngine(policy, manifests=registry_client)
        decision = engine.decide(package, versions)
        for version in decision.unwanted:
            ...
    """

    def __init__(self, policy: RetentionPolicy, manifests: ManifestSource | None = None) -> None:
        """Initialize RetentionEngine.

        Args:
            policy: Retention rules to apply
            manifests: Source of manifest lists; required when
                policy.delete_untagged is set
        """
        if policy.delete_untagged and manifests is None:
            raise ValueError("A manifest source is required when delete_untagged is enabled")
        self._policy = policy
        self._manifests = manifests

    @property
    def policy(self) -> RetentionPolicy:
        return self._policy

    def decide(self, package: Package, versions: Sequence[Version]) -> RetentionDecision:
        """Compute the retention decision for one package.

        Args:
            package: Package the versions belong to (gives the registry repository)
            versions: All versions of the package

        Returns:
            RetentionDecision partitioning ``versions``
        """
        log = logger.bind(package=package.name)
        tagged, untagged = partition_versions(versions)

        by_recency = select_unwanted_by_recency(tagged, self._policy)
        for version in by_recency:
            log.debug("version_unwanted", digest=version.digest, tags=list(version.tags), reason=UnwantedReason.RECENCY)

        if not self._policy.delete_untagged:
            return build_decision(versions, by_recency, [])

        recency_ids = {v.id for v in by_recency}
        retained = [v for v in tagged if v.id not in recency_ids]
        dependencies, failures = self._collect_retained_dependencies(package, retained)

        if failures and self._policy.strict_manifests:
            log.warning(
                "untagged_pass_skipped",
                manifest_failures=len(failures),
                untagged=len(untagged),
            )
            return build_decision(
                versions,
                by_recency,
                [],
                manifest_failures=failures,
                untagged_pass_skipped=True,
            )

        by_untagged = select_unwanted_untagged(untagged, dependencies)
        for version in by_untagged:
            log.debug("version_unwanted", digest=version.digest, reason=UnwantedReason.UNTAGGED)
        return build_decision(versions, by_recency, by_untagged, manifest_failures=failures)

    def _collect_retained_dependencies(
        self,
        package: Package,
        retained: Sequence[Version],
    ) -> tuple[set[str], list[Version]]:
        """Union the dependencies of each retained tagged version.

        A version with any unfetchable manifest (its own or a nested index)
        is reported back as a failure. Whatever was fetched for it still
        counts, as do the remaining versions.
        """
        if self._manifests is None:
            raise RuntimeError("RetentionEngine has no manifest source")

        dependencies: set[str] = set()
        failures: list[Version] = []
        for version in retained:
            found, errors = collect_dependencies(package.repository, [version.digest], self._manifests)
            dependencies |= found
            for reference, error in errors:
                logger.warning(
                    "manifest_fetch_failed",
                    package=package.name,
                    digest=version.digest,
                    reference=reference,
                    status_code=error.status_code,
                    error=str(error),
                )
            if errors:
                failures.append(version)
        return dependencies, failures
