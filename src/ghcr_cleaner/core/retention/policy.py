# src/ghcr_cleaner/core/retention/policy.py
"""Retention policy and the pure decision functions behind it.

Nothing here performs I/O. Given a package's versions, the policy and the
set of digests that retained tags depend on, these functions compute
which versions are unwanted. Fetching the dependency set is the job of
ghcr_cleaner.core.retention.engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence, Set
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ghcr_cleaner.contracts.packages import Version
from ghcr_cleaner.contracts.results import RetentionDecision
from ghcr_cleaner.core.retention.matching import matches_any

if TYPE_CHECKING:
    from ghcr_cleaner.core.config import CleanerSettings


@dataclass(frozen=True)
class RetentionPolicy:
    """Parameters of the two retention rules.

    Attributes:
        keep_at_most: Cap on tagged candidates; 0 disables the cap
        filter_tags: When non-empty, only versions matching one of these
            globs are candidates for the cap
        skip_tags: Versions matching one of these globs are never candidates
        delete_untagged: Enable the untagged/dependency rule
        strict_manifests: Skip the untagged rule for a package if any of
            its manifests could not be fetched
    """

    keep_at_most: int = 0
    filter_tags: tuple[str, ...] = ()
    skip_tags: tuple[str, ...] = ()
    delete_untagged: bool = False
    strict_manifests: bool = False

    def __post_init__(self) -> None:
        if self.keep_at_most < 0:
            raise ValueError(f"keep_at_most must be >= 0, got {self.keep_at_most}")

    @classmethod
    def from_settings(cls, settings: CleanerSettings) -> RetentionPolicy:
        return cls(
            keep_at_most=settings.keep_at_most,
            filter_tags=tuple(settings.filter_tags),
            skip_tags=tuple(settings.skip_tags),
            delete_untagged=settings.delete_untagged,
            strict_manifests=settings.strict_manifests,
        )

    def is_candidate(self, version: Version) -> bool:
        """Whether a tagged version counts towards the keep-at-most cap.

        Skip patterns win over filter patterns.
        """
        if self.skip_tags and matches_any(version.tags, self.skip_tags):
            return False
        if self.filter_tags and not matches_any(version.tags, self.filter_tags):
            return False
        return True


def partition_versions(versions: Iterable[Version]) -> tuple[list[Version], list[Version]]:
    """Split versions into (tagged, untagged), preserving input order."""
    tagged: list[Version] = []
    untagged: list[Version] = []
    for version in versions:
        if version.is_tagged:
            tagged.append(version)
        else:
            untagged.append(version)
    return tagged, untagged


def select_unwanted_by_recency(tagged: Sequence[Version], policy: RetentionPolicy) -> list[Version]:
    """Return candidates beyond the ``keep_at_most`` most recent ones.

    The sort is stable, so versions with equal timestamps keep their
    input order and the result is deterministic.
    """
    if policy.keep_at_most <= 0:
        return []
    candidates = [v for v in tagged if policy.is_candidate(v)]
    candidates.sort(key=lambda v: v.timestamp, reverse=True)
    return candidates[policy.keep_at_most :]


def select_unwanted_untagged(untagged: Sequence[Version], dependencies: Set[str]) -> list[Version]:
    """Return untagged versions whose digest no retained tag references."""
    return [v for v in untagged if v.digest not in dependencies]


def build_decision(
    versions: Sequence[Version],
    unwanted_by_recency: Sequence[Version],
    unwanted_untagged: Sequence[Version],
    *,
    manifest_failures: Sequence[Version] = (),
    untagged_pass_skipped: bool = False,
) -> RetentionDecision:
    """Assemble a RetentionDecision, deriving ``kept`` from the input.

    Raises:
        ValueError: If a version would be unwanted twice or an unwanted
            version is not part of ``versions``
    """
    recency_ids = [v.id for v in unwanted_by_recency]
    untagged_ids = [v.id for v in unwanted_untagged]
    unwanted_ids = set(recency_ids) | set(untagged_ids)
    if len(unwanted_ids) != len(recency_ids) + len(untagged_ids):
        raise ValueError("A version cannot be unwanted more than once")
    known_ids = {v.id for v in versions}
    if not unwanted_ids <= known_ids:
        raise ValueError(f"Unwanted versions not in input: {sorted(unwanted_ids - known_ids)}")

    kept = tuple(v for v in versions if v.id not in unwanted_ids)
    return RetentionDecision(
        kept=kept,
        unwanted_by_recency=tuple(unwanted_by_recency),
        unwanted_untagged=tuple(unwanted_untagged),
        manifest_failures=tuple(manifest_failures),
        untagged_pass_skipped=untagged_pass_skipped,
    )


def decide(
    versions: Sequence[Version],
    policy: RetentionPolicy,
    dependencies: Set[str] = frozenset(),
) -> RetentionDecision:
    """Decide retention for versions given an already-known dependency set.

    ``dependencies`` must be the digests referenced by the tagged versions
    that survive the recency cap; use RetentionEngine when they still have
    to be fetched.
    """
    tagged, untagged = partition_versions(versions)
    by_recency = select_unwanted_by_recency(tagged, policy)
    by_untagged = select_unwanted_untagged(untagged, dependencies) if policy.delete_untagged else []
    return build_decision(versions, by_recency, by_untagged)
