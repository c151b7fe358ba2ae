"""Property-based tests for retention decisions.

Properties:
- kept and unwanted partition the input exactly
- recency victims are always tagged, untagged victims always untagged
- no tagged version is dropped when the cap is disabled
- at most keep_at_most candidates survive the cap
- deciding twice gives the same answer
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from hypothesis import given
from hypothesis import strategies as st

from ghcr_cleaner.contracts import Version
from ghcr_cleaner.core.retention.policy import RetentionPolicy, decide

BASE = datetime(2024, 1, 1, tzinfo=UTC)

tags = st.lists(st.sampled_from(["latest", "v1", "v1.2", "v2", "rc-1", "nightly"]), max_size=3, unique=True)
patterns = st.lists(st.sampled_from(["v*", "v1.*", "rc-?", "latest", "[", "night[!x]*"]), max_size=3)


@st.composite
def version_lists(draw: st.DrawFn) -> list[Version]:
    specs = draw(
        st.lists(
            st.tuples(tags, st.integers(min_value=0, max_value=20)),
            max_size=15,
        )
    )
    return [
        Version(
            id=i,
            digest=f"sha256:{i:04d}",
            timestamp=BASE + timedelta(hours=hours),
            tags=tuple(version_tags),
        )
        for i, (version_tags, hours) in enumerate(specs)
    ]


policies = st.builds(
    RetentionPolicy,
    keep_at_most=st.integers(min_value=0, max_value=6),
    filter_tags=patterns.map(tuple),
    skip_tags=patterns.map(tuple),
    delete_untagged=st.booleans(),
)


def _dependencies(versions: list[Version], data: st.DataObject) -> frozenset[str]:
    digests = [v.digest for v in versions]
    if not digests:
        return frozenset()
    return frozenset(data.draw(st.lists(st.sampled_from(digests), max_size=len(digests))))


class TestDecisionProperties:
    @given(versions=version_lists(), policy=policies, data=st.data())
    def test_partition(self, versions: list[Version], policy: RetentionPolicy, data: st.DataObject) -> None:
        """Every input version lands in exactly one bucket."""
        decision = decide(versions, policy, _dependencies(versions, data))

        kept_ids = [v.id for v in decision.kept]
        unwanted_ids = [v.id for v in decision.unwanted]
        assert sorted(kept_ids + unwanted_ids) == sorted(v.id for v in versions)
        assert not set(kept_ids) & set(unwanted_ids)

    @given(versions=version_lists(), policy=policies, data=st.data())
    def test_rules_draw_from_disjoint_pools(
        self, versions: list[Version], policy: RetentionPolicy, data: st.DataObject
    ) -> None:
        decision = decide(versions, policy, _dependencies(versions, data))

        assert all(v.is_tagged for v in decision.unwanted_by_recency)
        assert not any(v.is_tagged for v in decision.unwanted_untagged)

    @given(versions=version_lists(), policy=policies)
    def test_zero_cap_keeps_every_tag(self, versions: list[Version], policy: RetentionPolicy) -> None:
        disabled = RetentionPolicy(
            keep_at_most=0,
            filter_tags=policy.filter_tags,
            skip_tags=policy.skip_tags,
            delete_untagged=policy.delete_untagged,
        )

        assert decide(versions, disabled).unwanted_by_recency == ()

    @given(versions=version_lists(), policy=policies)
    def test_cap_bounds_surviving_candidates(self, versions: list[Version], policy: RetentionPolicy) -> None:
        decision = decide(versions, policy)

        if policy.keep_at_most > 0:
            surviving = [v for v in decision.kept if v.is_tagged and policy.is_candidate(v)]
            assert len(surviving) <= policy.keep_at_most

    @given(versions=version_lists(), policy=policies)
    def test_survivors_are_at_least_as_recent_as_victims(self, versions: list[Version], policy: RetentionPolicy) -> None:
        decision = decide(versions, policy)

        survivors = [v for v in decision.kept if v.is_tagged and policy.is_candidate(v)]
        for victim in decision.unwanted_by_recency:
            assert all(s.timestamp >= victim.timestamp for s in survivors)

    @given(versions=version_lists(), policy=policies, data=st.data())
    def test_idempotent(self, versions: list[Version], policy: RetentionPolicy, data: st.DataObject) -> None:
        dependencies = _dependencies(versions, data)

        assert decide(versions, policy, dependencies) == decide(versions, policy, dependencies)

    @given(versions=version_lists(), data=st.data())
    def test_referenced_untagged_are_never_unwanted(self, versions: list[Version], data: st.DataObject) -> None:
        dependencies = _dependencies(versions, data)

        decision = decide(versions, RetentionPolicy(delete_untagged=True), dependencies)

        assert not any(v.digest in dependencies for v in decision.unwanted_untagged)
