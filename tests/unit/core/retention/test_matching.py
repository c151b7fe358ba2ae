"""Unit tests for shell-style tag pattern matching."""

import pytest

from ghcr_cleaner.core.retention.matching import PatternError, compile_pattern, matches_any, matches_pattern


class TestMatchesPattern:
    """Tests for single tag vs single pattern matching."""

    @pytest.mark.parametrize(
        ("tag", "pattern", "expected"),
        [
            ("v1.2.3", "v1.*", True),
            ("v2.0.0", "v1.*", False),
            ("latest", "latest", True),
            ("latest", "Latest", False),
            ("v1", "v?", True),
            ("v10", "v?", False),
            ("v3", "v[0-3]", True),
            ("v4", "v[0-3]", False),
            ("v4", "v[!0-3]", True),
            ("v4", "v[^0-3]", True),
            ("v2", "v[^0-3]", False),
            ("v[", r"v\[", True),
            ("v*", r"v\*", True),
            ("v1", r"v\*", False),
            ("a-b", r"[a\-z]-b", True),
            ("m-b", r"[a\-z]-b", False),
            ("pr-17", "pr-*", True),
            ("", "*", True),
        ],
    )
    def test_shell_wildcards(self, tag: str, pattern: str, expected: bool) -> None:
        assert matches_pattern(tag, pattern) is expected

    def test_dot_is_literal(self) -> None:
        """'.' in a pattern is not a regex wildcard."""
        assert not matches_pattern("v1x2", "v1.2")

    def test_whole_tag_must_match(self) -> None:
        assert not matches_pattern("v1.2.3-rc", "v1.2.3")

    @pytest.mark.parametrize("pattern", ["v[1", "[", "release-[!", "v[^", "v\\", r"v[\\"])
    def test_malformed_pattern_matches_nothing(self, pattern: str) -> None:
        """An unbalanced bracket or dangling escape never matches and never raises."""
        assert matches_pattern("v1", pattern) is False
        assert matches_pattern(pattern, pattern) is False

    def test_compile_pattern_rejects_unterminated_class(self) -> None:
        with pytest.raises(PatternError, match="unterminated"):
            compile_pattern("v[1")

    def test_leading_bracket_in_class_is_literal(self) -> None:
        """'[]]' is a class containing ']' rather than an unterminated one."""
        assert matches_pattern("]", "[]]")

    def test_compile_pattern_rejects_trailing_backslash(self) -> None:
        with pytest.raises(PatternError, match="trailing backslash"):
            compile_pattern("v1\\")

    def test_caret_negation_matches_bang_negation(self) -> None:
        for tag in ["v0", "v5", "va"]:
            assert matches_pattern(tag, "v[^0-3]") is matches_pattern(tag, "v[!0-3]")


class TestMatchesAny:
    """Tests for tag-set vs pattern-set matching."""

    def test_any_tag_any_pattern(self) -> None:
        assert matches_any(["latest", "v1.0"], ["v1.*", "stable"])

    def test_no_match(self) -> None:
        assert not matches_any(["latest"], ["v*"])

    def test_empty_patterns_never_match(self) -> None:
        assert not matches_any(["latest"], [])

    def test_malformed_pattern_does_not_hide_valid_one(self) -> None:
        assert matches_any(["v1"], ["v[1", "v*"])

    def test_accepts_single_pass_iterators(self) -> None:
        """Tags given as a generator are evaluated against every pattern."""
        tags = (t for t in ["a", "b"])
        assert matches_any(tags, ["x", "b"])
