"""Shell-style tag pattern matching.

Patterns support ``*``, ``?`` and character classes (``[...]``, negated with
either ``[!...]`` or ``[^...]``). A backslash makes the next character
literal, both inside and outside a class. Matching is case-sensitive. A
malformed pattern never raises: it simply matches nothing.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

import structlog

logger = structlog.get_logger(__name__)


class PatternError(ValueError):
    """Raised for a glob pattern that cannot be compiled."""


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    """Read one (possibly escaped) class member starting at ``i``."""
    if pattern[i] == "\\":
        if i + 1 >= len(pattern):
            raise PatternError(f"unterminated character class in {pattern!r}")
        return pattern[i + 1], i + 2
    return pattern[i], i + 1


def _translate_class(pattern: str, i: int) -> tuple[str, int]:
    """Translate the class whose opening ``[`` precedes index ``i``.

    Returns the regex class and the index just past the closing ``]``.
    """
    n = len(pattern)
    negate = i < n and pattern[i] in "!^"
    if negate:
        i += 1
    members: list[str] = []
    while True:
        if i >= n:
            raise PatternError(f"unterminated character class in {pattern!r}")
        # A leading "]" is a literal member of the class
        if pattern[i] == "]" and members:
            return ("[^" if negate else "[") + "".join(members) + "]", i + 1
        lo, i = _class_char(pattern, i)
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi, i = _class_char(pattern, i + 1)
            members.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            members.append(re.escape(lo))


def translate(pattern: str) -> str:
    """Translate a glob pattern to an anchored regular expression.

    Raises:
        PatternError: For an unterminated class or a trailing backslash
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            if not parts or parts[-1] != ".*":
                parts.append(".*")
        elif c == "?":
            parts.append(".")
        elif c == "\\":
            if i >= n:
                raise PatternError(f"trailing backslash in {pattern!r}")
            parts.append(re.escape(pattern[i]))
            i += 1
        elif c == "[":
            cls, i = _translate_class(pattern, i)
            parts.append(cls)
        else:
            parts.append(re.escape(c))
    return "(?s:" + "".join(parts) + r")\Z"


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern to a regular expression.

    Raises:
        PatternError: If the pattern is malformed
    """
    try:
        return re.compile(translate(pattern))
    except re.error as e:
        raise PatternError(f"invalid pattern {pattern!r}: {e}") from e


def matches_pattern(tag: str, pattern: str) -> bool:
    """Return True if ``tag`` matches ``pattern``; malformed patterns never match."""
    try:
        compiled = compile_pattern(pattern)
    except PatternError as e:
        logger.debug("tag_pattern_ignored", pattern=pattern, error=str(e))
        return False
    return compiled.match(tag) is not None


def matches_any(tags: Iterable[str], patterns: Iterable[str]) -> bool:
    """Return True if any tag matches any pattern."""
    tag_list = list(tags)
    for pattern in patterns:
        for tag in tag_list:
            if matches_pattern(tag, pattern):
                return True
    return False
