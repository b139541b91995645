"""Glob and regex path matching for include/ignore rules."""

import fnmatch
import re
from collections.abc import Iterable

from patchpilot.utils.logging import get_logger

logger = get_logger("tools.patterns")

GLOBSTAR = "**"


class GlobPatternError(ValueError):
    """Raised when a glob pattern cannot be compiled."""

    pass


def _check_segment(segment: str, pattern: str) -> None:
    """Reject a glob segment with an unclosed character class.

    Raises:
        GlobPatternError: If a ``[`` has no matching ``]``.
    """
    i, n = 0, len(segment)
    while i < n:
        if segment[i] != "[":
            i += 1
            continue

        # A class runs to the next "]"; a "]" right after "[" or "[!" is literal
        j = i + 1
        if j < n and segment[j] in "!^":
            j += 1
        if j < n and segment[j] == "]":
            j += 1
        while j < n and segment[j] != "]":
            j += 1

        if j >= n:
            raise GlobPatternError(f"Unclosed character class in glob: {pattern!r}")
        i = j + 1


def anchor_pattern(pattern: str) -> str:
    """Normalize a pattern so it can match at any directory depth.

    A leading ``/`` anchors the pattern at the repository root, a leading
    ``**`` is kept as-is, and anything else is prefixed with ``**/``.
    """
    if pattern.startswith("/"):
        return pattern.lstrip("/")
    if pattern.startswith(GLOBSTAR):
        return pattern
    return f"{GLOBSTAR}/{pattern}"


def _match_segments(pattern: list[str], path: list[str]) -> bool:
    """Match path segments against glob segments, with ``**`` spanning directories."""
    if not pattern:
        return not path

    head, rest = pattern[0], pattern[1:]

    if head == GLOBSTAR:
        # Zero or more whole segments
        return any(_match_segments(rest, path[i:]) for i in range(len(path) + 1))

    if not path:
        return False

    return fnmatch.fnmatchcase(path[0], head) and _match_segments(rest, path[1:])


def glob_match(pattern: str, path: str) -> bool:
    """Match a repository path against an already anchored glob pattern.

    Raises:
        GlobPatternError: If the pattern is malformed.
    """
    segments = [s for s in pattern.split("/") if s]
    if not segments:
        raise GlobPatternError(f"Empty glob pattern: {pattern!r}")

    for segment in segments:
        _check_segment(segment, pattern)

    return _match_segments(segments, [s for s in path.split("/") if s])


def match_pattern(pattern: str, path: str) -> bool:
    """Match one include/ignore pattern against a path.

    The pattern is tried as a glob first. If it is not a valid glob it is
    tried as a regular expression; if that fails too it matches nothing.
    """
    anchored = anchor_pattern(pattern)
    if not anchored.strip("/"):
        # A bare "/" names the root itself, never a file
        return False

    try:
        return glob_match(anchored, path)
    except GlobPatternError:
        pass

    try:
        return re.search(pattern, path) is not None
    except re.error as e:
        logger.debug(
            "Pattern is neither a glob nor a regex",
            extra={"pattern": pattern, "error": str(e)},
        )
        return False


def match_patterns(patterns: Iterable[str], path: str) -> bool:
    """Check whether any of the patterns matches the path."""
    return any(match_pattern(pattern, path) for pattern in patterns)
