"""Include/ignore filtering of changed files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchpilot.tools.patterns import match_patterns
from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from patchpilot.models.changed_file import ChangedFile
    from patchpilot.models.config import ReviewConfig

logger = get_logger("review.filters")


def should_review(file: ChangedFile, config: ReviewConfig) -> bool:
    """Decide whether a changed file passes the configured filters.

    Include patterns are exclusive: when any are configured, only matching
    files are kept and the ignore rules are not consulted.
    """
    path = file.path

    if config.include_patterns:
        return match_patterns(config.include_patterns, path)

    if file.filename in config.ignore_list:
        return False

    if config.ignore_patterns:
        return not match_patterns(config.ignore_patterns, path)

    return True


def filter_files(files: Iterable[ChangedFile], config: ReviewConfig) -> list[ChangedFile]:
    """Select the changed files to review, preserving order.

    Args:
        files: Files reported by the commit comparison.
        config: Review configuration holding the filter rules.

    Returns:
        The files to review. May be empty.
    """
    files = list(files)
    kept = [f for f in files if should_review(f, config)]

    logger.debug(
        "Filtered changed files",
        extra={
            "ignore_list": list(config.ignore_list),
            "ignore_patterns": list(config.ignore_patterns),
            "include_patterns": list(config.include_patterns),
            "total": len(files),
            "kept": [f.filename for f in kept],
        },
    )

    return kept
