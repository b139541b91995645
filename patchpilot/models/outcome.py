"""Outcomes of a review run and of each reviewed file."""

from dataclasses import dataclass
from enum import Enum


class ReviewOutcome(str, Enum):
    """Overall result of handling one pull request event."""

    SUCCESS = "success"
    NO_CHANGE = "no change"
    NO_CREDENTIAL = "no credential"
    INVALID_PAYLOAD = "invalid event payload"
    NO_TARGET_LABEL = "no target label attached"


class FileAction(str, Enum):
    """What the dispatch loop did with a single file."""

    SKIPPED = "skipped"  # Not eligible, reviewer not called
    APPROVED = "approved"  # LGTM, nothing posted
    INLINE = "inline"  # Inline review comment posted
    FALLBACK = "fallback"  # General PR comment posted instead
    FAILED = "failed"  # Review or posting raised


@dataclass(frozen=True)
class FileReport:
    """Record of the action taken for one file."""

    filename: str
    action: FileAction
    position: int | None = None
    error: str | None = None
