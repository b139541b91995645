"""Data models for patchpilot."""

from patchpilot.models.changed_file import ChangedFile, FileStatus
from patchpilot.models.config import ConfigurationError, ReviewConfig
from patchpilot.models.outcome import FileAction, FileReport, ReviewOutcome
from patchpilot.models.pull_request import PullRequest
from patchpilot.models.verdict import (
    Approved,
    ChangesRequested,
    ReviewVerdict,
    verdict_from_response,
)

__all__ = [
    "Approved",
    "ChangedFile",
    "ChangesRequested",
    "ConfigurationError",
    "FileAction",
    "FileReport",
    "FileStatus",
    "PullRequest",
    "ReviewConfig",
    "ReviewOutcome",
    "ReviewVerdict",
    "verdict_from_response",
]
