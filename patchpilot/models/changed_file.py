"""Changed file model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import unquote, urlparse

# Segments of the contents API marker: repos/{owner}/{repo}/contents
CONTENTS_MARKER_SEGMENTS = 4


class FileStatus(str, Enum):
    """Status of a file in a commit comparison."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


REVIEWABLE_STATUSES = frozenset({FileStatus.ADDED, FileStatus.MODIFIED})


@dataclass(frozen=True)
class ChangedFile:
    """A single file touched between two commits."""

    filename: str
    status: FileStatus
    patch: str | None = None
    contents_url: str | None = None
    additions: int = 0
    deletions: int = 0
    sha: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.filename:
            raise ValueError("filename cannot be empty")

        if self.additions < 0:
            raise ValueError(f"additions must be non-negative, got {self.additions}")

        if self.deletions < 0:
            raise ValueError(f"deletions must be non-negative, got {self.deletions}")

    @property
    def path(self) -> str:
        """Percent-decoded repository path, derived from the contents URL.

        The ``repos/{owner}/{repo}/contents/`` marker may sit below an API prefix
        such as ``/api/v3`` on GitHub Enterprise. Falls back to the filename when
        there is no contents URL or the marker is missing.
        """
        if not self.contents_url:
            return self.filename

        segments = unquote(urlparse(self.contents_url).path).strip("/").split("/")

        for i in range(len(segments) - CONTENTS_MARKER_SEGMENTS):
            if segments[i] == "repos" and segments[i + 3] == "contents":
                return "/".join(segments[i + CONTENTS_MARKER_SEGMENTS :])

        return self.filename

    @property
    def is_reviewable(self) -> bool:
        """Whether the status allows posting review comments."""
        return self.status in REVIEWABLE_STATUSES

    def exceeds(self, max_patch_length: int | None) -> bool:
        """Check whether the patch is longer than the given limit."""
        if max_patch_length is None or self.patch is None:
            return False
        return len(self.patch) > max_patch_length

    @classmethod
    def from_github_file(cls, file: Any) -> ChangedFile:
        """Create a ChangedFile from a PyGithub ``File`` object.

        Args:
            file: File returned by ``Repository.compare``.

        Returns:
            ChangedFile instance.
        """
        return cls(
            filename=file.filename,
            status=FileStatus(file.status),
            patch=getattr(file, "patch", None),
            contents_url=getattr(file, "contents_url", None),
            additions=file.additions or 0,
            deletions=file.deletions or 0,
            sha=getattr(file, "sha", None),
        )
