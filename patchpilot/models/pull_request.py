"""Pull request model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class PullRequest:
    """A pull request as reported by a ``pull_request`` webhook event."""

    number: int
    action: str
    state: str
    locked: bool
    base_sha: str
    head_sha: str
    repository: str
    installation_id: int
    html_url: str
    labels: tuple[str, ...] = ()
    title: str = ""
    body: str | None = None

    # Validation patterns
    REPO_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_-]+/[a-zA-Z0-9_.-]+$")
    SHA_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-f0-9]{40}$")

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")

        if not self.REPO_PATTERN.match(self.repository):
            raise ValueError(
                f"Invalid repository format: {self.repository}. Expected format: owner/repo"
            )

        for name, sha in (("base", self.base_sha), ("head", self.head_sha)):
            if not self.SHA_PATTERN.match(sha):
                raise ValueError(
                    f"Invalid {name} SHA format: {sha}. Expected 40-character hex string"
                )

        if self.installation_id <= 0:
            raise ValueError(f"Installation ID must be positive, got {self.installation_id}")

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> PullRequest:
        """Create a PullRequest from a GitHub webhook payload.

        Args:
            payload: The webhook payload containing pull_request data.

        Returns:
            PullRequest instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        pr = payload["pull_request"]
        return cls(
            number=pr.get("number") or payload["number"],
            action=payload.get("action", ""),
            state=pr["state"],
            locked=bool(pr.get("locked", False)),
            base_sha=pr["base"]["sha"],
            head_sha=pr["head"]["sha"],
            repository=payload["repository"]["full_name"],
            installation_id=payload["installation"]["id"],
            html_url=pr["html_url"],
            labels=tuple(label["name"] for label in pr.get("labels") or [] if label),
            title=pr.get("title", ""),
            body=pr.get("body"),
        )

    @property
    def is_open(self) -> bool:
        """Whether the PR can still receive review comments."""
        return self.state != "closed" and not self.locked

    @property
    def is_synchronize(self) -> bool:
        """Whether the event was a push to the PR branch."""
        return self.action == "synchronize"

    def has_label(self, name: str) -> bool:
        """Check whether a label with the given name is attached."""
        return name in self.labels
