"""GitHub API tools for the review bot."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from github import Auth, Github, GithubException, GithubIntegration

from patchpilot.models.changed_file import ChangedFile
from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger("tools.github")


class GitHubToolError(Exception):
    """Error raised by GitHub tools."""

    pass


class CredentialLookupError(GitHubToolError):
    """Raised when the review service credential cannot be looked up."""

    pass


@dataclass(frozen=True)
class CommitRange:
    """Files and commit SHAs between two commits."""

    files: list[ChangedFile]
    commit_shas: list[str]

    @property
    def latest_sha(self) -> str | None:
        """SHA of the most recent commit in the range."""
        return self.commit_shas[-1] if self.commit_shas else None


def _get_private_key() -> str:
    """Get the GitHub App private key from environment.

    Returns:
        The private key content.

    Raises:
        GitHubToolError: If private key is not configured.
    """
    key = os.environ.get("GITHUB_PRIVATE_KEY")
    if key:
        return key

    key_path = os.environ.get("GITHUB_PRIVATE_KEY_PATH")
    if key_path:
        from pathlib import Path  # noqa: PLC0415

        try:
            return Path(key_path).read_text()
        except OSError as e:
            raise GitHubToolError(f"Failed to read private key from {key_path}: {e}") from e

    raise GitHubToolError(
        "GitHub private key not configured. "
        "Set GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH environment variable."
    )


def create_github_client(installation_id: int) -> Github:
    """Create an authenticated GitHub client for an installation.

    Args:
        installation_id: The GitHub App installation ID.

    Returns:
        Authenticated Github client.

    Raises:
        GitHubToolError: If authentication fails.
    """
    app_id = os.environ.get("GITHUB_APP_ID")
    if not app_id:
        raise GitHubToolError("GITHUB_APP_ID environment variable not set")

    private_key = _get_private_key()

    try:
        auth = Auth.AppAuth(int(app_id), private_key)
        gi = GithubIntegration(auth=auth)
        return gi.get_github_for_installation(installation_id)
    except Exception as e:
        raise GitHubToolError(f"Failed to create GitHub client: {e}") from e


def get_repository(client: Github, repository: str) -> Repository:
    """Fetch a repository by its ``owner/repo`` name.

    Raises:
        GitHubToolError: If the repository cannot be fetched.
    """
    try:
        return client.get_repo(repository)
    except GithubException as e:
        if e.status == 404:
            raise GitHubToolError(f"Repository {repository} not found") from e
        raise GitHubToolError(f"GitHub API error: {e}") from e


def compare_commits(repo: Repository, base: str, head: str) -> CommitRange:
    """List the files and commits between two commits.

    Args:
        repo: The repository to compare in.
        base: Base commit SHA.
        head: Head commit SHA.

    Returns:
        CommitRange with the changed files and the commit SHAs, oldest first.

    Raises:
        GitHubToolError: If the comparison cannot be fetched.
    """
    try:
        comparison = repo.compare(base, head)
        files = [ChangedFile.from_github_file(f) for f in comparison.files]
        commit_shas = [c.sha for c in comparison.commits]
    except GithubException as e:
        raise GitHubToolError(f"Failed to compare {base}...{head}: {e}") from e

    logger.debug(
        "Compared commits",
        extra={
            "base": base,
            "head": head,
            "commits": commit_shas,
            "files": [f.filename for f in files],
        },
    )

    return CommitRange(files=files, commit_shas=commit_shas)


def get_review_credential(
    repo: Repository,
    name: str,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Resolve the review service API key for a repository.

    The process environment wins; otherwise the repository's GitHub Actions
    variable with the same name is used.

    Args:
        repo: Repository the review runs for.
        name: Name of the environment variable / repository variable.
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        The credential, or None if the variable exists but is empty.

    Raises:
        CredentialLookupError: If the repository variable cannot be read.
    """
    if environ is None:
        environ = os.environ

    value = environ.get(name)
    if value:
        return value

    try:
        variable = repo.get_variable(name)
    except GithubException as e:
        raise CredentialLookupError(f"Failed to read repository variable {name}: {e}") from e

    return variable.value or None
