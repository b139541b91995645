"""Review run for a single pull request event."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from patchpilot.agent.reviewer import ReviewAgent
from patchpilot.models.outcome import FileAction, ReviewOutcome
from patchpilot.review.dispatcher import ReviewDispatcher
from patchpilot.review.filters import filter_files
from patchpilot.tools.comments import CommentPostError, post_credential_help
from patchpilot.tools.github import (
    CommitRange,
    CredentialLookupError,
    compare_commits,
    get_repository,
    get_review_credential,
)
from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from github import Github
    from github.Repository import Repository

    from patchpilot.models.config import ReviewConfig
    from patchpilot.models.pull_request import PullRequest

logger = get_logger("review.runner")

ReviewerFactory = Callable[["ReviewConfig", str], ReviewAgent]


def check_preconditions(pr: PullRequest, config: ReviewConfig) -> ReviewOutcome | None:
    """Reject events that must not be reviewed.

    Returns:
        The rejection outcome, or None if the review may proceed.
    """
    if not pr.is_open:
        logger.info(
            "Invalid event payload",
            extra={"pr_number": pr.number, "state": pr.state, "locked": pr.locked},
        )
        return ReviewOutcome.INVALID_PAYLOAD

    if config.target_label and not pr.has_label(config.target_label):
        logger.info(
            "No target label attached",
            extra={"pr_number": pr.number, "target_label": config.target_label},
        )
        return ReviewOutcome.NO_TARGET_LABEL

    return None


def load_credential(
    repo: Repository,
    pr: PullRequest,
    config: ReviewConfig,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Look up the review credential, asking the repository owners for it on failure."""
    try:
        credential = get_review_credential(repo, config.credential_name, environ)
    except CredentialLookupError as e:
        logger.warning(
            "Review credential lookup failed",
            extra={"repository": pr.repository, "error": str(e)},
        )
        try:
            post_credential_help(repo, pr.number, config.credential_name)
        except CommentPostError as post_error:
            logger.error(
                "Failed to post credential help comment",
                extra={"pr_number": pr.number, "error": str(post_error)},
            )
        return None

    if not credential:
        logger.info(
            "Review credential is empty",
            extra={"repository": pr.repository, "name": config.credential_name},
        )

    return credential


def collect_changes(repo: Repository, pr: PullRequest) -> tuple[CommitRange, str]:
    """Fetch the files to review and the commit to attribute comments to.

    On a ``synchronize`` event only the last pushed commit is reviewed, by
    comparing the two most recent commits of the PR range.

    Returns:
        Tuple of (commit range to review, latest commit SHA).
    """
    full_range = compare_commits(repo, pr.base_sha, pr.head_sha)
    commit_id = full_range.latest_sha or pr.head_sha

    if pr.is_synchronize and len(full_range.commit_shas) >= 2:
        previous, latest = full_range.commit_shas[-2], full_range.commit_shas[-1]
        logger.info(
            "Reviewing latest commit only",
            extra={"pr_number": pr.number, "base": previous, "head": latest},
        )
        return compare_commits(repo, previous, latest), commit_id

    return full_range, commit_id


def review_pull_request(
    pr: PullRequest,
    config: ReviewConfig,
    client: Github,
    reviewer_factory: ReviewerFactory | None = None,
    environ: Mapping[str, str] | None = None,
) -> ReviewOutcome:
    """Review a pull request and post feedback on its changed files.

    Args:
        pr: Pull request from the webhook event.
        config: Review configuration for this invocation.
        client: Authenticated GitHub client for the installation.
        reviewer_factory: Builds the review service from config and credential.
            Defaults to ``ReviewAgent``.
        environ: Mapping to look the credential up in. Defaults to ``os.environ``.

    Returns:
        The outcome of the run.

    Raises:
        GitHubToolError: If the repository or the comparison cannot be fetched.
    """
    rejection = check_preconditions(pr, config)
    if rejection is not None:
        return rejection

    repo = get_repository(client, pr.repository)

    credential = load_credential(repo, pr, config, environ)
    if not credential:
        logger.info("Review service initialization failed", extra={"pr_number": pr.number})
        return ReviewOutcome.NO_CREDENTIAL

    reviewer = (reviewer_factory or ReviewAgent)(config, credential)

    changes, commit_id = collect_changes(repo, pr)
    files = filter_files(changes.files, config)

    if not files:
        logger.info("No change found", extra={"pr_number": pr.number})
        return ReviewOutcome.NO_CHANGE

    dispatcher = ReviewDispatcher(
        repo=repo,
        pr_number=pr.number,
        commit_id=commit_id,
        reviewer=reviewer,
        config=config,
    )

    started = time.perf_counter()
    reports = dispatcher.dispatch(files)
    elapsed = time.perf_counter() - started

    logger.info(
        "Successfully reviewed",
        extra={
            "html_url": pr.html_url,
            "files": len(reports),
            "failed": sum(1 for r in reports if r.action is FileAction.FAILED),
            "review_seconds": round(elapsed, 3),
        },
    )

    return ReviewOutcome.SUCCESS
