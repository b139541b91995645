"""Comment posting tools for the review bot."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from github import GithubException

from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger("tools.comments")

# GitHub answers 422 Unprocessable Entity when a position is outside the diff
POSITION_REJECTED_STATUS = 422

FALLBACK_PREFIX = "🧾 Could not find the line to comment on, leaving a general comment instead:"

CREDENTIAL_HELP = (
    "Seems you are using me but didn't get {name} set in Variables/Secrets for this repo. "
    "Add it as a repository variable or set it in the bot's environment to enable reviews."
)


class CommentPostError(Exception):
    """Error raised when comment posting fails."""

    pass


class CommentResult(str, Enum):
    """Outcome of an inline comment attempt."""

    POSTED = "posted"
    POSITION_REJECTED = "position_rejected"


def post_inline_comment(
    repo: Repository,
    pr_number: int,
    body: str,
    file_path: str,
    position: int,
    commit_id: str,
) -> CommentResult:
    """Post a review comment at a diff position of a file.

    Args:
        repo: Repository the pull request belongs to.
        pr_number: Pull request number.
        body: Comment text (supports markdown).
        file_path: Path of the file to comment on.
        position: 1-indexed line offset in the file's patch.
        commit_id: Commit SHA the comment is attributed to.

    Returns:
        POSTED, or POSITION_REJECTED if GitHub refused the position.

    Raises:
        CommentPostError: On any other API failure.
    """
    try:
        pr = repo.get_pull(pr_number)
        # PyGithub accepts dicts for comments but types are declared incorrectly
        review = pr.create_review(
            commit=repo.get_commit(commit_id),
            event="COMMENT",
            comments=[{"path": file_path, "position": position, "body": body}],  # type: ignore[list-item]
        )
    except GithubException as e:
        if e.status == POSITION_REJECTED_STATUS:
            logger.warning(
                "Inline comment position rejected",
                extra={
                    "pr_number": pr_number,
                    "file_path": file_path,
                    "position": position,
                    "error": str(e),
                },
            )
            return CommentResult.POSITION_REJECTED
        raise CommentPostError(f"Failed to post review comment: {e}") from e

    logger.info(
        "Posted review comment",
        extra={
            "pr_number": pr_number,
            "file_path": file_path,
            "position": position,
            "review_id": review.id,
        },
    )

    return CommentResult.POSTED


def post_issue_comment(repo: Repository, pr_number: int, body: str) -> int:
    """Post a general comment in the pull request conversation.

    Args:
        repo: Repository the pull request belongs to.
        pr_number: Pull request number.
        body: Comment text (supports markdown).

    Returns:
        ID of the created comment.

    Raises:
        CommentPostError: If the comment cannot be posted.
    """
    try:
        comment = repo.get_issue(pr_number).create_comment(body)
    except GithubException as e:
        raise CommentPostError(f"Failed to post issue comment: {e}") from e

    logger.info(
        "Posted issue comment",
        extra={
            "pr_number": pr_number,
            "comment_id": comment.id,
        },
    )

    return comment.id


def post_fallback_comment(repo: Repository, pr_number: int, review_comment: str) -> int:
    """Post review feedback as a general comment when it cannot be placed inline."""
    return post_issue_comment(repo, pr_number, f"{FALLBACK_PREFIX}\n\n{review_comment}")


def post_credential_help(repo: Repository, pr_number: int, credential_name: str) -> int:
    """Tell the repository owners how to configure the review credential."""
    return post_issue_comment(repo, pr_number, CREDENTIAL_HELP.format(name=credential_name))
