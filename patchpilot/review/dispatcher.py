"""Per-file review dispatch loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchpilot.models.outcome import FileAction, FileReport
from patchpilot.models.verdict import Approved
from patchpilot.tools.comments import (
    CommentResult,
    post_fallback_comment,
    post_inline_comment,
)
from patchpilot.tools.diff import resolve_position
from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from github.Repository import Repository

    from patchpilot.agent.reviewer import ReviewAgent
    from patchpilot.models.changed_file import ChangedFile
    from patchpilot.models.config import ReviewConfig

logger = get_logger("review.dispatcher")


class ReviewDispatcher:
    """Reviews changed files one by one and posts the feedback.

    Each file is handled in isolation: a failure while reviewing or commenting
    on one file is logged and the loop moves on to the next.
    """

    def __init__(
        self,
        repo: Repository,
        pr_number: int,
        commit_id: str,
        reviewer: ReviewAgent,
        config: ReviewConfig,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            repo: Repository the pull request belongs to.
            pr_number: Pull request number.
            commit_id: Latest commit SHA, used for inline comments.
            reviewer: Review service producing a verdict per patch.
            config: Review configuration.
        """
        self.repo = repo
        self.pr_number = pr_number
        self.commit_id = commit_id
        self.reviewer = reviewer
        self.config = config

    def skip_reason(self, file: ChangedFile) -> str | None:
        """Return why a file is not eligible for review, or None."""
        if not file.is_reviewable:
            return f"status is {file.status.value}"
        if not file.patch:
            return "no patch"
        if file.exceeds(self.config.max_patch_length):
            return "diff is too large"
        return None

    def dispatch(self, files: Iterable[ChangedFile]) -> list[FileReport]:
        """Review every file in order.

        Args:
            files: Filtered files to review.

        Returns:
            One report per file.
        """
        return [self.review_file(file) for file in files]

    def review_file(self, file: ChangedFile) -> FileReport:
        """Review one file and post its feedback, never raising."""
        reason = self.skip_reason(file)
        if reason is not None:
            logger.info(
                "Skipping file",
                extra={"file_path": file.filename, "reason": reason},
            )
            return FileReport(filename=file.filename, action=FileAction.SKIPPED)

        try:
            return self._review_and_comment(file)
        except Exception as e:
            logger.error(
                "Failed to review file",
                extra={"file_path": file.filename, "error": str(e)},
                exc_info=True,
            )
            return FileReport(filename=file.filename, action=FileAction.FAILED, error=str(e))

    def _review_and_comment(self, file: ChangedFile) -> FileReport:
        """Call the review service and place its comment."""
        patch = file.patch or ""
        verdict = self.reviewer.code_review(patch)

        if isinstance(verdict, Approved):
            logger.info("File looks good", extra={"file_path": file.filename})
            return FileReport(filename=file.filename, action=FileAction.APPROVED)

        position = resolve_position(patch)

        if position is not None:
            result = post_inline_comment(
                self.repo,
                pr_number=self.pr_number,
                body=verdict.comment,
                file_path=file.filename,
                position=position,
                commit_id=self.commit_id,
            )
            if result is CommentResult.POSTED:
                return FileReport(
                    filename=file.filename,
                    action=FileAction.INLINE,
                    position=position,
                )
        else:
            logger.info(
                "No commentable line in patch",
                extra={"file_path": file.filename},
            )

        post_fallback_comment(self.repo, self.pr_number, verdict.comment)
        return FileReport(filename=file.filename, action=FileAction.FALLBACK, position=position)
