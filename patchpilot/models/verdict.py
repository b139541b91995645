"""Review verdict returned by the review service."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Approved:
    """The reviewer found nothing worth commenting on (LGTM)."""


@dataclass(frozen=True)
class ChangesRequested:
    """The reviewer has feedback to post on the file."""

    comment: str

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.comment or not self.comment.strip():
            raise ValueError("ChangesRequested requires a non-empty comment")


ReviewVerdict = Approved | ChangesRequested


def verdict_from_response(lgtm: bool, review_comment: str | None) -> ReviewVerdict:
    """Map a raw ``{lgtm, review_comment}`` answer to a verdict.

    An LGTM answer, or one without any comment text, is an approval.
    """
    if lgtm or not review_comment or not review_comment.strip():
        return Approved()
    return ChangesRequested(comment=review_comment)
