"""Unit tests for the pull request review run."""

from collections.abc import Callable, Generator
from unittest.mock import MagicMock, patch

import pytest

from patchpilot.models.changed_file import ChangedFile
from patchpilot.models.config import ReviewConfig
from patchpilot.models.outcome import ReviewOutcome
from patchpilot.models.pull_request import PullRequest
from patchpilot.models.verdict import Approved
from patchpilot.review.runner import (
    check_preconditions,
    collect_changes,
    load_credential,
    review_pull_request,
)
from patchpilot.tools.comments import CommentPostError
from patchpilot.tools.github import CommitRange, CredentialLookupError
from tests.fixtures.webhook_payloads import BASE_SHA, HEAD_SHA, create_pr_payload

MakeFile = Callable[..., ChangedFile]

SHA_1 = "1" * 40
SHA_2 = "2" * 40
SHA_3 = "3" * 40


def _pr(**kwargs) -> PullRequest:
    return PullRequest.from_webhook_payload(create_pr_payload(**kwargs))


@pytest.fixture
def mock_client(mock_repo: MagicMock) -> MagicMock:
    """GitHub client returning the mock repository."""
    client = MagicMock()
    client.get_repo.return_value = mock_repo
    return client


@pytest.fixture
def reviewer() -> MagicMock:
    """Review service approving every patch."""
    mock = MagicMock()
    mock.code_review.return_value = Approved()
    return mock


@pytest.fixture
def factory(reviewer: MagicMock) -> MagicMock:
    """Reviewer factory handing out the mock reviewer."""
    return MagicMock(return_value=reviewer)


@pytest.fixture
def compare() -> Generator[MagicMock]:
    """Patch the commit comparison used by the runner."""
    with patch("patchpilot.review.runner.compare_commits") as mock:
        yield mock


class TestCheckPreconditions:
    """Tests for event gating."""

    def test_open_pr_passes(self) -> None:
        """An open, unlocked PR with no label requirement proceeds."""
        assert check_preconditions(_pr(), ReviewConfig()) is None

    def test_closed_pr(self) -> None:
        """Closed PRs are rejected as invalid payloads."""
        assert check_preconditions(_pr(state="closed"), ReviewConfig()) is (
            ReviewOutcome.INVALID_PAYLOAD
        )

    def test_locked_pr(self) -> None:
        """Locked PRs are rejected as invalid payloads."""
        assert check_preconditions(_pr(locked=True), ReviewConfig()) is (
            ReviewOutcome.INVALID_PAYLOAD
        )

    def test_missing_target_label(self) -> None:
        """A configured label that is not attached stops the run."""
        config = ReviewConfig(target_label="ai-review")

        assert check_preconditions(_pr(labels=["bug"]), config) is ReviewOutcome.NO_TARGET_LABEL

    def test_target_label_attached(self) -> None:
        """The run proceeds when the label is attached."""
        config = ReviewConfig(target_label="ai-review")

        assert check_preconditions(_pr(labels=["bug", "ai-review"]), config) is None


class TestLoadCredential:
    """Tests for looking up the review credential."""

    def test_lookup_failure_posts_help(self, mock_repo: MagicMock) -> None:
        """A failed lookup asks the owners to configure the credential."""
        pr = _pr(pr_number=7)
        config = ReviewConfig(credential_name="MY_KEY")

        with (
            patch(
                "patchpilot.review.runner.get_review_credential",
                side_effect=CredentialLookupError("not found"),
            ),
            patch("patchpilot.review.runner.post_credential_help") as help_comment,
        ):
            assert load_credential(mock_repo, pr, config, {}) is None

        help_comment.assert_called_once_with(mock_repo, 7, "MY_KEY")

    def test_help_comment_failure_is_logged(self, mock_repo: MagicMock) -> None:
        """A failing help comment still ends the run without a credential."""
        with (
            patch(
                "patchpilot.review.runner.get_review_credential",
                side_effect=CredentialLookupError("not found"),
            ),
            patch(
                "patchpilot.review.runner.post_credential_help",
                side_effect=CommentPostError("Failed to post issue comment"),
            ),
        ):
            assert load_credential(mock_repo, _pr(), ReviewConfig(), {}) is None

    def test_empty_credential_posts_nothing(self, mock_repo: MagicMock) -> None:
        """An empty credential aborts without commenting."""
        with (
            patch("patchpilot.review.runner.get_review_credential", return_value=None),
            patch("patchpilot.review.runner.post_credential_help") as help_comment,
        ):
            assert load_credential(mock_repo, _pr(), ReviewConfig(), {}) is None

        help_comment.assert_not_called()

    def test_credential_found(self, mock_repo: MagicMock) -> None:
        """The credential is returned when present."""
        credential = load_credential(mock_repo, _pr(), ReviewConfig(), {"OPENAI_API_KEY": "sk-1"})

        assert credential == "sk-1"


class TestCollectChanges:
    """Tests for choosing the commit range to review."""

    def test_opened_reviews_full_range(
        self, mock_repo: MagicMock, compare: MagicMock, make_file: MakeFile
    ) -> None:
        """Opened PRs review everything between base and head."""
        full = CommitRange(files=[make_file()], commit_shas=[SHA_1, SHA_2, SHA_3])
        compare.return_value = full

        changes, commit_id = collect_changes(mock_repo, _pr(action="opened"))

        assert changes is full
        assert commit_id == SHA_3
        compare.assert_called_once_with(mock_repo, BASE_SHA, HEAD_SHA)

    def test_synchronize_reviews_last_commit(
        self, mock_repo: MagicMock, compare: MagicMock, make_file: MakeFile
    ) -> None:
        """On a push only the two most recent commits are compared."""
        latest = CommitRange(files=[make_file("only.py")], commit_shas=[SHA_3])
        compare.side_effect = [
            CommitRange(files=[make_file()], commit_shas=[SHA_1, SHA_2, SHA_3]),
            latest,
        ]

        changes, commit_id = collect_changes(mock_repo, _pr(action="synchronize"))

        assert changes is latest
        assert commit_id == SHA_3
        assert compare.call_args_list[1].args == (mock_repo, SHA_2, SHA_3)

    def test_synchronize_single_commit_keeps_range(
        self, mock_repo: MagicMock, compare: MagicMock
    ) -> None:
        """With one commit there is nothing to narrow to."""
        compare.return_value = CommitRange(files=[], commit_shas=[SHA_1])

        collect_changes(mock_repo, _pr(action="synchronize"))

        compare.assert_called_once()

    def test_empty_range_falls_back_to_head(
        self, mock_repo: MagicMock, compare: MagicMock
    ) -> None:
        """Comments are attributed to the head SHA when no commits are listed."""
        compare.return_value = CommitRange(files=[], commit_shas=[])

        _, commit_id = collect_changes(mock_repo, _pr())

        assert commit_id == HEAD_SHA


class TestReviewPullRequest:
    """Tests for the end-to-end review run."""

    def test_gated_pr_makes_no_calls(self, mock_client: MagicMock, factory: MagicMock) -> None:
        """Rejected events never touch GitHub or the review service."""
        outcome = review_pull_request(
            _pr(state="closed"), ReviewConfig(), mock_client, factory, {"OPENAI_API_KEY": "k"}
        )

        assert outcome is ReviewOutcome.INVALID_PAYLOAD
        mock_client.get_repo.assert_not_called()
        factory.assert_not_called()

    def test_missing_credential(
        self, mock_client: MagicMock, mock_repo: MagicMock, factory: MagicMock
    ) -> None:
        """Without a credential the run stops before any review."""
        mock_repo.get_variable.return_value.value = ""

        outcome = review_pull_request(_pr(), ReviewConfig(), mock_client, factory, {})

        assert outcome is ReviewOutcome.NO_CREDENTIAL
        factory.assert_not_called()

    def test_help_comment_failure_is_no_credential(
        self, mock_client: MagicMock, mock_repo: MagicMock, factory: MagicMock
    ) -> None:
        """Posting the help comment failing does not turn into an error."""
        from github import GithubException  # noqa: PLC0415

        mock_repo.get_variable.side_effect = GithubException(404, {"message": "Not Found"}, {})
        mock_repo.get_issue.return_value.create_comment.side_effect = GithubException(
            403, {"message": "Resource not accessible by integration"}, {}
        )

        outcome = review_pull_request(_pr(), ReviewConfig(), mock_client, factory, {})

        assert outcome is ReviewOutcome.NO_CREDENTIAL
        factory.assert_not_called()

    def test_no_reviewable_files(
        self,
        mock_client: MagicMock,
        factory: MagicMock,
        compare: MagicMock,
        make_file: MakeFile,
    ) -> None:
        """Everything filtered away means no change."""
        compare.return_value = CommitRange(files=[make_file("README.md")], commit_shas=[SHA_1])
        config = ReviewConfig(ignore_patterns=("*.md",))

        outcome = review_pull_request(
            _pr(), config, mock_client, factory, {"OPENAI_API_KEY": "sk-1"}
        )

        assert outcome is ReviewOutcome.NO_CHANGE
        factory.assert_called_once_with(config, "sk-1")

    def test_success_reviews_filtered_files(
        self,
        mock_client: MagicMock,
        factory: MagicMock,
        reviewer: MagicMock,
        compare: MagicMock,
        make_file: MakeFile,
    ) -> None:
        """Files that pass the filter are sent to the reviewer."""
        compare.return_value = CommitRange(
            files=[make_file("src/a.py", patch="+a"), make_file("docs/b.md", patch="+b")],
            commit_shas=[SHA_1],
        )
        config = ReviewConfig(include_patterns=("src/**",))

        outcome = review_pull_request(
            _pr(), config, mock_client, factory, {"OPENAI_API_KEY": "sk-1"}
        )

        assert outcome is ReviewOutcome.SUCCESS
        reviewer.code_review.assert_called_once_with("+a")

    def test_default_factory_is_review_agent(
        self, mock_client: MagicMock, compare: MagicMock
    ) -> None:
        """The Strands-backed agent is used when no factory is given."""
        compare.return_value = CommitRange(files=[], commit_shas=[])

        with patch("patchpilot.review.runner.ReviewAgent") as agent_cls:
            review_pull_request(_pr(), ReviewConfig(), mock_client, environ={"OPENAI_API_KEY": "k"})

        agent_cls.assert_called_once()
