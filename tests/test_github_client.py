"""Tests for github_client module."""

from unittest.mock import MagicMock, patch

import pytest
from github import GithubException

from claude_reviewer.github_client import GitHubClient
from claude_reviewer.platform_protocol import ChangeRecord, GitPlatform, PlatformError


def _make_file(filename: str, patch_text: str | None, status: str) -> MagicMock:
    mock_file = MagicMock()
    mock_file.filename = filename
    mock_file.patch = patch_text
    mock_file.status = status
    return mock_file


@pytest.fixture
def mock_github(config):
    """Patch PyGithub and return (client, mock_pr, MockGithub)."""
    with patch("claude_reviewer.github_client.Github") as MockGithub:
        mock_repo = MagicMock()
        mock_pr = MagicMock()
        mock_repo.get_pull.return_value = mock_pr
        MockGithub.return_value.get_repo.return_value = mock_repo

        client = GitHubClient(config)
        yield client, mock_pr, MockGithub


class TestConstruction:
    def test_implements_protocol(self, mock_github):
        client, _, _ = mock_github
        assert isinstance(client, GitPlatform)

    def test_no_api_call_on_construction(self, mock_github):
        _, _, MockGithub = mock_github
        MockGithub.return_value.get_repo.assert_not_called()

    def test_retries_disabled(self, mock_github):
        """Each call is a single attempt; PyGithub must not retry POSTs."""
        _, _, MockGithub = mock_github
        MockGithub.assert_called_once()
        assert MockGithub.call_args.kwargs["retry"] is None

    def test_close_releases_connection(self, mock_github):
        client, _, MockGithub = mock_github

        client.close()

        MockGithub.return_value.close.assert_called_once()


class TestListChangedFiles:
    """Tests for GitHubClient.list_changed_files."""

    def test_returns_change_records(self, mock_github):
        client, mock_pr, MockGithub = mock_github
        mock_pr.get_files.return_value = [
            _make_file("src/Main.java", "@@ -1 +1 @@\n-a\n+b", "modified"),
        ]

        files = client.list_changed_files()

        assert files == [
            ChangeRecord(
                filename="src/Main.java",
                patch="@@ -1 +1 @@\n-a\n+b",
                status="modified",
            )
        ]
        MockGithub.return_value.get_repo.assert_called_once_with("owner/repo")
        MockGithub.return_value.get_repo.return_value.get_pull.assert_called_once_with(42)

    def test_filters_by_extension_and_keeps_order(self, mock_github):
        client, mock_pr, _ = mock_github
        mock_pr.get_files.return_value = [
            _make_file("b/Util.kt", "+x", "added"),
            _make_file("README.md", "+docs", "modified"),
            _make_file("a/Main.java", "+y", "modified"),
            _make_file("a/Main.javax", "+z", "modified"),
        ]

        files = client.list_changed_files()

        assert [f.filename for f in files] == ["b/Util.kt", "a/Main.java"]

    def test_missing_patch_becomes_empty_string(self, mock_github):
        client, mock_pr, _ = mock_github
        mock_pr.get_files.return_value = [_make_file("Big.java", None, "modified")]

        files = client.list_changed_files()

        assert files[0].patch == ""

    def test_pull_request_not_found_raises_platform_error(self, mock_github):
        client, _, MockGithub = mock_github
        MockGithub.return_value.get_repo.return_value.get_pull.side_effect = (
            GithubException(status=404, data={"message": "Not Found"}, headers={})
        )

        with pytest.raises(PlatformError, match="404") as exc_info:
            client.list_changed_files()

        assert exc_info.value.status_code == 404

    def test_bad_credentials_raise_platform_error(self, mock_github):
        client, _, MockGithub = mock_github
        MockGithub.return_value.get_repo.side_effect = GithubException(
            status=401, data={"message": "Bad credentials"}, headers={}
        )

        with pytest.raises(PlatformError, match="Bad credentials"):
            client.list_changed_files()


class TestPostComment:
    """Tests for GitHubClient.post_comment."""

    def test_creates_issue_comment(self, mock_github):
        client, mock_pr, _ = mock_github

        client.post_comment("Looks good")

        mock_pr.create_issue_comment.assert_called_once_with(body="Looks good")

    def test_failure_raises_platform_error(self, mock_github):
        client, mock_pr, _ = mock_github
        mock_pr.create_issue_comment.side_effect = GithubException(
            status=403, data={"message": "Resource not accessible"}, headers={}
        )

        with pytest.raises(PlatformError) as exc_info:
            client.post_comment("Looks good")

        assert exc_info.value.status_code == 403
