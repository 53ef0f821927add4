"""GitHub implementation of the GitPlatform protocol."""

from __future__ import annotations

import logging

from github import Auth, Github, GithubException
from github.PullRequest import PullRequest

from claude_reviewer.config import ReviewConfig
from claude_reviewer.platform_protocol import (
    ChangeRecord,
    PlatformError,
    build_change_record,
    filter_changes,
)

logger = logging.getLogger(__name__)


class GitHubClient:
    """GitHub pull request client implementing GitPlatform protocol.

    Uses PyGithub to interact with the GitHub REST API. The pull request is
    looked up on every call, so constructing the client performs no network
    request.
    """

    def __init__(self, config: ReviewConfig) -> None:
        """Initialize GitHub client.

        Args:
            config: Review configuration with token, repository and PR number.
        """
        self._config = config
        # Single attempt per call; PyGithub retries 5xx and 403 by default.
        self._github = Github(auth=Auth.Token(config.github_token), retry=None)

    def close(self) -> None:
        self._github.close()

    def list_changed_files(self) -> list[ChangeRecord]:
        """Get the files changed in the PR, filtered by extension.

        Returns:
            ChangeRecord objects in the order GitHub reports them.

        Raises:
            PlatformError: If the PR cannot be read.
        """
        try:
            pull_request = self._get_pull_request()
            changes = [
                build_change_record(file.filename, file.patch, file.status)
                for file in pull_request.get_files()
            ]
        except GithubException as error:
            raise _platform_error("list files", error) from error

        logger.debug(
            "PR #%d in %s has %d changed files",
            self._config.pr_number,
            self._config.repo_name,
            len(changes),
        )
        return filter_changes(changes, self._config.file_extensions)

    def post_comment(self, body: str) -> None:
        """Post an issue comment on the PR.

        Args:
            body: Comment text.

        Raises:
            PlatformError: If the comment cannot be created.
        """
        try:
            self._get_pull_request().create_issue_comment(body=body)
        except GithubException as error:
            raise _platform_error("post comment", error) from error

    def _get_pull_request(self) -> PullRequest:
        repo = self._github.get_repo(self._config.repo_name)
        return repo.get_pull(self._config.pr_number)


def _platform_error(action: str, error: GithubException) -> PlatformError:
    message = error.data.get("message") if isinstance(error.data, dict) else error.data
    return PlatformError(
        f"GitHub API call failed ({action}): {error.status} {message}",
        status_code=error.status,
    )
