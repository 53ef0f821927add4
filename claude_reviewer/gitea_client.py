"""Gitea implementation of the GitPlatform protocol."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from claude_reviewer.config import ReviewConfig
from claude_reviewer.platform_protocol import (
    ChangeRecord,
    PlatformError,
    build_change_record,
    filter_changes,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=60.0, write=60.0, read=180.0, pool=60.0)


class GiteaClient:
    """Gitea pull request client implementing GitPlatform protocol.

    Talks to the Gitea REST API (``/api/v1``) of a self-hosted instance
    using the same token as the GitHub client.
    """

    def __init__(self, config: ReviewConfig, client: httpx.Client | None = None) -> None:
        """Initialize Gitea client.

        Args:
            config: Review configuration; ``gitea_url`` must be set.
            client: Optional preconfigured httpx client (used in tests).
        """
        if not config.gitea_url:
            raise ValueError("GiteaClient requires gitea_url to be configured")

        self._config = config
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._base_url = config.gitea_url.rstrip("/")
        self._headers = {
            "Authorization": f"token {config.github_token}",
            "Content-Type": "application/json",
        }

    def __enter__(self) -> GiteaClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def list_changed_files(self) -> list[ChangeRecord]:
        """Get the files changed in the PR, filtered by extension.

        Returns:
            ChangeRecord objects in the order Gitea reports them.

        Raises:
            PlatformError: On transport failure or a non-success status.
        """
        url = (
            f"{self._base_url}/api/v1/repos/{self._config.repo_name}"
            f"/pulls/{self._config.pr_number}/files"
        )
        response = self._request("GET", url, "Gitea API call failed")

        try:
            files = response.json()
        except ValueError as error:
            raise PlatformError(
                f"Gitea API returned invalid JSON: {response.status_code}",
                status_code=response.status_code,
            ) from error
        if not isinstance(files, list):
            raise PlatformError(
                f"Gitea API returned unexpected payload: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            changes = [
                build_change_record(
                    file["filename"], file.get("patch"), file.get("status", "")
                )
                for file in files
            ]
        except (KeyError, AttributeError) as error:
            raise PlatformError(
                f"Gitea API returned a file entry without filename: {error}",
                status_code=response.status_code,
            ) from error
        logger.debug("Gitea reported %d changed files", len(changes))
        return filter_changes(changes, self._config.file_extensions)

    def post_comment(self, body: str) -> None:
        """Post a comment on the PR (Gitea treats PRs as issues).

        Args:
            body: Comment text.

        Raises:
            PlatformError: On transport failure or a non-success status.
        """
        url = (
            f"{self._base_url}/api/v1/repos/{self._config.repo_name}"
            f"/issues/{self._config.pr_number}/comments"
        )
        self._request("POST", url, "Gitea comment failed", json={"body": body})

    def _request(
        self, method: str, url: str, failure: str, **kwargs: Any
    ) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as error:
            raise PlatformError(f"{failure}: {error}") from error

        if not response.is_success:
            raise PlatformError(
                f"{failure}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response
