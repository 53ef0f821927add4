"""Embeddable entry point for running Claude reviews from other code.

Example:
    reviewer = ClaudeReviewer.create(
        github_token="ghp_xxx",
        anthropic_api_key="sk-ant-xxx",
        repo_name="owner/repo",
        pr_number=123,
    )
    review = reviewer.review_pull_request()
    reviewer.post_review_comment(review)
"""

from typing import Any

from claude_reviewer.claude_client import ClaudeClient
from claude_reviewer.config import ReviewConfig
from claude_reviewer.platform_protocol import ChangeRecord, GitPlatform
from claude_reviewer.review import (
    ReviewService,
    build_comment_body,
    create_completion_client,
    create_platform,
)

NO_FILES_MESSAGES = {
    "ko": "리뷰할 파일이 없습니다.",
    "en": "No files to review.",
}


class ClaudeReviewer:
    """Facade over the platform client, Claude client and review service.

    Lets callers decide whether and when the review is posted.
    """

    def __init__(
        self,
        config: ReviewConfig,
        platform: GitPlatform | None = None,
        completion_client: ClaudeClient | None = None,
    ) -> None:
        self._config = config
        self._platform = platform or create_platform(config)
        self._completion_client = completion_client or create_completion_client(config)
        self._review_service = ReviewService(self._platform, self._completion_client)

    def __enter__(self) -> "ClaudeReviewer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the platform and Claude HTTP clients."""
        self._review_service.close()

    @classmethod
    def create(cls, **fields: Any) -> "ClaudeReviewer":
        """Build a reviewer from keyword fields with environment fallback.

        Accepts the keyword arguments of ReviewConfig.build.

        Raises:
            ConfigurationError: If a required value is missing.
        """
        return cls(ReviewConfig.build(**fields))

    def get_changed_files(self) -> list[ChangeRecord]:
        return self._platform.list_changed_files()

    def review_pull_request(self) -> str:
        """Review the PR and return the text without posting it."""
        changed_files = self._platform.list_changed_files()
        if not changed_files:
            return NO_FILES_MESSAGES.get(self._config.language, NO_FILES_MESSAGES["en"])
        return self._completion_client.review_code(changed_files)

    def post_review_comment(self, review_text: str) -> None:
        self._platform.post_comment(build_comment_body(review_text))

    def execute_full_review(self) -> str | None:
        """Review the PR and post the result as a comment."""
        return self._review_service.execute_review()
