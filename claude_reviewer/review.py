"""Review orchestrator, composition functions and unattended entry point."""

import logging
import os
import sys
import traceback

from claude_reviewer.claude_client import ClaudeClient
from claude_reviewer.config import ConfigurationError, ReviewConfig
from claude_reviewer.gitea_client import GiteaClient
from claude_reviewer.github_client import GitHubClient
from claude_reviewer.platform_protocol import GitPlatform

logger = logging.getLogger(__name__)

REVIEW_HEADER = "## 🤖 Claude AI Code Review\n\n"


def build_comment_body(review_text: str) -> str:
    """Prefix the review text with the Claude review heading.

    Args:
        review_text: Review produced by the model.

    Returns:
        Markdown comment body.
    """
    return REVIEW_HEADER + review_text


def create_platform(config: ReviewConfig) -> GitPlatform:
    """Create the hosting platform client for the configuration.

    Gitea is used when a Gitea URL is configured, GitHub otherwise.

    Args:
        config: Validated review configuration.

    Returns:
        Platform client implementing GitPlatform protocol.
    """
    if config.is_gitea:
        logger.debug("Using Gitea at %s", config.gitea_url)
        return GiteaClient(config)
    return GitHubClient(config)


def create_completion_client(config: ReviewConfig) -> ClaudeClient:
    return ClaudeClient(config)


def create_review_service(config: ReviewConfig) -> "ReviewService":
    return ReviewService(create_platform(config), create_completion_client(config))


class ReviewService:
    """Runs a review: list files, ask Claude, post the result.

    Errors from any step propagate to the caller unchanged.
    """

    def __init__(self, platform: GitPlatform, completion_client: ClaudeClient) -> None:
        self._platform = platform
        self._completion_client = completion_client

    def close(self) -> None:
        """Close the platform and completion clients."""
        try:
            self._platform.close()
        finally:
            self._completion_client.close()

    def execute_review(self) -> str | None:
        """Run the full review pipeline.

        Pipeline steps:
        1. Fetch the changed files matching the configured extensions
        2. Stop early if there is nothing to review
        3. Ask Claude for a consolidated review
        4. Post the review as a PR comment

        Returns:
            The review text, or None when no files matched.
        """
        print("🔍 Checking changed files...")
        changed_files = self._platform.list_changed_files()

        if not changed_files:
            print("ℹ️ No files to review.")
            return None

        print(f"📝 Found {len(changed_files)} files")

        print("🤖 Running AI review...")
        review_text = self._completion_client.review_code(changed_files)

        print("💬 Posting review comment...")
        self._platform.post_comment(build_comment_body(review_text))

        print("✅ Review complete!")
        return review_text


def main() -> None:
    """Run the review unattended with configuration from the environment.

    Exits with status 1 on configuration errors and on any failure
    during the review.
    """
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = ReviewConfig.from_environment()
    except ConfigurationError as error:
        print(f"ERROR: {error}")
        sys.exit(1)

    service = create_review_service(config)
    try:
        service.execute_review()
    except Exception as error:
        print(f"ERROR: Review failed: {error}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        service.close()


if __name__ == "__main__":
    main()
