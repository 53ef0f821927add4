"""Code reviewer backed by the Anthropic Messages API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from claude_reviewer.config import ReviewConfig
from claude_reviewer.platform_protocol import ChangeRecord

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_TIMEOUT = httpx.Timeout(connect=60.0, write=60.0, read=180.0, pool=60.0)
SEPARATOR = "-" * 80

SYSTEM_PROMPTS = {
    "ko": (
        "경험 많은 시니어 개발자로서 코드 리뷰를 수행해줘.\n\n"
        "리뷰 지침:\n"
        "1. 가장 중요한 문제점이나 개선사항에만 집중해.\n"
        "2. 전체 변경사항에 대한 통합된 리뷰를 제공해.\n"
        "3. 구체적인 개선 제안을 제시해.\n"
        "4. 사소한 스타일 문제는 무시해.\n"
        "5. 심각한 버그, 성능 문제, 보안 취약점만 언급해.\n"
        "6. 이미 개선된 사항은 긍정적으로 언급해.\n\n"
        "리뷰 형식:\n"
        "- 개선된 사항: [긍정적 언급]\n"
        "- 주요 이슈: [문제점과 개선 방안]\n"
        "- 전반적인 의견: [요약]\n"
    ),
    "en": (
        "As an experienced senior developer, perform a code review.\n\n"
        "Review Guidelines:\n"
        "1. Focus on the most important issues or improvements.\n"
        "2. Provide an integrated review of all changes.\n"
        "3. Suggest specific improvements.\n"
        "4. Ignore minor style issues.\n"
        "5. Only mention critical bugs, performance issues, or security vulnerabilities.\n"
        "6. Positively mention already improved aspects.\n\n"
        "Review Format:\n"
        "- Improvements: [positive mentions]\n"
        "- Key Issues: [problems and suggestions]\n"
        "- Overall Opinion: [summary]\n"
    ),
}

USER_PROMPT_PREFIXES = {
    "ko": "다음 변경사항을 리뷰해줘:\n\n",
    "en": "Please review the following changes:\n\n",
}

FILE_LABELS = {"ko": "파일", "en": "File"}


class CompletionError(IOError):
    """Raised when the completion endpoint call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ContentBlock(BaseModel):
    """A single content block of a Messages API response."""

    type: str = "text"
    text: str


class MessagesResponse(BaseModel):
    """The parts of a Messages API response the reviewer relies on."""

    content: list[dict[str, Any]]
    stop_reason: str | None = None


class ClaudeClient:
    """Sends pull request changes to Claude and returns the review text.

    One request per review: all changes are rendered into a single prompt
    and the model is asked for one consolidated review.
    """

    def __init__(
        self,
        config: ReviewConfig,
        client: httpx.Client | None = None,
        api_url: str = ANTHROPIC_API_URL,
    ) -> None:
        """Initialize the Claude client.

        Args:
            config: Review configuration (API key, model, language, budget).
            client: Optional preconfigured httpx client (used in tests).
            api_url: Messages endpoint URL.
        """
        self._config = config
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._api_url = api_url

    def __enter__(self) -> ClaudeClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def review_code(self, changes: Sequence[ChangeRecord]) -> str:
        """Review all changes in a single completion call.

        Args:
            changes: Filtered changes of the pull request.

        Returns:
            The review text produced by the model.

        Raises:
            CompletionError: On transport failure, a non-success status or
                an unexpected response shape.
        """
        language = self._config.language
        request_body = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "system": build_system_prompt(language),
            "messages": [
                {
                    "role": "user",
                    "content": build_user_prompt(changes, language),
                }
            ],
        }

        logger.info(
            "Requesting review of %d files from %s", len(changes), self._config.model
        )
        response = self._post(request_body)
        return self._extract_text(response)

    def _post(self, request_body: dict[str, Any]) -> httpx.Response:
        headers = {
            "x-api-key": self._config.anthropic_api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        try:
            response = self._client.post(self._api_url, headers=headers, json=request_body)
        except httpx.HTTPError as error:
            raise CompletionError(f"Claude API call failed: {error}") from error

        if not response.is_success:
            raise CompletionError(
                f"Claude API call failed: {response.status_code} "
                f"{response.reason_phrase} {response.text}",
                status_code=response.status_code,
            )
        return response

    def _extract_text(self, response: httpx.Response) -> str:
        try:
            parsed = MessagesResponse.model_validate_json(response.content)
        except ValidationError as error:
            raise CompletionError(
                f"Unexpected Claude API response ({response.status_code}): {error}",
                status_code=response.status_code,
            ) from error

        if not parsed.content:
            raise CompletionError(
                f"Claude API response had no content ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            first_block = ContentBlock.model_validate(parsed.content[0])
        except ValidationError as error:
            raise CompletionError(
                f"Claude API response has no text block ({response.status_code}): {error}",
                status_code=response.status_code,
            ) from error

        if parsed.stop_reason == "max_tokens":
            logger.warning(
                "Review truncated at max_tokens=%d", self._config.max_tokens
            )

        return first_block.text


def build_system_prompt(language: str) -> str:
    """Return the reviewer instructions for the given language."""
    return SYSTEM_PROMPTS.get(language, SYSTEM_PROMPTS["en"])


def build_user_prompt(changes: Sequence[ChangeRecord], language: str) -> str:
    """Prefix the rendered changes with the review request sentence."""
    prefix = USER_PROMPT_PREFIXES.get(language, USER_PROMPT_PREFIXES["en"])
    return prefix + format_changes(changes, language)


def format_changes(changes: Sequence[ChangeRecord], language: str) -> str:
    """Render changes as a transcript: header, patch, separator per file."""
    label = FILE_LABELS.get(language, FILE_LABELS["en"])
    return "".join(
        f"\n{label}: {change.filename} ({change.status})\n{change.patch}\n{SEPARATOR}\n"
        for change in changes
    )
