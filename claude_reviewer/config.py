"""Review configuration built from explicit fields or environment variables."""

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_LANGUAGE = "ko"
DEFAULT_FILE_EXTENSIONS = (".java", ".kt", ".xml", ".gradle")
DEFAULT_MAX_TOKENS = 2000

GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"
PR_NUMBER_ENV = "PR_NUMBER"
REPO_NAME_ENV = "REPO_NAME"
GITEA_URL_ENV = "GITEA_URL"
MODEL_ENV = "MODEL"
LANGUAGE_ENV = "LANGUAGE"
FILE_EXTENSIONS_ENV = "FILE_EXTENSIONS"
MAX_TOKENS_ENV = "MAX_TOKENS"

# Field name -> (environment variable, human readable name)
REQUIRED_FIELDS = {
    "github_token": (GITHUB_TOKEN_ENV, "GitHub token"),
    "anthropic_api_key": (ANTHROPIC_API_KEY_ENV, "Anthropic API key"),
    "pr_number": (PR_NUMBER_ENV, "PR number"),
    "repo_name": (REPO_NAME_ENV, "Repository name"),
}


class ConfigurationError(ValueError):
    """Raised when a required setting is missing or invalid."""


class ReviewConfig(BaseModel):
    """Immutable settings for a single review run."""

    model_config = ConfigDict(frozen=True)

    github_token: str = Field(repr=False)
    anthropic_api_key: str = Field(repr=False)
    pr_number: int = Field(gt=0)
    repo_name: str
    gitea_url: str | None = None
    model: str = DEFAULT_MODEL
    language: Literal["ko", "en"] = DEFAULT_LANGUAGE
    file_extensions: tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)

    @field_validator("file_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            # A blank extension would match every filename.
            return tuple(
                ext for ext in value if not isinstance(ext, str) or ext.strip()
            )
        return value

    @field_validator("gitea_url", mode="before")
    @classmethod
    def _empty_url_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_gitea(self) -> bool:
        """Whether the self-hosted Gitea platform should be used."""
        return bool(self.gitea_url)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "ReviewConfig":
        """Build a configuration purely from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Validated ReviewConfig.

        Raises:
            ConfigurationError: If a required variable is missing or a
                value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        for env_name, _ in REQUIRED_FIELDS.values():
            if not _get_env(env, env_name):
                raise ConfigurationError(
                    f"Required environment variable not found: {env_name}"
                )

        values: dict[str, Any] = {
            "github_token": _get_env(env, GITHUB_TOKEN_ENV),
            "anthropic_api_key": _get_env(env, ANTHROPIC_API_KEY_ENV),
            "pr_number": _parse_int(env, PR_NUMBER_ENV),
            "repo_name": _get_env(env, REPO_NAME_ENV),
            "gitea_url": _get_env(env, GITEA_URL_ENV),
            "model": _get_env(env, MODEL_ENV, DEFAULT_MODEL),
            "language": _get_env(env, LANGUAGE_ENV, DEFAULT_LANGUAGE),
            "file_extensions": _get_env(
                env, FILE_EXTENSIONS_ENV, ",".join(DEFAULT_FILE_EXTENSIONS)
            ),
        }
        if _get_env(env, MAX_TOKENS_ENV):
            values["max_tokens"] = _parse_int(env, MAX_TOKENS_ENV)

        return _validated(values)

    @classmethod
    def build(
        cls,
        *,
        github_token: str | None = None,
        anthropic_api_key: str | None = None,
        pr_number: int = 0,
        repo_name: str | None = None,
        gitea_url: str | None = None,
        model: str = DEFAULT_MODEL,
        language: str = DEFAULT_LANGUAGE,
        file_extensions: str | tuple[str, ...] | list[str] = DEFAULT_FILE_EXTENSIONS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        environ: Mapping[str, str] | None = None,
    ) -> "ReviewConfig":
        """Build a configuration from explicit fields.

        Credentials, PR number, repository and Gitea URL fall back to
        their environment variables when not given.

        Raises:
            ConfigurationError: If a required value is still missing.
        """
        env = os.environ if environ is None else environ

        if not pr_number and _get_env(env, PR_NUMBER_ENV):
            pr_number = _parse_int(env, PR_NUMBER_ENV)

        values: dict[str, Any] = {
            "github_token": github_token or _get_env(env, GITHUB_TOKEN_ENV),
            "anthropic_api_key": anthropic_api_key
            or _get_env(env, ANTHROPIC_API_KEY_ENV),
            "pr_number": pr_number,
            "repo_name": repo_name or _get_env(env, REPO_NAME_ENV),
            "gitea_url": gitea_url or _get_env(env, GITEA_URL_ENV),
            "model": model,
            "language": language,
            "file_extensions": file_extensions,
            "max_tokens": max_tokens,
        }
        return _validated(values)


def _get_env(env: Mapping[str, str], key: str, default: str | None = None) -> str | None:
    """Read a variable, treating empty strings as absent."""
    value = env.get(key)
    return value if value else default


def _parse_int(env: Mapping[str, str], key: str) -> int:
    raw = env.get(key, "")
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ConfigurationError(
            f"Environment variable {key} must be an integer, got {raw!r}"
        ) from error


def _validated(values: dict[str, Any]) -> ReviewConfig:
    """Check required fields and construct the model.

    Shared by both construction paths so they fail identically.
    """
    for field_name, (_, label) in REQUIRED_FIELDS.items():
        if not values.get(field_name):
            raise ConfigurationError(f"{label} is required")

    try:
        return ReviewConfig(**values)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid review configuration: {error}") from error
