"""Claude-powered pull request reviewer for GitHub and Gitea."""

from claude_reviewer.config import ConfigurationError, ReviewConfig
from claude_reviewer.reviewer import ClaudeReviewer

__all__ = ["ClaudeReviewer", "ConfigurationError", "ReviewConfig"]
