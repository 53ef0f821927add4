"""Platform-agnostic protocol for pull request review integrations."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class PlatformError(IOError):
    """Raised when a hosting platform call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ChangeRecord:
    """Represents one file changed in a pull request."""

    filename: str
    """File path as reported by the platform."""

    patch: str
    """Unified diff patch. Empty when the platform omits it (binary files)."""

    status: str
    """Change status reported by the platform (added, modified, removed...)."""

    def matches_extensions(self, extensions: Iterable[str]) -> bool:
        """Check whether the filename ends with any of the given extensions.

        Comparison is case-sensitive; each extension is trimmed first.

        Args:
            extensions: Extension suffixes such as ".java".

        Returns:
            True if at least one extension is a suffix of the filename.
        """
        return any(self.filename.endswith(extension.strip()) for extension in extensions)


def build_change_record(filename: str, patch: str | None, status: str) -> ChangeRecord:
    """Create a ChangeRecord, normalizing a missing patch to an empty string."""
    if patch is None:
        logger.warning("No patch for %s", filename)
    return ChangeRecord(filename=filename, patch=patch or "", status=status)


def filter_changes(
    changes: Iterable[ChangeRecord], extensions: Sequence[str]
) -> list[ChangeRecord]:
    """Keep only changes whose filename matches one of the extensions.

    Platform-reported order is preserved.
    """
    return [change for change in changes if change.matches_extensions(extensions)]


@runtime_checkable
class GitPlatform(Protocol):
    """Protocol for hosting platforms that can be reviewed.

    Implemented by the GitHub and Gitea clients.
    """

    def list_changed_files(self) -> list[ChangeRecord]:
        """Get the files changed in the configured pull request.

        Returns:
            ChangeRecord objects matching the configured extensions.

        Raises:
            PlatformError: If the request cannot be fetched.
        """
        ...

    def post_comment(self, body: str) -> None:
        """Post a comment on the configured pull request.

        Args:
            body: Comment text (Markdown).

        Raises:
            PlatformError: If the comment cannot be posted.
        """
        ...

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        ...
