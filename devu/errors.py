"""
Custom exception types used across devu.

Every command is its own error boundary: the CLI catches DevuError,
prints the message and exits non-zero. Anything else is a bug.
"""

from __future__ import annotations

from typing import Sequence


class DevuError(Exception):
    """Base class for all devu specific errors."""


class ValidationError(DevuError):
    """Raised when a command argument is present but not acceptable."""


class ConfigError(DevuError):
    """Raised when a .devu override file cannot be parsed."""


class GitError(DevuError):
    """Raised when git operations fail."""


class VcsCommandFailed(GitError):
    """Raised when git exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()

        message = f"git command failed: {' '.join(self.command)}"
        if self.stderr:
            message = f"{message}\n{self.stderr}"
        super().__init__(message)


class NoDefaultBranch(GitError):
    """Raised when origin has no symbolic HEAD."""

    def __init__(self) -> None:
        super().__init__(
            "You do not seem to have a default REMOTE branch. "
            "Set one with: git remote set-head origin --auto"
        )


class UnparsableRemoteUrl(GitError):
    """Raised when the origin URL is not of the form user@host:owner/repo.git."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            f"cannot parse remote URL {url!r}; expected the form user@host:owner/repo.git"
        )
