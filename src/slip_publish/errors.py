"""Error types for slip publishing flows."""

from __future__ import annotations


class SlipPublishError(RuntimeError):
    """Base error for slip-publish operations."""


class CLIError(SlipPublishError):
    """User-facing CLI error."""


class PublishError(SlipPublishError):
    """Raised when a board cannot be staged, validated or written."""


class GitPublishError(SlipPublishError):
    """Raised when a git step of the publish fails."""

    def __init__(self, message: str, *, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.stderr = stderr
