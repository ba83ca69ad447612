"""Error taxonomy shared by relkit and the release pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class ReleaseError(RuntimeError):
    """Base class for fatal release pipeline errors."""


class ConfigurationError(ReleaseError):
    """Raised when a required setting, credential or tag is missing."""


class ExternalToolError(ReleaseError):
    """Raised when an external command or the registry reports a failure."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr


__all__ = ["ConfigurationError", "ExternalToolError", "ReleaseError"]
