"""claudectx exception hierarchy.

Every failure the profile engine can hit maps to one of these classes so
the CLI can report it and exit non-zero. Nothing below the CLI recovers
from them, apart from the login workflow's backup/restore bracket.
"""

from __future__ import annotations

from pathlib import Path


class ClaudectxError(Exception):
    """Base for all claudectx exceptions."""


class ProfileNotFoundError(ClaudectxError):
    """Requested profile does not exist."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Profile '{slug}' not found")
        self.slug = slug


class InvalidProfileNameError(ClaudectxError):
    """Profile name has no letters or digits left after slugifying."""


class MissingLiveConfigError(ClaudectxError):
    """The live Claude config is absent when an operation needs it."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Failed to read Claude config at {path} - is Claude Code installed?"
        )
        self.path = path


class ParseFailureError(ClaudectxError):
    """Malformed JSON in the live config or a profile file."""


class FilesystemError(ClaudectxError):
    """Permission or I/O failure on read/write/remove/rename."""


class LoginError(ClaudectxError):
    """The external login step failed, was cancelled, or wrote no config."""


class LaunchError(ClaudectxError):
    """The external command could not be executed."""
