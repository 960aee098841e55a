"""
Error taxonomy for forgekit.

Every error raised by the dependency / resolution core carries a complete,
human-actionable message (what failed, what was tried, what fixes it).
The CLI error handler decides how much of it to render.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

REMEDIATION_COMMAND = "forge module install"

PROTOCOL_VIOLATION_EXIT_CODE = 70


class ForgeError(Exception):
    """Base class for all forgekit errors."""

    exit_code: int = 1


class UserConfigError(ForgeError):
    """Configuration or declaration problem the user has to fix."""


class MalformedSpecifierError(UserConfigError):
    """A dependency or module specifier could not be parsed."""

    def __init__(self, specifier: str, reason: str):
        self.specifier = specifier
        self.reason = reason
        super().__init__(f"Malformed specifier '{specifier}': {reason}")


class DependenciesMissingError(UserConfigError):
    """Declared dependencies are missing and the install policy forbids installing them."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing dependencies: {', '.join(self.missing)}\n"
            f"Run: {REMEDIATION_COMMAND}"
        )


class OfflineDependenciesMissingError(UserConfigError):
    """Offline mode is enabled but declared dependencies are missing."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        noun = "dependency is" if len(self.missing) == 1 else "dependencies are"
        super().__init__(
            f"Offline mode is enabled but {noun} missing\n\n"
            f"Missing: {', '.join(self.missing)}\n\n"
            "Suggestions:\n"
            "  1. Disable offline mode and retry\n"
            "  2. Install dependencies on a connected machine first\n"
            "  3. Pre-install all dependencies before working offline"
        )


class ConfigLoadError(UserConfigError):
    """A configuration file could not be read or validated."""


class ProjectNotFoundError(UserConfigError):
    """An explicitly requested project root has no module directory."""


class ExternalToolError(ForgeError):
    """
    The external package manager failed.

    The tool's diagnostic output is kept verbatim so network, auth and
    registry failures reach the user unchanged.
    """

    def __init__(self, specifier: str, stderr: str, returncode: int | None = None, message: str | None = None):
        self.specifier = specifier
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message or f"Failed to install {specifier}: {stderr.strip() or 'Unknown error'}")


class NotFoundError(ForgeError, LookupError):
    """A module specifier did not resolve to a loadable file."""

    def __init__(self, specifier: str, message: str, searched: Sequence[Path], attempted: Sequence[Path]):
        self.specifier = specifier
        self.searched = list(searched)
        self.attempted = list(attempted)
        super().__init__(message)


class CommandLoadError(ForgeError):
    """A resolved command module raised while being imported."""


class ProtocolViolationError(ForgeError):
    """
    Restart requested by a process that is already a restart.

    Indicates a packaging bug or a corrupted shared home. Never retried.
    """

    exit_code = PROTOCOL_VIOLATION_EXIT_CODE
