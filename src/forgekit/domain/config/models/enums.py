"""
Domain enums for configuration system.

This module defines all enumeration types used in the configuration domain.
"""

from enum import Enum


class InstallPolicy(Enum):
    """What to do when declared dependencies are missing."""

    AUTO = "auto"
    MANUAL = "manual"
    ASK = "ask"  # behaves as AUTO (with a warning) until prompting exists


class LogFormat(Enum):
    """Console log output formats."""
    PRETTY = "pretty"
    JSON = "json"


class ColorMode(Enum):
    """Terminal color handling."""
    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    @classmethod
    def from_flag(cls, value: str | None) -> "ColorMode":
        """
        Map a --color value (including its aliases) to a mode.

        Raises:
            ValueError: For a value that is not a mode or an alias
        """
        if value is None:
            return cls.AUTO
        normalized = value.strip().lower()
        if normalized == "auto":
            return cls.AUTO
        if normalized in ("on", "true", "always", "yes"):
            return cls.ALWAYS
        if normalized in ("off", "false", "never", "disable", "no"):
            return cls.NEVER
        raise ValueError(f"'{value}' is not one of auto, always, never, on, off, true, false")
