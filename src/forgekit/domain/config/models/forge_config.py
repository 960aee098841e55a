"""
Forge configuration domain models.

ForgeConfig is the merged, validated result of all configuration layers.
BootstrapOptions carries the global CLI flags parsed before the real
parser exists, and ResolvedConfig bundles both with the discovered paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ColorMode, InstallPolicy, LogFormat


class ForgeConfig(BaseModel):
    """
    Domain model for project configuration.

    Accepts both the camelCase keys used in config files
    (``installMode``, ``defaultCommand``) and their snake_case names.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    modules: List[str] = Field(default_factory=list, description="Module specifiers to load commands from")
    dependencies: List[str] = Field(default_factory=list, description="Dependency specifiers for the shared home")
    install_mode: InstallPolicy = Field(
        InstallPolicy.AUTO,
        alias="installMode",
        description="Policy applied when declared dependencies are missing",
    )
    offline: bool = Field(False, description="Never reach the network; only check installed dependencies")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Per-command settings keyed by 'group.command'")
    default_command: Optional[str] = Field(
        None,
        alias="defaultCommand",
        description="Command to run when none is given",
    )

    @field_validator("modules", "dependencies")
    @classmethod
    def validate_specifiers(cls, v: List[str]) -> List[str]:
        """Strip entries; empty entries are rejected."""
        cleaned = []
        for item in v:
            if not isinstance(item, str) or not item.strip():
                raise ValueError("entries must be non-empty strings")
            cleaned.append(item.strip())
        return cleaned

    @field_validator("install_mode", mode="before")
    @classmethod
    def normalize_install_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def command_settings(self, command_key: str) -> Dict[str, Any]:
        """Settings block for one command ('group.command'), empty if absent."""
        value = self.settings.get(command_key)
        return dict(value) if isinstance(value, dict) else {}


@dataclass
class BootstrapOptions:
    """
    Global options available before the CLI parser is built.

    Attributes:
        root: Explicit project root (--root)
        debug: --debug flag
        quiet: --quiet flag
        silent: --silent flag
        log_level: Explicit --log-level value
        log_format: Console log format
        log_file: Optional plain-text log file (--log-file)
        color: Resolved color mode
        is_restarted: True when this process is the post-install restart
    """
    root: Optional[Path] = None
    debug: bool = False
    quiet: bool = False
    silent: bool = False
    log_level: Optional[str] = None
    log_format: LogFormat = LogFormat.PRETTY
    log_file: Optional[str] = None
    color: ColorMode = ColorMode.AUTO
    is_restarted: bool = False


@dataclass
class ResolvedConfig:
    """Merged configuration plus the paths it was resolved from."""
    config: ForgeConfig
    options: BootstrapOptions
    project_root: Optional[Path]
    forge_dir: Optional[Path]
    user_dir: Path

    @property
    def module_root(self) -> Path:
        """Directory local module specifiers resolve against."""
        if self.forge_dir is not None:
            return self.forge_dir
        return Path.cwd() / ".forge"
