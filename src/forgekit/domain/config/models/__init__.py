"""
Configuration domain models package.

This package contains all domain models for the configuration system.
"""

from .enums import ColorMode, InstallPolicy, LogFormat
from .forge_config import BootstrapOptions, ForgeConfig, ResolvedConfig

__all__ = [
    "BootstrapOptions",
    "ColorMode",
    "ForgeConfig",
    "InstallPolicy",
    "LogFormat",
    "ResolvedConfig",
]
