"""Configuration domain package."""

from .models import BootstrapOptions, ColorMode, ForgeConfig, InstallPolicy, LogFormat, ResolvedConfig

__all__ = [
    "BootstrapOptions",
    "ColorMode",
    "ForgeConfig",
    "InstallPolicy",
    "LogFormat",
    "ResolvedConfig",
]
