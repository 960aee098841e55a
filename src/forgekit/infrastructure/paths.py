"""
Well-known filesystem locations.

The user config directory (XDG) and the shared home holding installed
dependencies. Every function takes an optional environment mapping and
falls back to os.environ without one.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

APP_NAME = "forge"

FORGE_HOME_ENV = "FORGE_HOME"
FORGE_USER_DIR_ENV = "FORGE_USER_DIR"
FORGE_PROJECT_ENV = "FORGE_PROJECT"

PROJECT_DIR_NAME = ".forge"


def _env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def _xdg(env: Optional[Mapping[str, str]], var: str, *fallback: str) -> Path:
    value = _env(env).get(var)
    if value:
        return Path(value)
    return Path.home().joinpath(*fallback)


def xdg_config_home(env: Optional[Mapping[str, str]] = None) -> Path:
    return _xdg(env, "XDG_CONFIG_HOME", ".config")


def user_config_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """Directory holding the user-level config file."""
    return xdg_config_home(env) / APP_NAME


def forge_home_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """Shared home: $FORGE_HOME, else ~/.forge."""
    value = _env(env).get(FORGE_HOME_ENV)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".forge"


def user_working_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    The directory the user invoked forge from.

    A shell wrapper may change directory before starting Python; it
    exports FORGE_USER_DIR so discovery still starts where the user was.
    """
    value = _env(env).get(FORGE_USER_DIR_ENV)
    return Path(value) if value else Path.cwd()
