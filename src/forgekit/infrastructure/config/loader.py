"""
Layered configuration loader.

Layers, lowest to highest priority:

1. built-in defaults
2. user config      <XDG_CONFIG_HOME>/forge/config.{yml,yaml,json}
3. project config   <project>/.forge/config.{yml,yaml,json}
4. local overrides  <project>/.forge/config.local.{yml,yaml,json}
5. environment      FORGE_INSTALL_MODE, FORGE_OFFLINE

Mappings merge recursively; lists and scalars from a higher layer
replace the lower value outright.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from forgekit.domain.config import ForgeConfig
from forgekit.domain.errors import ConfigLoadError
from forgekit.infrastructure.paths import PROJECT_DIR_NAME

logger = logging.getLogger(__name__)

CONFIG_EXTENSIONS = (".yml", ".yaml", ".json")

DEFAULT_CONFIG: Dict[str, Any] = {
    "modules": [],
    "settings": {},
}

# snake_case spellings are folded onto the file spelling before merging
_KEY_ALIASES = {
    "install_mode": "installMode",
    "default_command": "defaultCommand",
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested dicts merge key by key; any other value (lists included)
    replaces what was there.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def find_config_file(directory: Path, basename: str = "config") -> Optional[Path]:
    """First existing ``<basename><ext>`` in extension priority order."""
    for ext in CONFIG_EXTENSIONS:
        candidate = directory / f"{basename}{ext}"
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Parse one YAML or JSON config file.

    Returns:
        The top-level mapping (empty for an empty file)

    Raises:
        ValueError: If the file cannot be read, parsed, or is not a mapping
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {path}: top level must be a mapping, got {type(data).__name__}")
    return {_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    """Config values taken from FORGE_INSTALL_MODE and FORGE_OFFLINE."""
    overrides: Dict[str, Any] = {}

    install_mode = env.get("FORGE_INSTALL_MODE")
    if install_mode:
        overrides["installMode"] = install_mode

    offline = env.get("FORGE_OFFLINE")
    if offline:
        value = offline.strip().lower()
        if value in _TRUE_VALUES:
            overrides["offline"] = True
        elif value in _FALSE_VALUES:
            overrides["offline"] = False
        else:
            logger.warning("Ignoring FORGE_OFFLINE=%s (expected true/false)", offline)

    return overrides


class ConfigLoader:
    """
    Loads and validates the merged configuration for one invocation.

    Only the project config must be valid; a broken user or local layer
    is logged and skipped.
    """

    def __init__(
        self,
        project_root: Optional[Path],
        user_config_dir: Path,
        env: Optional[Mapping[str, str]] = None,
        forge_dir_name: str = PROJECT_DIR_NAME,
    ):
        """
        Initialize the loader.

        Args:
            project_root: Discovered project root, or None outside a project
            user_config_dir: Directory holding the user-level config file
            env: Environment mapping (defaults to os.environ)
            forge_dir_name: Name of the project module directory
        """
        self.project_root = project_root
        self.user_config_dir = user_config_dir
        self.env = os.environ if env is None else env
        self.forge_dir = project_root / forge_dir_name if project_root else None

    def load_raw(self) -> Dict[str, Any]:
        """Merge every layer without validating."""
        merged = copy.deepcopy(DEFAULT_CONFIG)

        merged = deep_merge(merged, self._optional_layer(self.user_config_dir, "config", "user"))

        if self.forge_dir is not None:
            project_file = find_config_file(self.forge_dir, "config")
            if project_file is not None:
                logger.debug("Loading project config: %s", project_file)
                try:
                    merged = deep_merge(merged, read_config_file(project_file))
                except ValueError as e:
                    raise ConfigLoadError(str(e)) from e

            merged = deep_merge(merged, self._optional_layer(self.forge_dir, "config.local", "local"))

        return deep_merge(merged, env_overrides(self.env))

    def load(self) -> ForgeConfig:
        """
        Load, merge and validate configuration.

        Raises:
            ConfigLoadError: If the project config is malformed or the
                merged result fails validation
        """
        raw = self.load_raw()
        try:
            config = ForgeConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigLoadError(f"Invalid configuration: {e}") from e

        logger.debug(
            "Config loaded: %d module(s), %d dependency(ies), installMode=%s, offline=%s",
            len(config.modules),
            len(config.dependencies),
            config.install_mode.value,
            config.offline,
        )
        return config

    def _optional_layer(self, directory: Path, basename: str, label: str) -> Dict[str, Any]:
        path = find_config_file(directory, basename)
        if path is None:
            return {}
        logger.debug("Loading %s config: %s", label, path)
        try:
            return read_config_file(path)
        except ValueError as e:
            logger.warning("Skipping %s config: %s", label, e)
            return {}


def get_setting(config: ForgeConfig, command_key: str, key: str, default: Any = None) -> Any:
    """
    Read one command-specific setting.

    Args:
        config: Loaded configuration
        command_key: ``"group.command"``
        key: Setting name within that command's block
        default: Returned when the block or key is absent
    """
    return config.command_settings(command_key).get(key, default)
