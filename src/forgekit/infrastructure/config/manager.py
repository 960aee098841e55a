"""
Configuration manager.

Ties project discovery and the layered loader together into a single
ResolvedConfig for one CLI invocation.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from forgekit.domain.config import BootstrapOptions, ForgeConfig, ResolvedConfig
from forgekit.infrastructure.config.loader import ConfigLoader
from forgekit.infrastructure.config.project_discovery import find_project_root
from forgekit.infrastructure.paths import PROJECT_DIR_NAME, user_config_dir, user_working_dir

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Resolves configuration for the current invocation.

    Caches the result; pass ``force_reload`` to re-read from disk.
    """

    def __init__(self, options: BootstrapOptions, env: Optional[Mapping[str, str]] = None):
        """
        Initialize the config manager.

        Args:
            options: Global flags from the bootstrap parse
            env: Environment mapping (defaults to os.environ)
        """
        self.options = options
        self.env = os.environ if env is None else env
        self._resolved: Optional[ResolvedConfig] = None

    def resolve(self, force_reload: bool = False) -> ResolvedConfig:
        """
        Discover the project and load its configuration.

        Raises:
            ProjectNotFoundError: If FORGE_PROJECT is set but invalid
            ConfigLoadError: If the project configuration is invalid
        """
        if self._resolved is not None and not force_reload:
            return self._resolved

        user_dir = user_working_dir(self.env)
        project_root = find_project_root(self.options.root, user_dir, self.env)
        forge_dir = project_root / PROJECT_DIR_NAME if project_root else None

        if project_root is None:
            logger.debug("Running outside a project")

        config = ConfigLoader(project_root, user_config_dir(self.env), self.env).load()

        self._resolved = ResolvedConfig(
            config=config,
            options=self.options,
            project_root=project_root,
            forge_dir=forge_dir,
            user_dir=user_dir,
        )
        return self._resolved

    @property
    def config(self) -> ForgeConfig:
        return self.resolve().config

    @property
    def project_root(self) -> Optional[Path]:
        return self.resolve().project_root
