"""
Service container for one forge invocation.

Built-in commands reach the shared home, installer, resolver and state
store through this object (passed as the click context ``obj``).
Everything is created on first access.
"""

import logging
import os
from typing import Mapping, Optional

from forgekit.application.dependency_sync import DependencySynchronizer
from forgekit.application.forge import Forge
from forgekit.application.module_resolver import ModuleResolver
from forgekit.domain.config import BootstrapOptions, ResolvedConfig
from forgekit.domain.errors import ProjectNotFoundError
from forgekit.infrastructure.config.manager import ConfigManager
from forgekit.infrastructure.home.package_manager import PackageManager
from forgekit.infrastructure.home.shared_home import SharedHome
from forgekit.infrastructure.paths import forge_home_path
from forgekit.infrastructure.state.store import StateManager

logger = logging.getLogger(__name__)


class Container:
    """
    Lazily built services, all bound to the same options and environment.

    Pass ``resolved`` to skip project discovery and config loading.
    """

    def __init__(
        self,
        options: Optional[BootstrapOptions] = None,
        env: Optional[Mapping[str, str]] = None,
        resolved: Optional[ResolvedConfig] = None,
    ):
        """
        Args:
            options: Global flags from the bootstrap parse
            env: Environment mapping (defaults to os.environ)
            resolved: Already resolved configuration
        """
        self.options = options or (resolved.options if resolved else BootstrapOptions())
        self.env = os.environ if env is None else env

        self._config_manager: Optional[ConfigManager] = None
        self._resolved: Optional[ResolvedConfig] = resolved
        self._shared_home: Optional[SharedHome] = None
        self._package_manager: Optional[PackageManager] = None
        self._synchronizer: Optional[DependencySynchronizer] = None
        self._module_resolver: Optional[ModuleResolver] = None
        self._state_manager: Optional[StateManager] = None
        self._forge: Optional[Forge] = None

    @property
    def config_manager(self) -> ConfigManager:
        """Discovers the project and loads config on demand."""
        if self._config_manager is None:
            self._config_manager = ConfigManager(self.options, self.env)
        return self._config_manager

    @property
    def resolved_config(self) -> ResolvedConfig:
        """Get the resolved configuration for this invocation."""
        if self._resolved is None:
            self._resolved = self.config_manager.resolve()
        return self._resolved

    @property
    def shared_home(self) -> SharedHome:
        """Shared home under FORGE_HOME or ~/.forge."""
        if self._shared_home is None:
            self._shared_home = SharedHome(forge_home_path(self.env))
        return self._shared_home

    @property
    def package_manager(self) -> PackageManager:
        if self._package_manager is None:
            self._package_manager = PackageManager(self.shared_home)
        return self._package_manager

    @property
    def synchronizer(self) -> DependencySynchronizer:
        if self._synchronizer is None:
            self._synchronizer = DependencySynchronizer(self.shared_home, self.package_manager)
        return self._synchronizer

    @property
    def module_resolver(self) -> ModuleResolver:
        if self._module_resolver is None:
            self._module_resolver = ModuleResolver(self.shared_home)
        return self._module_resolver

    @property
    def state_manager(self) -> StateManager:
        """
        Get the project state store.

        Raises:
            ProjectNotFoundError: Outside a project
        """
        if self._state_manager is None:
            project_root = self.resolved_config.project_root
            if project_root is None:
                raise ProjectNotFoundError(
                    "Not inside a forge project (no .forge/ directory found); use --root or FORGE_PROJECT"
                )
            self._state_manager = StateManager(project_root)
        return self._state_manager

    @property
    def forge(self) -> Forge:
        """Host object handed to module commands."""
        if self._forge is None:
            resolved = self.resolved_config
            state = self.state_manager if resolved.project_root is not None else None
            self._forge = Forge(
                resolved,
                home=self.shared_home,
                installer=self.package_manager,
                resolver=self.module_resolver,
                state=state,
            )
        return self._forge
