"""
Forge host.

The object command modules see as ``context.forge``. Owns the resolved
configuration, the state store, and the registry that turns module
specifiers into CLI commands.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from forgekit import builtin_commands
from forgekit.application.command_registry import CommandRegistry
from forgekit.application.module_resolver import ModuleResolver
from forgekit.application.restart import auto_install_dependencies
from forgekit.domain.command import ForgeContext
from forgekit.domain.config import ResolvedConfig
from forgekit.infrastructure.home.package_manager import PackageManager
from forgekit.infrastructure.home.shared_home import SharedHome
from forgekit.infrastructure.logging_config import level_name, resolve_log_level
from forgekit.infrastructure.state.store import StateManager

logger = logging.getLogger(__name__)


class Forge:
    """
    Runtime host for one CLI invocation.

    Typical lifecycle::

        forge = Forge(resolved)
        if forge.initialize():
            return RESTART_EXIT_CODE
        forge.register_commands(click_group)
    """

    def __init__(
        self,
        resolved: ResolvedConfig,
        home: Optional[SharedHome] = None,
        installer: Optional[PackageManager] = None,
        resolver: Optional[ModuleResolver] = None,
        state: Optional[StateManager] = None,
    ):
        self.resolved = resolved
        self.home = home or SharedHome()
        self.installer = installer
        self.resolver = resolver or ModuleResolver(self.home)
        if state is None and resolved.project_root is not None:
            state = StateManager(resolved.project_root)
        self.state = state
        self.registry = CommandRegistry(self.resolver, self.make_context)

    @property
    def config(self):
        return self.resolved.config

    @property
    def module_root(self) -> Path:
        return self.resolved.module_root

    def initialize(self) -> bool:
        """
        Install missing dependencies.

        Returns:
            True if the process must exit with RESTART_EXIT_CODE before
            any command module is loaded
        """
        return auto_install_dependencies(
            self.config,
            self.module_root,
            self.resolved.options.is_restarted,
            home=self.home,
            installer=self.installer,
        )

    def load_modules(self) -> None:
        """Resolve and import the built-in commands plus every configured module."""
        self.registry.add_module(builtin_commands, Path(builtin_commands.__file__))
        if self.config.modules:
            logger.debug("Loading %d module(s) from %s", len(self.config.modules), self.module_root)
        self.registry.load_all(self.config.modules, self.module_root)

    def register_commands(self, root: click.Group) -> None:
        """Load modules (once) and bind their commands to ``root``."""
        if not self.registry.modules:
            self.load_modules()
        self.registry.bind(root)

    def make_context(self, group_name: Optional[str], command_name: str) -> ForgeContext:
        options = self.resolved.options
        key = f"{group_name}.{command_name}" if group_name else command_name
        return ForgeContext(
            forge=self,
            config=self.resolved,
            state=self.state,
            group_name=group_name,
            command_name=command_name,
            settings=self.config.command_settings(key),
            log_level=level_name(resolve_log_level(options)),
            log_format=options.log_format.value,
            color=options.color.value,
        )
