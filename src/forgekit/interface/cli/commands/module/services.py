"""
Module command logic.

Install, list and resolve against the shared home, independent of typer.
"""

import logging
from pathlib import Path

from forgekit.application.container import Container
from forgekit.domain.config import InstallPolicy
from forgekit.domain.errors import OfflineDependenciesMissingError
from forgekit.domain.specifiers import DependencySpecifier
from forgekit.interface.cli.formatters.result_formatters import (
    DependencyListFormatter,
    InstallResultFormatter,
    ResolveResultFormatter,
)

logger = logging.getLogger(__name__)


class ModuleInstallCommand:
    """
    Installs every declared dependency, whatever the configured policy.

    Offline mode still only checks.
    """

    def __init__(self, container: Container):
        """
        Initialize the install command.

        Args:
            container: Application dependency container
        """
        self.container = container
        self.formatter = InstallResultFormatter()

    def execute(self) -> bool:
        """
        Run the install.

        Returns:
            True if the shared home changed

        Raises:
            OfflineDependenciesMissingError: Offline with missing dependencies
            ExternalToolError: An install failed
        """
        config = self.container.resolved_config.config
        dependencies = list(config.dependencies)
        synchronizer = self.container.synchronizer

        if config.offline:
            missing = synchronizer.missing(dependencies)
            if missing:
                raise OfflineDependenciesMissingError([d.raw for d in missing])
            self.formatter.display_install_result(len(dependencies), False)
            return False

        changed = synchronizer.sync(dependencies, InstallPolicy.AUTO) if dependencies else False
        self.formatter.display_install_result(len(dependencies), changed)
        return changed


class ModuleListCommand:
    """Lists declared dependencies with their install status."""

    def __init__(self, container: Container):
        self.container = container
        self.formatter = DependencyListFormatter()

    def execute(self) -> None:
        home = self.container.shared_home
        rows = []
        for raw in self.container.resolved_config.config.dependencies:
            dependency = DependencySpecifier.parse(raw)
            rows.append((dependency.raw, dependency.kind.value, home.is_installed(dependency)))
        self.formatter.display_dependencies(rows, home.installed_entries())


class ModuleResolveCommand:
    """Prints the file a module specifier resolves to."""

    def __init__(self, container: Container):
        self.container = container
        self.formatter = ResolveResultFormatter()

    def execute(self, specifier: str) -> Path:
        """
        Raises:
            MalformedSpecifierError, NotFoundError: From resolution
        """
        path = self.container.module_resolver.resolve(specifier, self.container.resolved_config.module_root)
        logger.debug("Resolved %s -> %s", specifier, path)
        self.formatter.display_path(path)
        return path
