"""
Dependency synchronizer.

Compares the declared dependencies against the shared-home manifest and
applies the install policy to whatever is missing.
"""

import logging
import time
from typing import List, Optional, Sequence

from forgekit.domain.config import InstallPolicy
from forgekit.domain.errors import REMEDIATION_COMMAND, DependenciesMissingError, ExternalToolError
from forgekit.domain.specifiers import DependencySpecifier
from forgekit.infrastructure.home.package_manager import PackageManager
from forgekit.infrastructure.home.shared_home import SharedHome

logger = logging.getLogger(__name__)


class DependencySynchronizer:
    """Installs missing declared dependencies according to an InstallPolicy."""

    def __init__(self, home: SharedHome, installer: Optional[PackageManager] = None):
        self.home = home
        self.installer = installer or PackageManager(home)

    def missing(self, dependencies: Sequence[str]) -> List[DependencySpecifier]:
        """
        Declared dependencies not recorded in the manifest, in declared order.

        Raises:
            MalformedSpecifierError: If any declaration does not parse
        """
        parsed = [DependencySpecifier.parse(dep) for dep in dependencies]
        result = []
        for dependency in parsed:
            installed = self.home.is_installed(dependency)
            logger.debug("Dependency check: %s installed=%s", dependency.raw, installed)
            if not installed:
                result.append(dependency)
        return result

    def sync(self, dependencies: Sequence[str], policy: InstallPolicy = InstallPolicy.AUTO) -> bool:
        """
        Make every declared dependency present in the shared home.

        Args:
            dependencies: Dependency specifiers in declared order
            policy: What to do about missing ones

        Returns:
            True if any install changed the manifest (restart required)

        Raises:
            DependenciesMissingError: Policy is MANUAL and something is missing
            ExternalToolError: An install failed; later dependencies are not attempted
            MalformedSpecifierError: A declaration does not parse
        """
        logger.debug(
            "Starting dependency sync: home=%s count=%d policy=%s",
            self.home.path,
            len(dependencies),
            policy.value,
        )

        self.home.ensure_home()

        missing = self.missing(dependencies)
        if not missing:
            logger.debug("All dependencies already installed")
            return False

        if policy is InstallPolicy.MANUAL:
            logger.debug("Manual install policy, not installing: %s", [d.raw for d in missing])
            raise DependenciesMissingError([d.raw for d in missing])

        if policy is InstallPolicy.ASK:
            # TODO: prompt for confirmation once an interactive collaborator exists
            logger.warning("installMode 'ask' is not interactive yet, installing automatically")

        logger.info("Installing %d missing dependenc%s: %s",
                    len(missing), "y" if len(missing) == 1 else "ies", ", ".join(d.raw for d in missing))

        any_changed = False
        started = time.monotonic()
        for dependency in missing:
            try:
                changed = self.installer.install(dependency)
            except ExternalToolError as e:
                raise ExternalToolError(
                    e.specifier,
                    e.stderr,
                    returncode=e.returncode,
                    message=f"Failed to install dependencies: {e}\n\nTry running: {REMEDIATION_COMMAND}",
                ) from e
            logger.debug("Install result: %s changed=%s", dependency.raw, changed)
            any_changed = any_changed or changed

        logger.debug("Install phase complete in %.2fs (changed=%s)", time.monotonic() - started, any_changed)
        if any_changed:
            logger.info("Dependencies installed successfully")
        return any_changed
