"""
Restart coordination.

Newly installed dependencies only become importable in a fresh
interpreter. When a sync changes the shared home, the CLI exits with
RESTART_EXIT_CODE and the ``forge`` wrapper re-runs it once with
FORGE_RESTARTED=1. A restarted process that would need yet another
restart is a protocol violation, never a loop.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from forgekit.domain.config import ForgeConfig, InstallPolicy
from forgekit.domain.errors import (
    REMEDIATION_COMMAND,
    OfflineDependenciesMissingError,
    ProtocolViolationError,
)
from forgekit.infrastructure.home.package_manager import PackageManager
from forgekit.infrastructure.home.shared_home import SharedHome
from forgekit.application.dependency_sync import DependencySynchronizer

logger = logging.getLogger(__name__)

RESTART_EXIT_CODE = 42

RESTARTED_ENV = "FORGE_RESTARTED"


class RestartDecision(Enum):
    """Outcome of coordinating a dependency sync."""
    CONTINUE = "continue"
    RESTART = "restart"


class RestartCoordinator:
    """
    Wraps DependencySynchronizer.sync in the single-restart protocol.

        sync() = False                      -> CONTINUE
        sync() = True,  is_restarted=False  -> RESTART
        sync() = True,  is_restarted=True   -> ProtocolViolationError
    """

    def __init__(self, synchronizer: DependencySynchronizer):
        self.synchronizer = synchronizer

    def coordinate(
        self,
        dependencies: Sequence[str],
        policy: InstallPolicy,
        is_restarted: bool,
    ) -> RestartDecision:
        """
        Sync and decide whether the process must restart.

        Raises:
            ProtocolViolationError: A restarted process still changed the home
            DependenciesMissingError, ExternalToolError, MalformedSpecifierError:
                Propagated from the synchronizer
        """
        needs_restart = self.synchronizer.sync(dependencies, policy)
        if not needs_restart:
            logger.debug("No restart needed")
            return RestartDecision.CONTINUE

        if is_restarted:
            raise ProtocolViolationError(
                "Dependencies were installed but still missing after restart\n\n"
                "This should not happen. Please report this as a bug.\n\n"
                "Suggestions:\n"
                f"  1. Check the shared home: {self.synchronizer.home.path}\n"
                f"  2. Try a manual install: {REMEDIATION_COMMAND}\n"
                "  3. Check the pip output above for errors"
            )

        logger.info("Dependencies changed, restart required")
        return RestartDecision.RESTART


def auto_install_dependencies(
    config: ForgeConfig,
    module_root: Path,
    is_restarted: bool,
    home: Optional[SharedHome] = None,
    installer: Optional[PackageManager] = None,
) -> bool:
    """
    Ensure declared dependencies are installed before commands load.

    Args:
        config: Merged project configuration
        module_root: The project's local module directory
        is_restarted: True when this process is already the post-install restart
        home: Shared home (defaults to $FORGE_HOME or ~/.forge)
        installer: Installer override

    Returns:
        True if the caller must terminate with RESTART_EXIT_CODE

    Raises:
        OfflineDependenciesMissingError: Offline with missing dependencies
        ProtocolViolationError: A restarted process would restart again
        DependenciesMissingError, ExternalToolError, MalformedSpecifierError:
            Propagated from the synchronizer
    """
    dependencies = list(config.dependencies)
    if not dependencies:
        logger.debug("No dependencies declared, skipping")
        return False

    policy = config.install_mode
    logger.debug(
        "Auto-install: module_root=%s policy=%s offline=%s restarted=%s count=%d",
        module_root,
        policy.value,
        config.offline,
        is_restarted,
        len(dependencies),
    )

    home = home or SharedHome()
    synchronizer = DependencySynchronizer(home, installer)

    if config.offline and policy in (InstallPolicy.AUTO, InstallPolicy.ASK):
        missing = synchronizer.missing(dependencies)
        if missing:
            raise OfflineDependenciesMissingError([d.raw for d in missing])
        logger.debug("All dependencies available in offline mode")
        return False

    decision = RestartCoordinator(synchronizer).coordinate(dependencies, policy, is_restarted)
    return decision is RestartDecision.RESTART
