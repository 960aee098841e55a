"""
forgekit - CLI command framework.

Discovers project-local and shared command modules, merges layered
configuration, binds the discovered commands to the CLI, and keeps the
shared dependency home in sync (restarting the process when new
dependencies were installed).

Usage:
    # CLI (recommended, restart-aware wrapper)
    forge <group> <command> [args]

    # Programmatic
    from forgekit.application.restart import auto_install_dependencies
    from forgekit.application.module_resolver import resolve_module
"""

__version__ = "0.1.0"
__author__ = "forgekit Team"

from forgekit.application.module_resolver import resolve_module
from forgekit.application.restart import RESTART_EXIT_CODE, auto_install_dependencies

__all__ = ["RESTART_EXIT_CODE", "auto_install_dependencies", "resolve_module", "__version__"]
