"""
Module resolver.

Maps a module specifier to the concrete Python file to load.

- Local specifiers (``./website``) resolve against the project's
  ``.forge/`` directory only.
- Package specifiers (``forge_standard/hello``) resolve against the
  shared home's installed-files tree only.

For a base path ``B`` the candidates are probed in a fixed order:
``B``, ``B.py``, ``B/__init__.py``. The first one that is a regular file
wins.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

from forgekit.domain.errors import REMEDIATION_COMMAND, NotFoundError
from forgekit.domain.specifiers import ModuleSpecifier
from forgekit.infrastructure.home.shared_home import SharedHome

logger = logging.getLogger(__name__)


def candidate_paths(base: Path) -> List[Path]:
    """Probe order for one base path."""
    return [base, Path(f"{base}.py"), base / "__init__.py"]


class ModuleResolver:
    """Resolves module specifiers for one shared home."""

    def __init__(self, home: Optional[SharedHome] = None):
        self.home = home or SharedHome()

    def resolve(self, spec: Union[str, ModuleSpecifier], module_root: Path) -> Path:
        """
        Resolve a module specifier to a file.

        Args:
            spec: Module specifier
            module_root: The project's local module directory

        Returns:
            Path of the file to load

        Raises:
            MalformedSpecifierError: If ``spec`` does not parse
            NotFoundError: If no candidate exists; the message lists every
                search location and every probed path
        """
        specifier = spec if isinstance(spec, ModuleSpecifier) else ModuleSpecifier.parse(spec)
        module_root = Path(module_root)
        logger.debug("Resolving module %s (module_root=%s)", specifier.raw, module_root)

        if specifier.is_local:
            return self._resolve_local(specifier, module_root)
        return self._resolve_package(specifier, module_root)

    def _resolve_local(self, specifier: ModuleSpecifier, module_root: Path) -> Path:
        base = Path(os.path.normpath(module_root / specifier.raw))
        found, attempted = self._probe(base)
        if found is not None:
            logger.debug("Module resolved (local): %s", found)
            return found

        raise NotFoundError(
            specifier.raw,
            f"Local module not found: {specifier.raw}\n"
            f"Searched in: {module_root}\n"
            "Attempted paths:\n  " + "\n  ".join(str(p) for p in attempted),
            searched=[module_root],
            attempted=attempted,
        )

    def _resolve_package(self, specifier: ModuleSpecifier, module_root: Path) -> Path:
        installed = self.home.installed_files_path
        base = installed.joinpath(*specifier.raw.split("/"))
        found, attempted = self._probe(base)
        if found is not None:
            logger.debug("Module resolved (package): %s", found)
            return found

        raise NotFoundError(
            specifier.raw,
            f"Module not found: {specifier.raw}\n"
            "Searched:\n"
            f"  - Local: {module_root}\n"
            f"  - Package: {base}\n"
            "Attempted paths:\n  " + "\n  ".join(str(p) for p in attempted) + "\n\n"
            "Suggestions:\n"
            "  1. Add it to the dependencies section of .forge/config.yml\n"
            f"  2. Run: {REMEDIATION_COMMAND}",
            searched=[module_root, installed],
            attempted=attempted,
        )

    @staticmethod
    def _probe(base: Path) -> Tuple[Optional[Path], List[Path]]:
        attempted = []
        for candidate in candidate_paths(base):
            attempted.append(candidate)
            logger.debug("Trying: %s", candidate)
            if candidate.is_file():
                return candidate, attempted
        return None, attempted


def resolve_module(spec: Union[str, ModuleSpecifier], module_root: Path, home: Optional[SharedHome] = None) -> Path:
    """Resolve ``spec`` against ``module_root`` and the shared home."""
    return ModuleResolver(home).resolve(spec, module_root)
