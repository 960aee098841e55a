"""
Dependency installer.

Materializes one dependency specifier into the shared home by running
pip with ``--target`` pointed at the installed-files tree, then records
the dependency in the manifest. Whether anything changed is judged by
comparing the manifest signature before and after.
"""

import logging
import subprocess
import sys
from typing import Callable, List, Optional, Sequence

from forgekit.domain.errors import ExternalToolError
from forgekit.domain.specifiers import DependencySpecifier
from forgekit.infrastructure.home.shared_home import SharedHome, SpecLike

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


def default_pip_command() -> List[str]:
    """pip of the running interpreter."""
    return [sys.executable, "-m", "pip"]


class PackageManager:
    """
    Installs dependencies into a SharedHome.

    The pip invocation prefix and the subprocess runner can be replaced,
    which is how tests avoid spawning pip.
    """

    def __init__(
        self,
        home: SharedHome,
        command: Optional[Sequence[str]] = None,
        runner: Optional[Runner] = None,
    ):
        """
        Args:
            home: Shared home to install into
            command: Executable prefix, e.g. ``["/usr/bin/python3", "-m", "pip"]``
            runner: ``subprocess.run``-compatible callable
        """
        self.home = home
        self.command = list(command) if command is not None else default_pip_command()
        self.runner = runner or subprocess.run

    def build_command(self, dependency: DependencySpecifier) -> List[str]:
        return [
            *self.command,
            "install",
            "--disable-pip-version-check",
            "--no-input",
            "--upgrade",
            "--target",
            str(self.home.installed_files_path),
            dependency.package_arg,
        ]

    def install(self, spec: SpecLike) -> bool:
        """
        Install one dependency.

        The tool always runs; re-installing an identical specifier leaves
        the manifest byte-identical and returns False.

        Returns:
            True if the manifest changed

        Raises:
            MalformedSpecifierError: If ``spec`` does not parse
            ExternalToolError: If pip cannot be started or exits non-zero
        """
        dependency = spec if isinstance(spec, DependencySpecifier) else DependencySpecifier.parse(spec)

        self.home.ensure_home()
        before = self.home.manifest_signature()
        self.home.installed_files_path.mkdir(parents=True, exist_ok=True)

        cmd = self.build_command(dependency)
        logger.debug("Installing %s: %s", dependency.raw, " ".join(cmd))

        try:
            result = self.runner(
                cmd,
                cwd=str(self.home.path),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ExternalToolError(
                dependency.raw,
                str(e),
                message=f"Failed to install {dependency.raw}: could not run {cmd[0]}: {e}",
            ) from e

        if result.returncode != 0:
            logger.debug("pip stdout for %s:\n%s", dependency.raw, result.stdout)
            raise ExternalToolError(dependency.raw, result.stderr or "", returncode=result.returncode)

        self.home.record(dependency)
        changed = before != self.home.manifest_signature()

        logger.debug("Installed %s (changed=%s)", dependency.raw, changed)
        return changed
