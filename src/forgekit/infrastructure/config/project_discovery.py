"""
Project root discovery.

A project is any directory containing a ``.forge/`` module directory.
Sources, in priority order: the --root flag, the FORGE_PROJECT
environment variable, then walking up from the user's working directory.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from forgekit.domain.errors import ProjectNotFoundError
from forgekit.infrastructure.paths import FORGE_PROJECT_ENV, PROJECT_DIR_NAME, forge_home_path, user_working_dir

logger = logging.getLogger(__name__)


def discover_project(start_dir: Path, shared_home: Optional[Path] = None) -> Optional[Path]:
    """
    Walk up from ``start_dir``; return the first directory holding ``.forge/``.

    The shared home (``~/.forge`` by default) never counts as a project
    directory.
    """
    skip = shared_home.resolve() if shared_home is not None else None
    current = start_dir.resolve()
    while True:
        candidate = current / PROJECT_DIR_NAME
        if candidate.is_dir() and candidate.resolve() != skip:
            return current
        if current.parent == current:
            return None
        current = current.parent


def _reject_shared_home(path: Path, source: str, env: Optional[Mapping[str, str]]) -> Path:
    forge_dir = (path / PROJECT_DIR_NAME).resolve()
    if forge_dir == forge_home_path(env).resolve():
        raise ProjectNotFoundError(
            f"{source} points at {path}, but {forge_dir} is the shared home for installed dependencies, "
            "not a project module directory"
        )
    return path


def explicit_project_root(root: Optional[Path], env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Project root from the flag or FORGE_PROJECT.

    Raises:
        ProjectNotFoundError: If FORGE_PROJECT points at a directory
            without ``.forge/``, or either source would make the shared
            home the module directory
    """
    if root is not None:
        return _reject_shared_home(Path(root).expanduser().resolve(), "--root", env)

    env_path = (os.environ if env is None else env).get(FORGE_PROJECT_ENV)
    if env_path:
        path = Path(env_path).expanduser()
        if (path / PROJECT_DIR_NAME).is_dir():
            return _reject_shared_home(path.resolve(), FORGE_PROJECT_ENV, env)
        raise ProjectNotFoundError(f"{FORGE_PROJECT_ENV}={env_path} but {PROJECT_DIR_NAME}/ not found")

    return None


def find_project_root(
    root: Optional[Path] = None,
    start_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Explicit sources first, then discovery; None outside any project."""
    explicit = explicit_project_root(root, env)
    if explicit is not None:
        logger.debug("Using explicit project root: %s", explicit)
        return explicit

    start = start_dir or user_working_dir(env)
    found = discover_project(start, forge_home_path(env))
    if found is None:
        logger.debug("No %s directory found above %s", PROJECT_DIR_NAME, start)
    else:
        logger.debug("Discovered project root: %s", found)
    return found
