"""
Shared home manager.

The shared home is one directory per user holding every installed
dependency and a manifest recording what was installed:

    <home>/
      manifest.json         {"name": "forge-home", "description": ..., "dependencies": {key: source}}
      installed-files/      pip --target tree, importable by command modules

Plain packages are keyed by canonical name, local paths and git
references by their declared specifier.

The manifest is the single source of truth for "is X installed". It is
created lazily, never deleted here, and only the installer writes to it.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from forgekit.domain.specifiers import DependencySpecifier, canonicalize_name
from forgekit.infrastructure.paths import forge_home_path

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
INSTALLED_FILES_DIR = "installed-files"

SpecLike = Union[str, DependencySpecifier]


def _as_specifier(spec: SpecLike) -> DependencySpecifier:
    if isinstance(spec, DependencySpecifier):
        return spec
    return DependencySpecifier.parse(spec)


def _initial_manifest() -> Dict[str, Any]:
    return {
        "name": "forge-home",
        "description": "Forge shared dependencies",
        "dependencies": {},
    }


def _dump_manifest(manifest: Dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2) + "\n"


class SharedHome:
    """
    Owns the shared home directory and its manifest.

    Filesystem errors while creating or writing propagate; only a corrupt
    manifest on read is tolerated (logged, treated as nothing installed).
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: Home directory; defaults to $FORGE_HOME or ~/.forge
        """
        self.path = Path(path) if path is not None else forge_home_path()

    @property
    def manifest_path(self) -> Path:
        return self.path / MANIFEST_FILE

    @property
    def installed_files_path(self) -> Path:
        return self.path / INSTALLED_FILES_DIR

    def ensure_home(self) -> None:
        """Create the home directory and an empty manifest if missing."""
        if not self.path.exists():
            logger.debug("Creating shared home: %s", self.path)
            self.path.mkdir(parents=True, exist_ok=True)

        if not self.manifest_path.exists():
            logger.debug("Initializing manifest: %s", self.manifest_path)
            self._write_manifest(_initial_manifest())

    def is_installed(self, spec: SpecLike) -> bool:
        """
        Whether a dependency is recorded in the manifest.

        Plain packages match by canonical name against the manifest keys.
        Local paths and git references match by their declared string.

        Raises:
            MalformedSpecifierError: If ``spec`` is a string that does not parse
        """
        dependency = _as_specifier(spec)
        entries = self._read_dependencies()
        if dependency.matches_by_source:
            return dependency.manifest_key in entries
        return dependency.name in {canonicalize_name(key) for key in entries if ":" not in key}

    def manifest_signature(self) -> str:
        """SHA-256 hex digest of the manifest bytes; '' when there is no manifest."""
        if not self.manifest_path.exists():
            return ""
        return hashlib.sha256(self.manifest_path.read_bytes()).hexdigest()

    def installed_entries(self) -> Dict[str, str]:
        """Manifest dependencies as ``{key: source}``."""
        return dict(self._read_dependencies())

    def record(self, spec: SpecLike) -> None:
        """
        Record ``key -> source`` for a successfully installed dependency.

        Leaves the file untouched when the same entry is already present,
        so the manifest signature only moves on a real change.
        """
        dependency = _as_specifier(spec)
        self.ensure_home()

        try:
            manifest = self._load_manifest()
        except ValueError as e:
            logger.warning("Rewriting unreadable manifest %s: %s", self.manifest_path, e)
            manifest = _initial_manifest()

        dependencies = manifest.setdefault("dependencies", {})
        if not isinstance(dependencies, dict):
            dependencies = manifest["dependencies"] = {}

        key = dependency.manifest_key
        if not dependency.matches_by_source:
            # drop differently-spelled keys for the same distribution
            for stale in [k for k in dependencies if ":" not in k and canonicalize_name(k) == key and k != key]:
                del dependencies[stale]

        if dependencies.get(key) == dependency.raw:
            logger.debug("Manifest already records %s", dependency.raw)
            return

        dependencies[key] = dependency.raw
        self._write_manifest(manifest)
        logger.debug("Recorded %s as %s", dependency.raw, key)

    def _load_manifest(self) -> Dict[str, Any]:
        """
        Read and parse the manifest.

        Raises:
            FileNotFoundError: If the manifest does not exist
            ValueError: If the manifest is not valid JSON or not a mapping
        """
        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self.manifest_path}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Manifest {self.manifest_path} is not a JSON object")
        return data

    def _read_dependencies(self) -> Dict[str, str]:
        if not self.manifest_path.exists():
            return {}
        try:
            manifest = self._load_manifest()
        except (OSError, ValueError) as e:
            logger.warning("Failed to read manifest: %s", e)
            return {}

        dependencies = manifest.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            logger.warning("Manifest dependencies are not a mapping: %s", self.manifest_path)
            return {}
        return {str(k): str(v) for k, v in dependencies.items()}

    def _write_manifest(self, manifest: Dict[str, Any]) -> None:
        """Write via a temp file in the same directory, then replace."""
        fd, tmp_name = tempfile.mkstemp(prefix=".manifest-", suffix=".tmp", dir=self.path)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(_dump_manifest(manifest))
            os.replace(tmp_name, self.manifest_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
