"""
JSON key-value state for a project.

- Project state: ``.forge/state.json`` (meant to be committed, shared by the team)
- User state: ``.forge/state.local.json`` (gitignored, per user)
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from forgekit.infrastructure.paths import PROJECT_DIR_NAME

logger = logging.getLogger(__name__)

PROJECT_STATE_FILE = "state.json"
USER_STATE_FILE = "state.local.json"


class StateManager:
    """Reads and writes the two state files of one project."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self.forge_dir = self.project_root / PROJECT_DIR_NAME

    def get_project(self, key: str, default: Any = None) -> Any:
        return self._read(PROJECT_STATE_FILE).get(key, default)

    def set_project(self, key: str, value: Any) -> None:
        self._update(PROJECT_STATE_FILE, key, value)

    def get_user(self, key: str, default: Any = None) -> Any:
        return self._read(USER_STATE_FILE).get(key, default)

    def set_user(self, key: str, value: Any) -> None:
        self._update(USER_STATE_FILE, key, value)

    def project_state(self) -> Dict[str, Any]:
        return self._read(PROJECT_STATE_FILE)

    def user_state(self) -> Dict[str, Any]:
        return self._read(USER_STATE_FILE)

    def _read(self, filename: str) -> Dict[str, Any]:
        path = self.forge_dir / filename
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: not a JSON object", path)
            return {}
        return data

    def _update(self, filename: str, key: str, value: Any) -> None:
        state = self._read(filename)
        state[key] = value
        self._write(filename, state)

    def _write(self, filename: str, data: Dict[str, Any]) -> None:
        self.forge_dir.mkdir(parents=True, exist_ok=True)
        path = self.forge_dir / filename
        fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}-", suffix=".tmp", dir=self.forge_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Wrote %s", path)
