"""
Shared fixtures for forgekit tests.

Nothing here spawns pip: installs go through FakeRunner, which records
each command and simulates what pip --target would leave behind.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from forgekit.infrastructure.home.package_manager import PackageManager
from forgekit.infrastructure.home.shared_home import SharedHome
from forgekit.infrastructure.logging_config import ColoredFormatter, JsonFormatter, PlainFormatter


class FakeRunner:
    """
    ``subprocess.run`` stand-in for the installer.

    Args:
        returncode: Exit code every call returns
        stderr: stderr every call returns
        files: ``{relative path: content}`` written under the ``--target``
            directory on a successful call
    """

    def __init__(self, returncode: int = 0, stderr: str = "", files: Optional[Dict[str, str]] = None):
        self.returncode = returncode
        self.stderr = stderr
        self.files = files or {}
        self.calls: List[List[str]] = []
        self.kwargs: List[dict] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        if self.returncode == 0 and "--target" in cmd:
            target = Path(cmd[cmd.index("--target") + 1])
            for rel, content in self.files.items():
                path = target / rel
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=self.stderr)

    @property
    def installed_args(self) -> List[str]:
        """The package argument of every call, in order."""
        return [call[-1] for call in self.calls]


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers setup_logging installs on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, (ColoredFormatter, JsonFormatter, PlainFormatter)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def home(tmp_path) -> SharedHome:
    return SharedHome(tmp_path / "home")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def installer(home, runner) -> PackageManager:
    return PackageManager(home, command=["pip"], runner=runner)


@pytest.fixture
def project(tmp_path) -> Path:
    """A project directory with an empty .forge/."""
    root = tmp_path / "proj"
    (root / ".forge").mkdir(parents=True)
    return root


@pytest.fixture
def make_runner():
    """Factory for runners with a custom exit code, stderr or installed files."""
    return FakeRunner
