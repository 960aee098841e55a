"""
Tests for the pip-backed dependency installer.
"""

import sys

import pytest

from forgekit.domain.errors import ExternalToolError, MalformedSpecifierError
from forgekit.infrastructure.home.package_manager import PackageManager, default_pip_command


class TestBuildCommand:
    """Test cases for the pip invocation."""

    def test_default_command_uses_running_interpreter(self):
        assert default_pip_command() == [sys.executable, "-m", "pip"]

    def test_installs_into_target(self, installer, runner, home):
        installer.install("requests@>=2.31")

        cmd = runner.calls[0]
        assert cmd[:2] == ["pip", "install"]
        assert cmd[cmd.index("--target") + 1] == str(home.installed_files_path)
        assert "--upgrade" in cmd
        assert cmd[-1] == "requests>=2.31"

    def test_runs_inside_home(self, installer, runner, home):
        installer.install("file:../forge-aws")

        assert runner.kwargs[0]["cwd"] == str(home.path)
        assert runner.kwargs[0]["check"] is False
        assert runner.calls[0][-1] == "../forge-aws"


class TestInstall:
    """Test cases for PackageManager.install."""

    def test_first_install_changes_then_idempotent(self, installer, runner):
        assert installer.install("left-pad") is True
        assert installer.install("left-pad") is False
        # the tool still ran both times
        assert len(runner.calls) == 2

    def test_records_manifest_entry(self, installer, home):
        installer.install("github:acme/forge-tools#v1")
        assert home.installed_entries() == {"github:acme/forge-tools#v1": "github:acme/forge-tools#v1"}

    def test_creates_installed_files_tree(self, installer, home):
        installer.install("left-pad")
        assert home.installed_files_path.is_dir()

    def test_failure_surfaces_stderr(self, home, make_runner):
        runner = make_runner(returncode=1, stderr="ERROR: No matching distribution found for nope\n")
        installer = PackageManager(home, command=["pip"], runner=runner)

        with pytest.raises(ExternalToolError) as exc_info:
            installer.install("nope")

        err = exc_info.value
        assert err.specifier == "nope"
        assert err.returncode == 1
        assert "No matching distribution found for nope" in str(err)
        assert "nope" in str(err)

    def test_failure_does_not_record(self, home, make_runner):
        installer = PackageManager(home, command=["pip"], runner=make_runner(returncode=1))

        with pytest.raises(ExternalToolError):
            installer.install("nope")

        assert home.installed_entries() == {}

    def test_missing_executable(self, home):
        def runner(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        installer = PackageManager(home, command=["no-such-pip"], runner=runner)

        with pytest.raises(ExternalToolError) as exc_info:
            installer.install("left-pad")

        assert "could not run no-such-pip" in str(exc_info.value)

    def test_malformed_specifier_runs_nothing(self, installer, runner):
        with pytest.raises(MalformedSpecifierError):
            installer.install("./local")
        assert runner.calls == []
