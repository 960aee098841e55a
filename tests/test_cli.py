"""
End-to-end tests for the forge CLI, run in-process through main().

Each test gets its own project, shared home and user config directory;
pip is replaced by a FakeRunner.
"""

import json
import subprocess
import sys
import textwrap

import pytest

from forgekit import __version__
from forgekit.interface.cli import main

GREET_MODULE = """
    from forgekit.domain.command import ForgeCommand


    def _hello(options, args, context):
        greeting = context.settings.get("greeting", "Hello")
        print(f"{greeting} {' '.join(args) or 'world'}")
        return 0


    def _fail(options, args, context):
        return 3


    hello = ForgeCommand(description="Say hello", execute=_hello)
    fail = ForgeCommand(description="Exit with 3", execute=_fail)
"""

STANDARD_MODULE = """
    from forgekit.domain.command import ForgeCommand

    __forge_module__ = {"group": "std", "description": "Standard commands"}

    ping = ForgeCommand(description="Ping", execute=lambda options, args, context: print("pong"))
"""


class CliHarness:
    """One isolated project plus the environment main() runs with."""

    def __init__(self, tmp_path):
        self.root = tmp_path / "proj"
        self.forge_dir = self.root / ".forge"
        self.forge_dir.mkdir(parents=True)
        self.home = tmp_path / "forge-home"
        self.env = {
            "FORGE_HOME": str(self.home),
            "FORGE_USER_DIR": str(self.root),
            "XDG_CONFIG_HOME": str(tmp_path / "xdg"),
        }

    def config(self, **values):
        (self.forge_dir / "config.json").write_text(json.dumps(values))

    def module(self, name, source):
        path = self.forge_dir / f"{name}.py"
        path.write_text(textwrap.dedent(source))
        return path

    def run(self, *argv, **env):
        return main(list(argv), {**self.env, **env})


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    return CliHarness(tmp_path)


@pytest.fixture
def pip(monkeypatch, make_runner):
    runner = make_runner(files={"forge_standard/__init__.py": textwrap.dedent(STANDARD_MODULE)})
    monkeypatch.setattr(subprocess, "run", runner)
    return runner


class TestGlobalBehaviour:
    """Version, help and argument errors."""

    def test_version(self, cli, capsys):
        assert cli.run("--version") == 0
        assert capsys.readouterr().out.strip() == f"forge version {__version__}"

    def test_subcommand_required(self, cli, capsys):
        assert cli.run() == 1
        assert "ERROR: subcommand required" in capsys.readouterr().err

    def test_unknown_command(self, cli, capsys):
        assert cli.run("nope") == 2
        err = capsys.readouterr().err
        assert "ERROR:" in err
        assert "nope" in err
        assert "Try 'forge --help'" in err

    def test_invalid_log_level(self, cli, capsys):
        assert cli.run("--log-level", "loud", "state", "list") == 2
        assert "--log-level" in capsys.readouterr().err

    def test_invalid_color(self, cli, capsys):
        assert cli.run("--color", "purple", "state", "list") == 2
        assert "--color" in capsys.readouterr().err

    def test_invalid_config(self, cli, capsys):
        (cli.forge_dir / "config.yml").write_text("modules: [unclosed\n")
        assert cli.run("state", "list") == 1
        assert "Invalid config file" in capsys.readouterr().err

    def test_cd_launches_shell_in_home(self, cli, pip):
        assert cli.run("cd") == 0
        assert pip.kwargs[-1]["cwd"] == str(cli.home)
        assert pip.kwargs[-1]["env"]["FORGE_HOME"] == str(cli.home)
        assert (cli.home / "manifest.json").is_file()

    def test_help_lists_module_commands(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])

        assert cli.run("--help") == 0
        assert "greet" in capsys.readouterr().out


class TestProjectCommands:
    """Commands loaded from configured modules."""

    def test_runs_local_module_command(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])

        assert cli.run("greet", "hello", "Ada") == 0
        assert "Hello Ada" in capsys.readouterr().out

    def test_command_settings(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"], settings={"greet.hello": {"greeting": "Hi"}})

        assert cli.run("greet", "hello", "Ada") == 0
        assert "Hi Ada" in capsys.readouterr().out

    def test_global_options_after_command(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])

        assert cli.run("greet", "hello", "--quiet", "Ada") == 0
        assert "Hello Ada" in capsys.readouterr().out

    def test_version_flag_passed_to_command(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])

        assert cli.run("greet", "hello", "-V") == 0
        out = capsys.readouterr().out
        assert "Hello -V" in out
        assert "forge version" not in out

    def test_command_exit_code(self, cli):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])
        assert cli.run("greet", "fail") == 3

    def test_default_command(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"], defaultCommand="greet hello Default")

        assert cli.run() == 0
        assert "Hello Default" in capsys.readouterr().out

    def test_missing_local_module(self, cli, capsys):
        cli.config(modules=["./missing"])

        assert cli.run("greet", "hello") == 1
        err = capsys.readouterr().err
        assert "Local module not found: ./missing" in err
        assert str(cli.forge_dir) in err

    def test_discovered_from_subdirectory(self, cli, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(modules=["./greet"])
        nested = cli.root / "src" / "app"
        nested.mkdir(parents=True)

        assert cli.run("greet", "hello", FORGE_USER_DIR=str(nested)) == 0
        assert "Hello world" in capsys.readouterr().out


class TestDependencies:
    """Auto-install and the restart exit code."""

    def test_restart_then_run(self, cli, pip, capsys):
        cli.config(dependencies=["forge-standard"], modules=["forge_standard"])

        assert cli.run("std", "ping") == 42
        assert pip.installed_args == ["forge-standard"]

        assert cli.run("std", "ping", FORGE_RESTARTED="1") == 0
        assert "pong" in capsys.readouterr().out
        assert len(pip.calls) == 1

    def test_manual_policy_missing(self, cli, pip, capsys):
        cli.module("greet", GREET_MODULE)
        cli.config(dependencies=["left-pad"], installMode="manual", modules=["./greet"])

        assert cli.run("greet", "hello") == 1
        err = capsys.readouterr().err
        assert "Missing dependencies: left-pad" in err
        assert "forge module install" in err
        assert pip.calls == []
        assert not (cli.home / "installed-files").exists()

    def test_restarted_process_installing_again_is_fatal(self, cli, pip, capsys):
        cli.config(dependencies=["left-pad"])

        assert cli.run("state", "list", FORGE_RESTARTED="1") == 70
        assert "still missing after restart" in capsys.readouterr().err

    def test_install_failure(self, cli, monkeypatch, make_runner, capsys):
        monkeypatch.setattr(subprocess, "run", make_runner(returncode=1, stderr="ERROR: no such package"))
        cli.config(dependencies=["left-pad"])

        assert cli.run("state", "list") == 1
        err = capsys.readouterr().err
        assert "Failed to install dependencies" in err
        assert "ERROR: no such package" in err

    def test_offline_missing(self, cli, pip, capsys):
        cli.config(dependencies=["left-pad"], offline=True)

        assert cli.run("state", "list") == 1
        assert "Offline mode is enabled" in capsys.readouterr().err
        assert pip.calls == []


class TestModuleCommands:
    """The built-in ``forge module`` group."""

    def test_install_ignores_manual_policy(self, cli, pip, capsys):
        cli.config(dependencies=["left-pad"], installMode="manual")

        assert cli.run("module", "install") == 0
        assert pip.installed_args == ["left-pad"]
        assert "Dependencies installed" in capsys.readouterr().out

    def test_install_works_while_modules_are_missing(self, cli, pip):
        cli.config(dependencies=["forge-standard"], modules=["forge_standard"], installMode="manual")

        assert cli.run("module", "install") == 0
        assert cli.run("std", "ping") == 0

    def test_list(self, cli, pip, capsys):
        cli.config(dependencies=["left-pad", "file:../tools"], installMode="manual")

        assert cli.run("module", "list") == 0
        out = capsys.readouterr().out
        assert "left-pad" in out
        assert "missing" in out

    def test_resolve(self, cli, capsys):
        path = cli.module("greet", GREET_MODULE)

        assert cli.run("module", "resolve", "./greet") == 0
        assert str(path) in capsys.readouterr().out

    def test_resolve_not_found(self, cli, capsys):
        assert cli.run("module", "resolve", "forge_standard/hello") == 1
        err = capsys.readouterr().err
        assert "Module not found: forge_standard/hello" in err
        assert "forge module install" in err


class TestStateCommands:
    """The built-in ``forge state`` group."""

    def test_set_and_get(self, cli, capsys):
        assert cli.run("state", "set", "release", '{"version": "1.2.0"}') == 0
        assert cli.run("state", "get", "release") == 0

        assert '{"version": "1.2.0"}' in capsys.readouterr().out
        saved = json.loads((cli.forge_dir / "state.json").read_text())
        assert saved == {"release": {"version": "1.2.0"}}

    def test_user_state(self, cli):
        assert cli.run("state", "set", "--user", "editor", "vim") == 0
        saved = json.loads((cli.forge_dir / "state.local.json").read_text())
        assert saved == {"editor": "vim"}

    def test_get_missing_key(self, cli):
        assert cli.run("state", "get", "nope") == 1

    def test_root_at_shared_home_parent(self, cli, tmp_path, capsys):
        user_home = tmp_path / "user"
        (user_home / ".forge").mkdir(parents=True)

        assert cli.run("--root", str(user_home), "state", "list", FORGE_HOME=str(user_home / ".forge")) == 1
        assert "shared home" in capsys.readouterr().err

    def test_outside_project(self, cli, tmp_path, capsys):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()

        assert cli.run("state", "list", FORGE_USER_DIR=str(elsewhere)) == 1
        assert "Not inside a forge project" in capsys.readouterr().err
