"""
CLI Orchestrator - Main Entry Point

Runs one ``forge-cli`` invocation in four phases:

1. bootstrap: pick the global flags out of argv
2. logging, then project discovery and layered config
3. Forge host: auto-install dependencies (exit 42 on change), load
   command modules and bind them next to the built-in commands
4. parse argv with the full command tree and run the command
"""

import contextlib
import logging
import os
import shlex
import sys
from typing import List, Mapping, Optional, Sequence

import click
import typer

from forgekit import __version__
from forgekit.application.container import Container
from forgekit.application.restart import RESTART_EXIT_CODE
from forgekit.infrastructure.logging_config import resolve_log_level, setup_logging
from forgekit.interface.cli.bootstrap import bootstrap, wants_version
from forgekit.interface.cli.commands.module import module_app
from forgekit.interface.cli.commands.state import state_app
from forgekit.interface.cli.errors import handle_error

logger = logging.getLogger(__name__)

# Subcommands that must work even when declared modules cannot load yet
MANAGEMENT_GROUPS = ("module",)

app = typer.Typer(
    name="forge",
    help="Project command framework with shared, auto-installed modules",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(module_app, name="module")
app.add_typer(state_app, name="state")


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Project directory (containing .forge/)."),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug output (full tracebacks on error)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings and errors."),
    silent: bool = typer.Option(False, "--silent", "-s", help="No log output."),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="silent, trace, debug, info, warn, error or fatal."
    ),
    log_format: str = typer.Option("pretty", "--log-format", help="pretty or json."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file."),
    color: Optional[str] = typer.Option(None, "--color", help="auto (default), always, never, on, off, true, false."),
    version: bool = typer.Option(False, "--version", "-V", help="Show the version and exit."),
):
    """
    Forge - project command framework.

    Commands come from the modules listed in [bold].forge/config.yml[/bold];
    their dependencies are installed into the shared forge home on demand.
    """
    # Global options were already applied by the bootstrap pass.
    if ctx.invoked_subcommand is None:
        typer.echo("ERROR: subcommand required", err=True)
        typer.echo("", err=True)
        with contextlib.redirect_stdout(sys.stderr):
            help_text = ctx.get_help()
        if help_text:
            typer.echo(help_text, err=True)
        raise typer.Exit(1)


def _first_command(rest: Sequence[str]) -> Optional[str]:
    for token in rest:
        if not token.startswith("-"):
            return token
    return None


def apply_default_command(rest: Sequence[str], default_command: Optional[str]) -> List[str]:
    """Use ``defaultCommand`` when argv names no command at all."""
    if default_command and not rest:
        logger.debug("Using default command: %s", default_command)
        return shlex.split(default_command)
    return list(rest)


def build_cli(container: Container, load_modules: bool = True) -> Optional[click.Group]:
    """
    Build the click command tree for this invocation.

    Returns:
        The root group, or None if dependencies changed and the process
        must exit with RESTART_EXIT_CODE
    """
    group = typer.main.get_command(app)
    if not load_modules:
        return group

    forge = container.forge
    if forge.initialize():
        return None
    forge.register_commands(group)
    return group


def main(argv: Optional[Sequence[str]] = None, env: Optional[Mapping[str, str]] = None) -> int:
    """
    Main entry point for the forge CLI.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])
        env: Environment mapping (defaults to os.environ)

    Returns:
        int: Exit code (RESTART_EXIT_CODE when a restart is required)
    """
    args = list(sys.argv[1:] if argv is None else argv)
    env = os.environ if env is None else env

    if wants_version(args):
        typer.echo(f"forge version {__version__}")
        return 0

    debug = "--debug" in args or "-d" in args
    try:
        options, rest = bootstrap(args, env)
        debug = options.debug

        setup_logging(resolve_log_level(options), options.log_format, options.color, options.log_file)
        logger.debug("Args: %s", args)
        logger.debug("Bootstrap options: %s", options)

        container = Container(options, env)
        resolved = container.resolved_config
        logger.debug("Project root: %s", resolved.project_root)

        # global options were consumed by bootstrap
        args = apply_default_command(rest, resolved.config.default_command)

        management = _first_command(args) in MANAGEMENT_GROUPS
        group = build_cli(container, load_modules=not management)
        if group is None:
            logger.debug("Exiting with restart code %d", RESTART_EXIT_CODE)
            return RESTART_EXIT_CODE

        rv = group.main(args=args, prog_name="forge", standalone_mode=False, obj=container)
        return rv if isinstance(rv, int) and not isinstance(rv, bool) else 0
    except Exception as e:  # pylint: disable=broad-except
        return handle_error(e, debug)
