"""
Module Command CLI - shared-home dependencies and module resolution.

Wires the ``forge module`` subcommands.
"""

import logging

import typer

from .services import ModuleInstallCommand, ModuleListCommand, ModuleResolveCommand

logger = logging.getLogger(__name__)

module_app = typer.Typer(
    name="module",
    help="Manage shared-home dependencies and command modules",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def module_install(ctx: typer.Context):
    """
    Install every declared dependency into the shared home.

    Runs regardless of installMode. Newly installed modules become
    importable on the next invocation.
    """
    ModuleInstallCommand(ctx.obj).execute()


def module_list(ctx: typer.Context):
    """List declared dependencies and what the shared home has installed."""
    ModuleListCommand(ctx.obj).execute()


def module_resolve(
    ctx: typer.Context,
    specifier: str = typer.Argument(..., help="Module specifier, e.g. ./website or forge_standard/hello"),
):
    """Print the file a module specifier resolves to."""
    ModuleResolveCommand(ctx.obj).execute(specifier)


module_app.command("install")(module_install)
module_app.command("list")(module_list)
module_app.command("resolve")(module_resolve)
