"""
State Command CLI - project and user key-value state.

Wires the ``forge state`` subcommands.
"""

import typer

from .services import StateGetCommand, StateListCommand, StateSetCommand

state_app = typer.Typer(
    name="state",
    help="Read and write project / user state",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

USER_OPTION_HELP = "Use user state (state.local.json) instead of project state."


def state_get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="State key"),
    user: bool = typer.Option(False, "--user", "-u", help=USER_OPTION_HELP),
):
    """Print a state value."""
    StateGetCommand(ctx.obj).execute(key, user=user)


def state_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="State key"),
    value: str = typer.Argument(..., help="Value (parsed as JSON when possible)"),
    user: bool = typer.Option(False, "--user", "-u", help=USER_OPTION_HELP),
):
    """Store a state value."""
    StateSetCommand(ctx.obj).execute(key, value, user=user)


def state_list(
    ctx: typer.Context,
    user: bool = typer.Option(False, "--user", "-u", help=USER_OPTION_HELP),
):
    """Show all state values."""
    StateListCommand(ctx.obj).execute(user=user)


state_app.command("get")(state_get)
state_app.command("set")(state_set)
state_app.command("list")(state_list)
