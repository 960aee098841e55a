"""
CLI bootstrap.

Global options have to be known before the real parser can be built:
the project root decides which config loads, the config decides which
command modules exist. This module does a permissive first pass over
argv that only picks out the global flags and ignores everything else.
"""

import argparse
import os
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

import click

from forgekit.application.restart import RESTARTED_ENV
from forgekit.domain.config import BootstrapOptions, ColorMode, LogFormat
from forgekit.infrastructure.logging_config import LEVEL_NAMES


VERSION_FLAGS = ("--version", "-V")
VALUE_OPTIONS = ("-r", "--root", "--log-level", "--log-format", "--log-file", "--color")

LOG_LEVEL_CHOICES = ("silent", "trace", "debug", "info", "warn", "error", "fatal")
LOG_FORMAT_CHOICES = ("json", "pretty")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="forge", add_help=False, allow_abbrev=False, exit_on_error=False)
    parser.add_argument("-r", "--root", type=str)
    parser.add_argument("-d", "--debug", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("-s", "--silent", action="store_true")
    parser.add_argument("--log-level", type=str)
    parser.add_argument("--log-format", type=str, default="pretty")
    parser.add_argument("--log-file", type=str)
    parser.add_argument("--color", type=str)
    return parser


def wants_version(argv: Sequence[str]) -> bool:
    """
    --version / -V short-circuits before any config is read.

    Only tokens ahead of the first command count; after it they belong
    to the command.
    """
    tokens = iter(argv)
    for arg in tokens:
        if arg in VERSION_FLAGS:
            return True
        if arg in VALUE_OPTIONS:
            next(tokens, None)
        elif not arg.startswith("-"):
            return False
    return False


def bootstrap(argv: Sequence[str], env: Optional[Mapping[str, str]] = None) -> Tuple[BootstrapOptions, List[str]]:
    """
    Extract global options from ``argv``.

    Returns:
        The options and the tokens that were not global options

    Raises:
        click.UsageError: For an invalid --log-level, --log-format or --color value
    """
    env = os.environ if env is None else env
    try:
        args, rest = _parser().parse_known_args(list(argv))
    except argparse.ArgumentError as e:
        raise click.UsageError(str(e)) from e

    if args.log_level is not None and args.log_level.lower() not in LEVEL_NAMES:
        raise click.UsageError(
            f"Invalid value for '--log-level': '{args.log_level}' is not one of {', '.join(LOG_LEVEL_CHOICES)}."
        )
    if args.log_format.lower() not in LOG_FORMAT_CHOICES:
        raise click.UsageError(
            f"Invalid value for '--log-format': '{args.log_format}' is not one of {', '.join(LOG_FORMAT_CHOICES)}."
        )

    try:
        color = ColorMode.from_flag(args.color)
    except ValueError as e:
        raise click.UsageError(f"Invalid value for '--color': {e}.") from e
    if env.get("NO_COLOR"):
        color = ColorMode.NEVER

    options = BootstrapOptions(
        root=Path(args.root) if args.root else None,
        debug=args.debug,
        quiet=args.quiet,
        silent=args.silent,
        log_level=args.log_level,
        log_format=LogFormat(args.log_format.lower()),
        log_file=args.log_file,
        color=color,
        is_restarted=env.get(RESTARTED_ENV) == "1",
    )
    return options, rest
