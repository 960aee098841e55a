"""
Restart wrapper behind the ``forge`` executable.

Runs the real CLI (``python -m forgekit``) as a child process. Exit code
42 means new dependencies were installed and the CLI has to be started
again so they become importable; the wrapper does that exactly once,
marking the second run with FORGE_RESTARTED=1. A second 42 is a
protocol violation and is reported as exit code 70.
"""

import logging
import os
import subprocess
import sys
from typing import Callable, List, Mapping, Optional, Sequence

from forgekit.application.restart import RESTART_EXIT_CODE, RESTARTED_ENV
from forgekit.domain.errors import PROTOCOL_VIOLATION_EXIT_CODE
from forgekit.infrastructure.paths import FORGE_USER_DIR_ENV

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


def cli_command(argv: Sequence[str]) -> List[str]:
    return [sys.executable, "-m", "forgekit", *argv]


def run(
    argv: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    runner: Optional[Runner] = None,
) -> int:
    """
    Run the CLI, restarting it at most once.

    Args:
        argv: CLI arguments (without program name)
        env: Base environment (defaults to os.environ)
        runner: ``subprocess.run``-compatible callable

    Returns:
        The exit code to terminate with
    """
    runner = runner or subprocess.run
    child_env = dict(os.environ if env is None else env)
    child_env.setdefault(FORGE_USER_DIR_ENV, os.getcwd())
    cmd = cli_command(argv)

    result = runner(cmd, env=child_env, check=False)
    if result.returncode != RESTART_EXIT_CODE:
        return result.returncode

    if child_env.get(RESTARTED_ENV) == "1":
        sys.stderr.write("ERROR: restart requested by a process that was already restarted\n")
        return PROTOCOL_VIOLATION_EXIT_CODE

    logger.debug("Dependencies changed, restarting: %s", " ".join(cmd))
    child_env[RESTARTED_ENV] = "1"
    result = runner(cmd, env=child_env, check=False)

    if result.returncode == RESTART_EXIT_CODE:
        sys.stderr.write(
            "ERROR: forge requested a second restart after installing dependencies\n"
            "This should not happen. Please report this as a bug.\n"
        )
        return PROTOCOL_VIOLATION_EXIT_CODE
    return result.returncode


def main() -> int:
    """Console-script entry point for ``forge``."""
    try:
        return run(sys.argv[1:])
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
