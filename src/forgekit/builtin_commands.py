"""
Built-in commands.

Registered like any other command module, at the top level.
"""

import logging
import os
import subprocess

from forgekit.domain.command import ForgeCommand

logger = logging.getLogger(__name__)

__forge_module__ = {
    "group": False,
    "description": "Built-in commands",
}


def _launch_shell(options, args, context):
    home = context.forge.home
    home.ensure_home()

    shell = os.environ.get("SHELL") or "/bin/sh"
    env = dict(os.environ, FORGE_HOME=str(home.path))

    logger.debug("Launching %s in %s", shell, home.path)
    result = subprocess.run([shell], cwd=str(home.path), env=env, check=False)
    return result.returncode


cd = ForgeCommand(
    description="Launch a shell in the forge home directory",
    execute=_launch_shell,
)
