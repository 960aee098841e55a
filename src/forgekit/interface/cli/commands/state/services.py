"""
State command logic.

Reads and writes ``.forge/state.json`` (project) or
``.forge/state.local.json`` (user, with --user).
"""

import json
import logging
from typing import Any

import typer

from forgekit.application.container import Container
from forgekit.interface.cli.formatters.result_formatters import StateFormatter

logger = logging.getLogger(__name__)


def parse_value(raw: str) -> Any:
    """JSON if it parses, otherwise the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class StateGetCommand:
    """Prints one state value."""

    def __init__(self, container: Container):
        self.container = container
        self.formatter = StateFormatter()

    def execute(self, key: str, user: bool = False) -> Any:
        state = self.container.state_manager
        value = state.get_user(key) if user else state.get_project(key)
        if value is None:
            logger.error("State key not found: %s", key)
            raise typer.Exit(1)
        self.formatter.display_value(value)
        return value


class StateSetCommand:
    """Stores one state value."""

    def __init__(self, container: Container):
        self.container = container

    def execute(self, key: str, raw_value: str, user: bool = False) -> None:
        state = self.container.state_manager
        value = parse_value(raw_value)
        if user:
            state.set_user(key, value)
        else:
            state.set_project(key, value)
        logger.info("Set %s state: %s", "user" if user else "project", key)


class StateListCommand:
    """Shows every key of one state file."""

    def __init__(self, container: Container):
        self.container = container
        self.formatter = StateFormatter()

    def execute(self, user: bool = False) -> None:
        state = self.container.state_manager
        if user:
            self.formatter.display_state("User state", state.user_state())
        else:
            self.formatter.display_state("Project state", state.project_state())
