"""
Command module shapes.

A command module is a Python file listed under ``modules`` in the project
config. Every module-level object that looks like a command (a string
``description`` and a callable ``execute``) becomes a CLI subcommand; the
attribute name is the command name. An optional ``__forge_module__``
mapping controls grouping:

    __forge_module__ = {"group": "website", "description": "Website tools"}

    publish = ForgeCommand(
        description="Publish the site",
        execute=lambda options, args, context: ...,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import click

MODULE_METADATA_ATTR = "__forge_module__"

ExecuteFn = Callable[[Dict[str, Any], List[str], "ForgeContext"], Any]


@dataclass
class ForgeCommand:
    """
    Convenience container for a command export.

    Attributes:
        description: One-line help text
        execute: Called as ``execute(options, args, context)``
        usage: Optional usage suffix shown in help
        define_command: Optional hook receiving the click command so it
            can append its own options and arguments
    """
    description: str
    execute: ExecuteFn
    usage: Optional[str] = None
    define_command: Optional[Callable[[click.Command], None]] = None


@dataclass(frozen=True)
class ModuleMetadata:
    """Grouping information for one loaded module."""
    group: Union[str, bool]
    description: Optional[str] = None

    @property
    def is_top_level(self) -> bool:
        return self.group is False

    @classmethod
    def for_module(cls, module: Any, path: Path) -> ModuleMetadata:
        """
        Read ``__forge_module__`` from a loaded module.

        The default group is the file stem, or the package directory name
        for an ``__init__.py``.
        """
        default_group = path.parent.name if path.name == "__init__.py" else path.stem
        raw = getattr(module, MODULE_METADATA_ATTR, None)
        if not isinstance(raw, dict):
            return cls(group=default_group)

        group = raw.get("group", default_group)
        if group is not False and not (isinstance(group, str) and group.strip()):
            group = default_group
        description = raw.get("description")
        return cls(group=group, description=description if isinstance(description, str) else None)


@dataclass
class ForgeContext:
    """
    Everything a command needs at execution time.

    ``forge`` is the host instance; ``settings`` is the command's own
    block from ``settings["group.command"]``.
    """
    forge: Any
    config: Any
    state: Any
    group_name: Optional[str]
    command_name: str
    settings: Dict[str, Any] = field(default_factory=dict)
    log_level: str = "info"
    log_format: str = "pretty"
    color: str = "auto"


def is_forge_command(value: Any) -> bool:
    """Capability check: a string description and a callable execute."""
    if isinstance(value, type):
        return False
    description = getattr(value, "description", None)
    execute = getattr(value, "execute", None)
    return isinstance(description, str) and callable(execute)
