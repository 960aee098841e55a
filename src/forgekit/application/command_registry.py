"""
Command registry.

Loads resolved module files, extracts their command exports and binds
them to the click group behind the typer app.

Each command becomes a click command whose callback collects parsed
options and positional arguments and calls
``execute(options, args, context)``.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional

import click

from forgekit.domain.command import ForgeContext, ModuleMetadata, is_forge_command
from forgekit.domain.errors import CommandLoadError
from forgekit.domain.specifiers import ModuleSpecifier
from forgekit.application.module_resolver import ModuleResolver

logger = logging.getLogger(__name__)

ContextFactory = Callable[[Optional[str], str], ForgeContext]

_FREE_ARGS_SETTINGS = {"ignore_unknown_options": True, "allow_extra_args": False}


@dataclass
class LoadedModule:
    """One module file and the commands it exports."""
    specifier: str
    path: Path
    metadata: ModuleMetadata
    commands: Dict[str, Any] = field(default_factory=dict)


class ForgeClickCommand(click.Command):
    """click command that honours a command's own ``usage`` string."""

    def __init__(self, *args: Any, forge_usage: Optional[str] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.forge_usage = forge_usage

    def format_usage(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        if self.forge_usage:
            formatter.write_usage(ctx.command_path, self.forge_usage)
        else:
            super().format_usage(ctx, formatter)


def module_name_for(path: Path) -> str:
    """Unique, importable module name for a command file."""
    stem = path.parent.name if path.name == "__init__.py" else path.stem
    safe = re.sub(r"\W", "_", stem) or "module"
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:8]
    return f"forge_modules.{safe}_{digest}"


def load_module_file(path: Path, extra_paths: Optional[List[Path]] = None) -> ModuleType:
    """
    Import a Python file as a module.

    Args:
        path: File to import
        extra_paths: Directories put first on ``sys.path`` beforehand, so
            the module can import installed dependencies

    Raises:
        CommandLoadError: If the file cannot be imported
    """
    for extra in extra_paths or []:
        entry = str(extra)
        if entry not in sys.path:
            sys.path.insert(0, entry)

    name = module_name_for(path)
    if name in sys.modules:
        return sys.modules[name]

    search_locations = [str(path.parent)] if path.name == "__init__.py" else None
    spec = importlib.util.spec_from_file_location(name, path, submodule_search_locations=search_locations)
    if spec is None or spec.loader is None:
        raise CommandLoadError(f"Failed to load module {path}: cannot create module spec")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[name]
        raise CommandLoadError(f"Failed to load module {path}: {type(e).__name__}: {e}") from e

    logger.debug("Loaded module %s from %s", name, path)
    return module


def discover_commands(module: ModuleType) -> Dict[str, Any]:
    """Public module attributes that pass the command capability check, in definition order."""
    commands = {}
    for attr, value in vars(module).items():
        if attr.startswith("_"):
            continue
        if is_forge_command(value):
            commands[attr] = value
    return commands


def build_click_command(name: str, command: Any, invoke: Callable[[Dict[str, Any], List[str]], Any]) -> click.Command:
    """
    Wrap a forge command in a click command.

    Commands with ``define_command`` add their own parameters; all others
    take free positional arguments.
    """
    define = getattr(command, "define_command", None)
    usage = getattr(command, "usage", None)

    def callback(**kwargs: Any) -> Any:
        options: Dict[str, Any] = {}
        args: List[str] = []
        for param in cmd.params:
            value = kwargs.get(param.name)
            if isinstance(param, click.Argument):
                if isinstance(value, (list, tuple)):
                    args.extend(str(v) for v in value)
                elif value is not None:
                    args.append(str(value))
            else:
                options[param.name] = value
        return invoke(options, args)

    cmd = ForgeClickCommand(
        name=name,
        callback=callback,
        help=command.description,
        short_help=command.description,
        forge_usage=usage,
        context_settings={} if callable(define) else dict(_FREE_ARGS_SETTINGS),
    )

    if callable(define):
        define(cmd)
    else:
        cmd.params.append(click.Argument(["args"], nargs=-1, type=click.UNPROCESSED))

    return cmd


class CommandRegistry:
    """
    Resolves, loads and registers command modules.

    A module that fails to resolve or import aborts the whole registration
    with its descriptive error.
    """

    def __init__(self, resolver: ModuleResolver, context_factory: ContextFactory):
        self.resolver = resolver
        self.context_factory = context_factory
        self.modules: List[LoadedModule] = []

    def load(self, spec: str, module_root: Path) -> LoadedModule:
        """
        Resolve and import one module specifier.

        Raises:
            MalformedSpecifierError, NotFoundError: From resolution
            CommandLoadError: If the file fails to import
        """
        specifier = ModuleSpecifier.parse(spec)
        path = self.resolver.resolve(specifier, module_root)
        module = load_module_file(path, [self.resolver.home.installed_files_path])

        loaded = LoadedModule(
            specifier=specifier.raw,
            path=path,
            metadata=ModuleMetadata.for_module(module, path),
            commands=discover_commands(module),
        )
        if not loaded.commands:
            logger.warning("Module %s exports no commands", spec)
        logger.debug(
            "Module %s: group=%s commands=%s",
            spec,
            loaded.metadata.group,
            ", ".join(loaded.commands) or "-",
        )
        self.modules.append(loaded)
        return loaded

    def load_all(self, specs: List[str], module_root: Path) -> List[LoadedModule]:
        return [self.load(spec, module_root) for spec in specs]

    def add_module(self, module: ModuleType, path: Path, specifier: str = "<builtin>") -> LoadedModule:
        """Register an already-imported module (used for built-in commands)."""
        loaded = LoadedModule(
            specifier=specifier,
            path=path,
            metadata=ModuleMetadata.for_module(module, path),
            commands=discover_commands(module),
        )
        self.modules.append(loaded)
        return loaded

    def bind(self, root: click.Group) -> None:
        """
        Attach every loaded command to ``root``.

        Raises:
            CommandLoadError: If two commands claim the same name
        """
        for loaded in self.modules:
            if loaded.metadata.is_top_level:
                target, group_name = root, None
            else:
                group_name = str(loaded.metadata.group)
                target = self._group(root, group_name, loaded.metadata.description)

            for name, command in loaded.commands.items():
                if name in target.commands:
                    where = f"group '{group_name}'" if group_name else "the top level"
                    raise CommandLoadError(
                        f"Command '{name}' from {loaded.path} is already registered in {where}"
                    )
                target.add_command(build_click_command(name, command, self._invoker(command, group_name, name)))
                logger.debug("Registered command: %s", f"{group_name} {name}" if group_name else name)

    def _group(self, root: click.Group, name: str, description: Optional[str]) -> click.Group:
        existing = root.commands.get(name)
        if existing is not None:
            if not isinstance(existing, click.Group):
                raise CommandLoadError(f"Group '{name}' collides with an existing command")
            if description and not existing.help:
                existing.help = description
            return existing

        group = click.Group(name=name, help=description or f"{name} commands")
        root.add_command(group)
        return group

    def _invoker(self, command: Any, group_name: Optional[str], name: str) -> Callable[[Dict[str, Any], List[str]], Any]:
        def invoke(options: Dict[str, Any], args: List[str]) -> Any:
            context = self.context_factory(group_name, name)
            logger.debug("Executing %s with options=%s args=%s", context.command_name, options, args)
            return command.execute(options, args, context)
        return invoke
