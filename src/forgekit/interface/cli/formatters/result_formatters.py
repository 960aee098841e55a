"""
Result formatters for built-in commands.

Separates display logic from command logic.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


class DependencyListFormatter:
    """Formatter for ``forge module list``."""

    def display_dependencies(self, rows: List[Tuple[str, str, bool]], entries: Dict[str, str]) -> None:
        """
        Display declared dependencies and the shared-home manifest.

        Args:
            rows: ``(specifier, kind, installed)`` per declared dependency
            entries: Manifest ``{name: source}``
        """
        if rows:
            table = Table(title="Declared dependencies", show_header=True, header_style="bold", box=box.ROUNDED)
            table.add_column("Dependency", style="cyan", no_wrap=True)
            table.add_column("Kind", style="blue")
            table.add_column("Status")
            for specifier, kind, installed in rows:
                status = "[green]installed[/green]" if installed else "[red]missing[/red]"
                table.add_row(specifier, kind, status)
            console.print(table)
        else:
            console.print("[yellow]No dependencies declared[/yellow]")

        if entries:
            table = Table(title="Shared home", show_header=True, header_style="bold", box=box.ROUNDED)
            table.add_column("Name", style="cyan", no_wrap=True)
            table.add_column("Source", style="magenta")
            for name, source in sorted(entries.items()):
                table.add_row(name, source)
            console.print(table)


class InstallResultFormatter:
    """Formatter for ``forge module install``."""

    def display_install_result(self, declared: int, changed: bool) -> None:
        if declared == 0:
            console.print("[yellow]No dependencies declared[/yellow]")
        elif changed:
            console.print("[green]Dependencies installed.[/green] New modules load on the next run.")
        else:
            console.print("[green]All dependencies already installed[/green]")


class ResolveResultFormatter:
    """Formatter for ``forge module resolve``."""

    def display_path(self, path: Path) -> None:
        console.print(str(path), highlight=False, markup=False, soft_wrap=True)


class StateFormatter:
    """Formatter for ``forge state`` commands."""

    def display_value(self, value: Any) -> None:
        text = value if isinstance(value, str) else json.dumps(value)
        console.print(text, highlight=False, markup=False, soft_wrap=True)

    def display_state(self, title: str, state: Dict[str, Any]) -> None:
        if not state:
            console.print(f"[yellow]No {title.lower()} set[/yellow]")
            return

        table = Table(title=title, show_header=True, header_style="bold", box=box.ROUNDED)
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in sorted(state.items()):
            table.add_row(key, json.dumps(value))
        console.print(table)
