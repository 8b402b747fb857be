"""Console output helpers shared by the review pipeline and the CLI commands.

Every helper takes the console explicitly so callers decide about colour
(``make_console(use_colors=False)``) and tests can capture output.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape


def make_console(use_colors: bool = True) -> Console:
    return Console(highlight=False) if use_colors else Console(highlight=False, color_system=None)


def divider(console: Console) -> str:
    return "─" * (console.width or 80)


def print_section_header(console: Console, title: str, description: str = "") -> None:
    line = divider(console)
    console.print()
    console.print(f"[cyan]{line}[/cyan]")
    console.print(f"[bold cyan] {escape(title.upper())}[/bold cyan]")
    if description:
        console.print(f"[dim] {escape(description)}[/dim]")
    console.print(f"[cyan]{line}[/cyan]")
    console.print()


def print_subsection_header(console: Console, title: str) -> None:
    console.print()
    console.print(f"[bold cyan]{escape(title)}[/bold cyan]")
    console.print()


def print_blank(console: Console) -> None:
    console.print()


def print_divider(console: Console) -> None:
    console.print(f"[dim]{divider(console)}[/dim]")


def print_success(console: Console, message: str) -> None:
    console.print(f"[green]✓ {escape(message)}[/green]")


def print_warning(console: Console, message: str) -> None:
    console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def print_error(console: Console, message: str, detail: str | None = None) -> None:
    console.print(f"[red]✗ {escape(message)}[/red]")
    if detail:
        console.print(f"[dim]  {escape(detail)}[/dim]")


def print_info(console: Console, message: str) -> None:
    console.print(f"[blue]ℹ {escape(message)}[/blue]")


def print_list_item(console: Console, label: str, value: str, highlight: bool = False) -> None:
    style = "yellow" if highlight else "dim"
    console.print(f"  [white]{escape(label)}[/white]: [{style}]{escape(str(value))}[/{style}]")


def print_model_item(console: Console, name: str, description: str, is_current: bool = False) -> None:
    prefix = "[green]* [/green]" if is_current else "  "
    name_style = "green" if is_current else "white"
    console.print(f"{prefix}[{name_style}]{escape(name)}[/{name_style}] - [dim]{escape(description)}[/dim]")


def print_command_example(console: Console, command: str, description: str = "") -> None:
    suffix = f" - [dim]{escape(description)}[/dim]" if description else ""
    console.print(f"  [cyan]{escape(command)}[/cyan]{suffix}")
