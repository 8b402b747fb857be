"""init command — interactive setup wizard.

Writes .cr.yml with the chosen model, review instruction and default rules,
and keeps the file out of version control because it may hold an API key.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from cr_core.models import DEFAULT_MODEL, MODELS
from cr_core.prompts import DEFAULT_INSTRUCTION

console = Console()


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Initialize CR configuration for the current project.

    Creates .cr.yml and adds it to .gitignore.
    """
    from cr_core.config import DEFAULT_CONFIG, DEFAULT_RULES, save_config

    config_path = Path(ctx.obj.get("config_path", ".cr.yml") if ctx.obj else ".cr.yml")
    console.print("\n[bold cyan]cr init[/bold cyan] — project setup\n")

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Do you want to overwrite it?", default=False):
            console.print("[yellow]Initialization cancelled.[/yellow]")
            return

    # --- Choose model ---
    console.print("Available models:")
    for descriptor in MODELS.values():
        console.print(f"  [bold]{descriptor.id}[/bold]  {descriptor.label}")
    model = click.prompt("Model", type=click.Choice(list(MODELS)), default=DEFAULT_MODEL)

    instruction = click.prompt("Default instruction for code review", default=DEFAULT_INSTRUCTION)
    api_key = click.prompt(
        "API key (leave empty to use the environment variable)",
        default="",
        show_default=False,
        hide_input=True,
    )
    light_review = click.confirm("Use light review (ISSUES and BEST PRACTICES only)?", default=False)
    use_colors = click.confirm("Use coloured output?", default=True)

    config: dict = {
        "model": model,
        "instruction": instruction,
        "rules": list(DEFAULT_RULES),
        "light_review": light_review,
        "use_colors": use_colors,
        "max_chars_per_file": DEFAULT_CONFIG["max_chars_per_file"],
    }
    if api_key:
        config["api_key"] = api_key

    save_config(config, str(config_path))
    console.print(f"[green]Created {config_path}[/green]")

    _update_gitignore(config_path.name)

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("You can now use:")
    console.print("  [bold]cr changes[/bold]    — review git changes")
    console.print("  [bold]cr integrate[/bold]  — run a review on every commit")


def _update_gitignore(entry: str, gitignore: Path = Path(".gitignore")) -> None:
    """Add ``entry`` to .gitignore, creating the file on confirmation."""
    if gitignore.exists():
        content = gitignore.read_text()
        if any(line.strip() == entry for line in content.splitlines()):
            console.print(f"[dim]{entry} is already in .gitignore.[/dim]")
            return
        separator = "" if not content or content.endswith("\n") else "\n"
        gitignore.write_text(f"{content}{separator}{entry}\n")
        console.print(f"[green]Added {entry} to .gitignore[/green]")
        return

    if click.confirm(".gitignore file not found. Do you want to create it?", default=True):
        gitignore.write_text(f"{entry}\n")
        console.print(f"[green].gitignore created with {entry}[/green]")
    else:
        console.print(f"[yellow]Remember to keep {entry} out of version control.[/yellow]")
