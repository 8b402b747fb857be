"""integrate command — run `cr changes` from a git pre-commit hook."""

from __future__ import annotations

import stat
import subprocess
from pathlib import Path

import click
from rich.console import Console

console = Console()

HOOK_COMMAND = "cr changes"
_NEW_HOOK = "#!/usr/bin/env sh\n\n"


def _hooks_dir(repo_root: str) -> Path | None:
    """Return the repository's hooks directory (honours core.hooksPath)."""
    try:
        result = subprocess.run(
            ["git", "-C", repo_root, "rev-parse", "--git-path", "hooks"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    hooks = Path(result.stdout.strip())
    return hooks if hooks.is_absolute() else Path(repo_root) / hooks


def install_hook(hook_path: Path) -> bool:
    """Add HOOK_COMMAND to ``hook_path``; return False if it was already there.

    An existing hook is extended, never replaced.
    """
    if hook_path.exists():
        content = hook_path.read_text()
        if HOOK_COMMAND in content:
            return False
        if not content.endswith("\n"):
            content += "\n"
        content += f"# Added by cr integrate\n{HOOK_COMMAND}\n"
    else:
        hook_path.parent.mkdir(parents=True, exist_ok=True)
        content = f"{_NEW_HOOK}{HOOK_COMMAND}\n"

    hook_path.write_text(content)
    hook_path.chmod(hook_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return True


@click.command("integrate")
@click.option(
    "--repo",
    "repo_root",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Path to the git working tree.",
)
def integrate_cmd(repo_root: str):
    """Set up a git hook to run code review on commit."""
    hooks = _hooks_dir(repo_root)
    if hooks is None:
        raise click.ClickException("Not a git repository. Please run this command in a git repository.")

    hook_path = hooks / "pre-commit"
    existed = hook_path.exists()
    if not install_hook(hook_path):
        console.print(f"[yellow]The pre-commit hook already includes {HOOK_COMMAND}.[/yellow]")
        return

    action = "Updated" if existed else "Created"
    console.print(f"[green]{action} {hook_path}[/green]")
    console.print("\n[bold green]Integration complete![/bold green] CR will now run automatically on git commit.")
    console.print("You can bypass the hook with [bold]git commit --no-verify[/bold] if needed.")
