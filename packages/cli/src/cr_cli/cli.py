"""CLI entry point for cr.

Commands:
  changes    — review uncommitted changes in the current git repository
  init       — interactive setup wizard writing .cr.yml
  integrate  — install a git pre-commit hook that runs `cr changes`
  model      — list, show and change the review model
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
import yaml

from cr_cli.commands.changes import changes_cmd
from cr_cli.commands.init import init_cmd
from cr_cli.commands.integrate import integrate_cmd
from cr_cli.commands.model import model_group


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("cr-review"),
    prog_name="cr",
)
@click.option(
    "--config",
    "config_path",
    default=".cr.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CR_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Print debug logging to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """A terminal tool for code review with AI assistance."""
    from cr_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Could not parse {config_path}: {e}")

    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = config


main.add_command(changes_cmd)
main.add_command(init_cmd)
main.add_command(integrate_cmd)
main.add_command(model_group)
