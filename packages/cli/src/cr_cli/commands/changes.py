"""changes command — review uncommitted changes in the current repository."""

from __future__ import annotations

import click

from cr_core.reviewer import run_changes_review


@click.command("changes")
@click.option(
    "--light/--full",
    "light_review",
    default=None,
    help="Two-section (ISSUES, BEST PRACTICES) or full seven-section review. Overrides config file.",
)
@click.option("--model", default=None, help="Model identifier for this run. Overrides config file.")
@click.option("--no-color", "no_color", is_flag=True, help="Disable coloured output.")
@click.option(
    "--repo",
    "repo_root",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Path to the git working tree to review.",
)
@click.pass_context
def changes_cmd(ctx, light_review: bool | None, model: str | None, no_color: bool, repo_root: str):
    """Review current code changes in git.

    Every modified, added or renamed file is diffed against the last commit,
    sent to the configured model and the review is printed file by file.

    \b
    Environment variables (used when .cr.yml has no api_key):
      GEMINI_API_KEY       Gemini models
      ANTHROPIC_API_KEY    Claude models
      OPENAI_API_KEY       GPT models
    """
    from cr_core.config import load_config

    config_path = ctx.obj.get("config_path", ".cr.yml") if ctx.obj else ".cr.yml"
    config = load_config(
        config_path,
        cli_overrides={
            "model": model,
            "light_review": light_review,
            "use_colors": False if no_color else None,
        },
    )

    summary = run_changes_review(config, repo_root=repo_root)
    if summary is None:
        ctx.exit(1)
