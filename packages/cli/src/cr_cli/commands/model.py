"""model commands — list, show and change the review model."""

from __future__ import annotations

import click

from cr_core.display import (
    make_console,
    print_blank,
    print_command_example,
    print_divider,
    print_info,
    print_list_item,
    print_model_item,
    print_section_header,
    print_subsection_header,
    print_success,
    print_warning,
)
from cr_core.models import DEFAULT_MODEL, MODELS, get_model

console = make_console()


def _current_model(config: dict | None) -> str:
    if not config:
        return DEFAULT_MODEL
    return config.get("model") or DEFAULT_MODEL


@click.group("model")
def model_group():
    """Manage AI models for code review."""


@model_group.command("list")
@click.pass_context
def model_list_cmd(ctx):
    """List all available AI models."""
    print_section_header(console, "Available Models", "List of supported AI models for code review")
    current = _current_model(ctx.obj.get("config"))

    print_subsection_header(console, "Models")
    for descriptor in MODELS.values():
        is_current = descriptor.id == current
        print_model_item(console, descriptor.id, descriptor.description, is_current)
        console.print(f"    [dim]{descriptor.details}[/dim]")
        if is_current:
            console.print("    [green]✓[/green] Currently selected")
        print_blank(console)

    print_divider(console)
    print_info(console, "To change the model, use the command:")
    print_command_example(console, "cr model change")
    print_blank(console)
    print_info(console, "To see details about the current model:")
    print_command_example(console, "cr model show")


@model_group.command("show")
@click.pass_context
def model_show_cmd(ctx):
    """Show the current AI model."""
    print_section_header(console, "Model Info", "Information about the current AI model")
    config = ctx.obj.get("config")
    if config is None:
        print_warning(console, 'CR configuration not found. Run "cr init" first.')
        ctx.exit(1)

    current = _current_model(config)
    print_subsection_header(console, "Current Model")
    print_list_item(console, "Name", current, highlight=True)

    descriptor = get_model(current)
    if descriptor is None:
        print_warning(console, f"Note: {current} is not one of the officially supported models.")
        return

    print_list_item(console, "Provider", descriptor.provider)
    print_list_item(console, "Description", descriptor.description)

    print_subsection_header(console, "Capabilities")
    for capability in descriptor.capabilities:
        console.print(f"  [green]✓[/green] {capability}")

    print_subsection_header(console, "Recommended Use Cases")
    for use_case in descriptor.use_cases:
        console.print(f"  [blue]•[/blue] {use_case}")

    print_blank(console)
    print_info(console, "To change the model, use the command:")
    print_command_example(console, "cr model change")


@model_group.command("change")
@click.option("--to", "model_id", type=click.Choice(list(MODELS)), default=None, help="Model to switch to.")
@click.pass_context
def model_change_cmd(ctx, model_id: str | None):
    """Change the AI model used for code review."""
    from cr_core.config import save_config

    print_section_header(console, "Model Change", "Change the AI model used for code review")
    config = ctx.obj.get("config")
    if config is None:
        print_warning(console, 'CR configuration not found. Run "cr init" first.')
        ctx.exit(1)

    current = _current_model(config)
    print_subsection_header(console, "Current Configuration")
    print_list_item(console, "Model", current, highlight=True)
    print_blank(console)

    if model_id is None:
        for descriptor in MODELS.values():
            console.print(f"  [bold]{descriptor.id}[/bold]  {descriptor.label}")
        model_id = click.prompt(
            "\nSelect a new model to use",
            type=click.Choice(list(MODELS)),
            default=current if current in MODELS else DEFAULT_MODEL,
        )

    if model_id == current:
        print_warning(console, "No change: You selected the same model that is currently configured.")
        return

    config["model"] = model_id
    save_config(config, ctx.obj["config_path"])
    print_success(console, f"Model successfully changed to: {model_id}")
    print_info(console, "This model will be used for all future code reviews.")
