"""CLI for the widget home screen.

Runs the home screen and manages the widget layout without a display.
"""

import asyncio
import logging
import sys

import click

from home_screen.widget_screen import create_widget_screen, main
from system.config import load_launcher_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _load_screen(config_path):
    screen = create_widget_screen(load_launcher_config(config_path))
    screen.engine.load()
    return screen


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to launcher.yaml"
)
@click.pass_context
def cli(ctx, config_path):
    """Widget home screen CLI."""
    ctx.obj = {"config_path": config_path}


@cli.command()
@click.pass_context
def run(ctx):
    """Open the home screen."""
    asyncio.run(main(ctx.obj["config_path"]))


@cli.command(name="list")
@click.pass_context
def list_widgets(ctx):
    """List placed widgets and their cells."""
    screen = _load_screen(ctx.obj["config_path"])
    widgets = screen.engine.widgets()

    if not widgets:
        click.echo("No widgets placed")
        return

    for widget in widgets:
        content = screen.host.resolve_content(widget.widget_id)
        x, y, w, h = widget.cell_rect.as_tuple()
        click.echo(f"{widget.widget_id:>4}  {content.label:<10} cell=({x}, {y}) size={w}x{h}")

    pending = screen.engine.pending_removals
    if pending:
        click.echo(f"Unavailable (pending removal): {', '.join(map(str, sorted(pending)))}")


@cli.command()
@click.pass_context
def providers(ctx):
    """List available widget providers."""
    screen = create_widget_screen(load_launcher_config(ctx.obj["config_path"]))
    for provider in screen.host.list_providers():
        click.echo(
            f"{provider.provider_id:<10} {provider.label:<10} "
            f"min {provider.min_width:g}x{provider.min_height:g}px"
        )


@cli.command()
@click.argument("provider_id")
@click.pass_context
def add(ctx, provider_id):
    """Add a widget from PROVIDER_ID at its default placement."""
    screen = _load_screen(ctx.obj["config_path"])
    widget_id = screen.add_widget(provider_id)

    if widget_id is None:
        click.echo(f"✗ Could not place widget from {provider_id}")
        sys.exit(1)

    x, y, w, h = screen.engine.widget(widget_id).cell_rect.as_tuple()
    click.echo(f"✓ Added widget {widget_id} at cell ({x}, {y}) size {w}x{h}")


@cli.command()
@click.argument("widget_id", type=int)
@click.pass_context
def remove(ctx, widget_id):
    """Remove widget WIDGET_ID from the home screen."""
    screen = _load_screen(ctx.obj["config_path"])

    if not screen.remove_widget(widget_id):
        click.echo(f"✗ Widget {widget_id} is not placed")
        sys.exit(1)

    click.echo(f"✓ Removed widget {widget_id}")


if __name__ == "__main__":
    cli()
