"""Main CLI entry point for sheetnest."""

import click
from rich.console import Console

from sheetnest import __version__
from sheetnest.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="sheetnest")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """sheetnest - nest flat parts onto stock sheets.

    Orients each part to its smallest bounding rectangle and packs the
    rectangles row by row onto as many sheets as needed.
    """
    from sheetnest.config import get_settings

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# Import and register commands
from sheetnest.cli.nest_cmd import clean, flaps, nest, optimize

cli.add_command(optimize)
cli.add_command(nest)
cli.add_command(flaps)
cli.add_command(clean)


@cli.command()
def status() -> None:
    """Show effective nesting configuration."""
    from sheetnest.config import get_settings

    settings = get_settings()

    def dimension(value):
        return f"{value:g} mm" if value is not None else "[yellow]Not set[/yellow]"

    console.print("[bold]sheetnest Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Sheet:[/bold]")
    console.print(f"  Width: {dimension(settings.sheet_width)}")
    console.print(f"  Height: {dimension(settings.sheet_height)}")
    console.print(f"  Spacing: {settings.spacing:g} mm")
    console.print()
    console.print("[bold]Rotation:[/bold]")
    console.print(f"  Angle Step: {settings.angle_step} deg")
    console.print(f"  Workers: {settings.max_workers}")
    console.print(f"  Degenerate Parts: {settings.degenerate_policy}")
    console.print()
    console.print(f"Output Directory: {settings.output_dir}")


if __name__ == "__main__":
    cli()
