"""CLI commands for orienting and nesting parts."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sheetnest.errors import NestingError

console = Console()


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {error}[/red]")
    sys.exit(1)


def _output_path(path: str) -> Path:
    """Resolve a relative export path against the configured output directory."""
    from sheetnest.config import get_settings

    path = Path(path)
    if path.is_absolute():
        return path
    return get_settings().output_dir / path


@click.command("optimize")
@click.argument("parts_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--angle", "-a", type=int, default=0, help="Manual angle in degrees (with --no-optimize)")
@click.option("--optimize/--no-optimize", default=True, help="Search sampled angles for the smallest footprint")
@click.option("--skip-degenerate", is_flag=True, help="Skip parts without a bounding box instead of failing")
@click.option("--workers", "-w", type=int, default=None, help="Threads for the rotation search")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def optimize(parts_file, angle, optimize, skip_degenerate, workers, as_json):
    """Find the minimal-footprint orientation of every part."""
    from sheetnest.io import load_parts
    from sheetnest.nesting import DegeneratePolicy, NestingConfig, optimize_rotation

    config = NestingConfig.from_settings(
        max_workers=workers,
        degenerate_policy=DegeneratePolicy.SKIP if skip_degenerate else None,
    )

    try:
        parts = load_parts(parts_file)
        footprints = optimize_rotation(
            parts,
            angle,
            optimize,
            angle_step=config.angle_step,
            policy=config.degenerate_policy,
            max_workers=config.max_workers,
        )
    except NestingError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps([fp.to_dict() for fp in footprints], indent=2))
        return

    table = Table(title=f"Part Orientation - {len(footprints)}/{len(parts)} parts")
    table.add_column("Part", style="cyan")
    table.add_column("Angle", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("Area", justify="right", style="green")

    for fp in footprints:
        table.add_row(
            fp.name or str(fp.part_index),
            f"{fp.angle:g}°",
            f"{fp.rectangle.width:.2f}",
            f"{fp.rectangle.height:.2f}",
            f"{fp.area:.2f}",
        )

    console.print(table)


@click.command("nest")
@click.argument("parts_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--sheet-width", "-W", type=float, default=None, help="Sheet width in mm")
@click.option("--sheet-height", "-H", type=float, default=None, help="Sheet height in mm")
@click.option("--spacing", "-s", type=float, default=None, help="Gap between parts and sheets in mm")
@click.option("--angle", "-a", type=int, default=0, help="Manual angle in degrees (with --no-optimize)")
@click.option("--optimize/--no-optimize", default=True, help="Search sampled angles for the smallest footprint")
@click.option("--skip-degenerate", is_flag=True, help="Skip parts without a bounding box instead of failing")
@click.option("--workers", "-w", type=int, default=None, help="Threads for the rotation search")
@click.option("--dxf", "dxf_path", type=click.Path(dir_okay=False), help="Write the layout to a DXF file (relative to the output directory)")
@click.option("--svg", "svg_path", type=click.Path(dir_okay=False), help="Write the layout to an SVG file (relative to the output directory)")
@click.option("--boxes", is_flag=True, help="Include bounding rectangles in exported files")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def nest(parts_file, sheet_width, sheet_height, spacing, angle, optimize,
         skip_degenerate, workers, dxf_path, svg_path, boxes, as_json):
    """Orient parts and pack them onto sheets."""
    from sheetnest.io import load_parts
    from sheetnest.laser import export_to_dxf, export_to_svg
    from sheetnest.nesting import DegeneratePolicy, NestingConfig, nest_shapes

    config = NestingConfig.from_settings(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        spacing=spacing,
        manual_angle=angle,
        optimize=optimize,
        max_workers=workers,
        degenerate_policy=DegeneratePolicy.SKIP if skip_degenerate else None,
    )

    try:
        parts = load_parts(parts_file)
        result = nest_shapes(
            [p.shape for p in parts],
            config,
            names=[p.name for p in parts],
        )
    except NestingError as e:
        _fail(e)
        return

    if dxf_path:
        dxf_path = export_to_dxf(result.packing, _output_path(dxf_path), include_boxes=boxes)
    if svg_path:
        svg_path = export_to_svg(result.packing, _output_path(svg_path), include_boxes=boxes)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    packing = result.packing
    placed = len(packing.placed_rectangles)
    merged = len(result.footprints) - placed
    panel_content = f"""[bold cyan]Parts:[/bold cyan] {placed} placed, {merged} merged, {len(result.skipped_parts)} skipped
[bold cyan]Sheets:[/bold cyan] {packing.sheet_count} x {config.sheet_width:g} x {config.sheet_height:g} mm
[bold green]Utilization:[/bold green] {packing.utilization:.1f}%
"""
    console.print(Panel(panel_content, title="Nesting Result"))

    table = Table(title="Sheets")
    table.add_column("Sheet", style="cyan")
    table.add_column("Parts", justify="right")
    table.add_column("Utilization", justify="right", style="green")
    for sheet in packing.sheets:
        table.add_row(str(sheet.index + 1), str(len(sheet.placements)), f"{sheet.utilization:.1f}%")
    console.print(table)

    for message in packing.warnings:
        console.print(f"  [yellow]![/yellow] {message}")
    if dxf_path:
        console.print(f"[green]DXF written to {dxf_path}[/green]")
    if svg_path:
        console.print(f"[green]SVG written to {svg_path}[/green]")


@click.command("flaps")
@click.argument("parts_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--distance", "-d", type=float, default=1.0, help="Flap depth in mm")
@click.option("--scale", "-s", type=float, default=1.0, help="Outer flap edge length relative to the part edge")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def flaps(parts_file, distance, scale, as_json):
    """Generate glue flaps along every edge of each part."""
    from sheetnest.geometry import generate_flaps
    from sheetnest.io import load_parts

    try:
        parts = load_parts(parts_file)
        results = [(p.name, generate_flaps(p.shape, distance, scale)) for p in parts]
    except NestingError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps({name: r.to_dict() for name, r in results}, indent=2))
        return

    table = Table(title="Glue Flaps")
    table.add_column("Part", style="cyan")
    table.add_column("Flaps", justify="right")
    table.add_column("Flap Area", justify="right", style="green")
    for name, result in results:
        table.add_row(name, str(len(result.flaps)), f"{sum(f.area for f in result.flaps):.2f}")
    console.print(table)


@click.command("clean")
@click.argument("parts_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--tolerance", "-t", type=float, default=0.01, help="Merge/simplify tolerance in mm")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(parts_file, tolerance, as_json):
    """Repair and simplify part outlines."""
    from sheetnest.geometry import clean_shape
    from sheetnest.io import load_parts

    try:
        parts = load_parts(parts_file)
        results = [(p.name, clean_shape(p.shape, tolerance)) for p in parts]
    except NestingError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps({name: r.to_dict() for name, r in results}, indent=2))
        return

    for name, result in results:
        if result.changed:
            console.print(f"[bold]{name}[/bold]")
            for issue in result.issues:
                console.print(f"  [green]•[/green] {issue}")
        else:
            console.print(f"[bold]{name}[/bold]: [dim]clean[/dim]")
