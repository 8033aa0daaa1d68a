"""Command-line interface for RoomFit.

Usage:
    roomfit info model.glb
    roomfit fit model.glb --width 24 --height 34 --depth 22.5 [options]
    roomfit build --config room.json --output room.glb
    roomfit init-config room.json
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.config import RoomFitConfig
from .core.request import AnchorSpec, AnchorSurface, AssetRequest, AxisRemap, Footprint, ScalingMode
from .mesh.bounds import compute_bounds
from .mesh.loader import AssetLoadError, TrimeshAssetLoader
from .pipeline import build_room
from .scene.placement import PlacementResult, resolve_placement
from .scene.scene import RoomBounds

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False)],
    )


def _fmt(values: tuple[float, ...], digits: int = 2) -> str:
    return " x ".join(f"{v:.{digits}f}" for v in values)


def _load_config(config: str | None) -> RoomFitConfig:
    if not config:
        return RoomFitConfig.default()
    try:
        return RoomFitConfig.from_file(config)
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration {config}:[/bold red]\n{e}")
        raise click.Abort()


def _placement_table(title: str, placement: PlacementResult) -> Table:
    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Native size", _fmt(placement.native_size, 3))
    table.add_row("Scale", _fmt(placement.scale, 4))
    table.add_row("Yaw (deg)", f"{math.degrees(placement.yaw):.1f}")
    table.add_row("Position", _fmt(placement.position))
    table.add_row("Final size (W x H x D)", _fmt(placement.size))
    return table


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """RoomFit - fit 3D assets into a room."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@main.command()
@click.argument("model_path", type=click.Path(exists=True))
def info(model_path: str) -> None:
    """Show native bounds of a 3D asset.

    MODEL_PATH: Path to a GLB/GLTF/OBJ/STL file
    """
    try:
        model = TrimeshAssetLoader().load_sync(model_path)
    except AssetLoadError as e:
        console.print(f"[bold red]Could not load asset: {e}[/bold red]")
        raise click.Abort()

    bounds = compute_bounds(model)

    table = Table(title="Asset Info")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("File", Path(model_path).name)
    table.add_row("Geometry nodes", str(len(model.graph.nodes_geometry)))
    table.add_row("Bounds min", _fmt(bounds.min, 3))
    table.add_row("Bounds max", _fmt(bounds.max, 3))
    table.add_row("Size (x, y, z)", _fmt(bounds.size, 3))
    console.print(table)


@main.command()
@click.argument("model_path", type=click.Path(exists=True))
@click.option("--width", "-W", type=float, required=True, help="Target width (room X)")
@click.option("--height", "-H", type=float, required=True, help="Target height (room Y)")
@click.option("--depth", "-D", type=float, required=True, help="Target depth (room Z)")
@click.option(
    "--mode", "-m",
    type=click.Choice([m.value for m in ScalingMode]),
    default=ScalingMode.EXACT.value,
    help="Scaling mode",
)
@click.option("--yaw-deg", type=float, default=0.0, help="Yaw about the vertical axis in degrees")
@click.option(
    "--anchor", "-a",
    type=click.Choice([s.value for s in AnchorSurface]),
    default=AnchorSurface.FLOOR_CENTERLINE.value,
    help="Room surface to hold the fixture against",
)
@click.option("--clearance", type=float, default=0.0, help="Gap to the anchor surface")
@click.option(
    "--remap",
    type=str,
    default=None,
    help="Native axes carrying width,height,depth (e.g. 'z,y,x')",
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Configuration file (for room dimensions)",
)
def fit(
    model_path: str,
    width: float,
    height: float,
    depth: float,
    mode: str,
    yaw_deg: float,
    anchor: str,
    clearance: float,
    remap: str | None,
    config: str | None,
) -> None:
    """Fit a single asset to a footprint and show its placement.

    MODEL_PATH: Path to a GLB/GLTF/OBJ/STL file
    """
    cfg = _load_config(config)
    room = RoomBounds.from_room_params(cfg.room)

    try:
        request = AssetRequest(
            candidates=(model_path,),
            footprint=Footprint(width=width, height=height, depth=depth),
            mode=ScalingMode(mode),
            yaw=math.radians(yaw_deg),
            anchor=AnchorSpec(surface=AnchorSurface(anchor), clearance=clearance),
            remap=AxisRemap.parse(remap) if remap else None,
        )
    except (ValidationError, ValueError) as e:
        console.print(f"[bold red]Invalid request: {e}[/bold red]")
        raise click.Abort()

    try:
        model = TrimeshAssetLoader().load_sync(model_path)
    except AssetLoadError as e:
        console.print(f"[bold red]Could not load asset: {e}[/bold red]")
        raise click.Abort()

    placement = resolve_placement(model, request, room)
    console.print(_placement_table(Path(model_path).name, placement))


@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Configuration file (default: sample bathroom)",
)
@click.option(
    "--asset-dir", "-d",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory relative asset identifiers resolve against",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds allowed per fixture to load an asset",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Export the scene (GLB/GLTF/OBJ by suffix)",
)
@click.option(
    "--manifest", "-m",
    type=click.Path(),
    help="Save the placement manifest as JSON",
)
@click.option("--no-shell", is_flag=True, help="Export fixtures only, without room walls")
def build(
    config: str | None,
    asset_dir: str | None,
    timeout: float | None,
    output: str | None,
    manifest: str | None,
    no_shell: bool,
) -> None:
    """Build the room, fitting every configured fixture."""
    cfg = _load_config(config)
    if asset_dir:
        cfg.fitting.asset_dir = Path(asset_dir)
    if timeout is not None:
        cfg.fitting.load_timeout_s = timeout

    r = cfg.room
    console.print(f"\n[bold]{cfg.name}[/bold] ({r.length} x {r.width} x {r.height} {r.units})\n")

    with console.status("Fitting fixtures..."):
        scene = build_room(cfg)

    table = Table(title="Fixtures")
    table.add_column("Name", style="cyan")
    table.add_column("Source", style="green")
    table.add_column("Scale", style="magenta")
    table.add_column("Position", style="yellow")
    table.add_column("Size (W x H x D)", style="green")

    for node in scene.fixtures:
        p = node.placement
        source = "[yellow]placeholder[/yellow]" if node.placeholder else str(node.source)
        table.add_row(node.name, source, _fmt(p.scale, 3), _fmt(p.position), _fmt(p.size))
    console.print(table)

    missing = {f.name for f in cfg.fixtures} - {n.name for n in scene.fixtures}
    if missing:
        console.print(f"[bold red]Fixtures not placed: {', '.join(sorted(missing))}[/bold red]")

    valid, errors = scene.validate_bounds()
    if not valid:
        for error in errors:
            console.print(f"[yellow]{error}[/yellow]")

    if output:
        scene.export(output, include_shell=not no_shell)
        console.print(f"[green]Exported scene to {output}[/green]")

    if manifest:
        scene.save(manifest)
        console.print(f"[green]Saved manifest to {manifest}[/green]")


@main.command("init-config")
@click.argument("path", type=click.Path())
def init_config(path: str) -> None:
    """Write the sample bathroom configuration to PATH."""
    RoomFitConfig.default().to_file(path)
    console.print(f"[green]Wrote sample configuration to {path}[/green]")


if __name__ == "__main__":
    main()
