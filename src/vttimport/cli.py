"""CLI entry point for the VTT import pipeline.

Usage:
    vttimport create-scene map.uvtt --compression high   # New scene from a UVTT file
    vttimport add walls.json --use-selection             # Add walls/doors to the current scene
    vttimport inspect map.dd2vtt                         # Show what a file contains
    vttimport steps                                      # Show configured pipeline steps
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from vttimport.core.contracts import CompressionMode, PipelineConfig
from vttimport.core.exceptions import VTTImportError
from vttimport.core.logging import setup_logging

app = typer.Typer(name="vttimport", help="Import UVTT, dd2vtt and Foundry VTT maps into a scene store")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


def _load_config(config: Path) -> PipelineConfig:
    from vttimport.core.pipeline_runner import load_pipeline_config

    if config.exists():
        return load_pipeline_config(config)
    console.print(f"[dim]No config at {config}, using defaults[/dim]")
    return PipelineConfig()


def _build_pipeline(config: Path):
    from vttimport.core.pipeline_runner import ImportPipeline
    from vttimport.store import ConsoleNotifier, build_store

    pipeline_cfg = _load_config(config)
    store = build_store(pipeline_cfg.store, pipeline_cfg.data_root)
    return ImportPipeline(pipeline_cfg, store, notifier=ConsoleNotifier(console))


@app.command("create-scene")
def create_scene(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="UVTT / dd2vtt file with a map image"),
    compression: Optional[CompressionMode] = typer.Option(
        None, "--compression", "-c", help="Image compression mode (default from step config)"
    ),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Create a new scene from a map file (image + walls + doors)."""
    setup_logging(log_level)
    pipeline = _build_pipeline(config)
    try:
        bundle = pipeline.create_scene(file, compression)
    except VTTImportError:
        raise typer.Exit(1)
    console.print(
        f"[green]Done.[/green] Scene '{bundle.name}': {len(bundle.items)} items, "
        f"map {bundle.base_map.filename} at {bundle.base_map.dpi:g} dpi"
    )


@app.command()
def add(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="UVTT / dd2vtt / Foundry JSON file"),
    use_selection: bool = typer.Option(
        False, "--use-selection", help="Anchor at the position and scale of the selected item"
    ),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Add walls and doors from a map file to the current scene."""
    setup_logging(log_level)
    pipeline = _build_pipeline(config)
    try:
        result = pipeline.add_to_scene(file, use_selection=use_selection)
    except VTTImportError:
        raise typer.Exit(1)
    console.print(
        f"[green]Done.[/green] {result.num_walls} walls, {result.num_doors} doors "
        f"in {result.num_batches} batches"
    )


@app.command()
def inspect(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Map file to inspect"),
) -> None:
    """Detect the file format and summarize its contents."""
    from vttimport.steps.s01_normalize.config import NormalizeConfig
    from vttimport.steps.s01_normalize.step import normalize_document, read_document
    from vttimport.steps.s03_optimize_image._codec import decode_base64_payload, sniff_mime_type

    cfg = NormalizeConfig()
    try:
        raw = read_document(file, cfg.allowed_extensions)
        kind, geometry, image = normalize_document(raw, legacy_door_closed=cfg.legacy_door_closed)
    except VTTImportError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{file.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    res = geometry.resolution
    open_doors = sum(1 for d in geometry.doors if not d.closed)
    table.add_row("Format", kind.value)
    table.add_row("Walls", str(len(geometry.walls)))
    table.add_row("Doors", f"{len(geometry.doors)} ({open_doors} open)")
    table.add_row("Pixels per grid", f"{res.pixels_per_grid:g}" if res.pixels_per_grid else "-")
    table.add_row("Map size", f"{res.map_size.x:g} x {res.map_size.y:g}")
    if image:
        try:
            data = decode_base64_payload(image)
            table.add_row("Image", f"{sniff_mime_type(data)}, {len(data) / (1024 * 1024):.2f}MB")
        except VTTImportError as e:
            table.add_row("Image", f"[red]unreadable: {e.message}[/red]")
    else:
        table.add_row("Image", "-")
    console.print(table)


@app.command()
def steps(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their config files."""
    from vttimport.core.pipeline_runner import resolve_step_entries

    pipeline_cfg = _load_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Config", style="yellow")

    for i, step in enumerate(resolve_step_entries(pipeline_cfg).values(), 1):
        table.add_row(str(i), step.name, step.module, step.config_file or "(defaults)")
    console.print(table)


if __name__ == "__main__":
    app()
