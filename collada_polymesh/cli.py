#!/usr/bin/env python3
"""
Command-line interface for the COLLADA polygon mesh importer.

Argument parsing, progress display and the summary table live here. The
conversion itself is in converter.py and can be used without the CLI.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.panel import Panel
from rich.table import Table
from rich import box

from .constants import (
    DEFAULT_GEOMETRY_NAME,
    DEFAULT_OUTPUT_SUFFIX,
    LINEAR_UNIT_SCALE,
    JSON_COORDINATE_PRECISION,
    __version__
)
from .config import ImportConfig
from .converter import convert_scene
from .errors import ColladaImportError

# Create Rich consoles for output and errors
console = Console()
error_console = Console(stderr=True)


def default_output_path(input_path: Path) -> Path:
    """{input_name}_polymesh.json next to the input file."""
    return input_path.with_name(input_path.stem + DEFAULT_OUTPUT_SUFFIX + ".json")


def configure_logging(verbose: bool) -> None:
    """Send the package's log records to stderr when --verbose is given."""
    package_logger = logging.getLogger("collada_polymesh")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if verbose and not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('   [%(name)s] %(levelname)s %(message)s'))
        package_logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert COLLADA mesh geometry into canonical polygon meshes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s scene.json
  %(prog)s scene.json --output meshes.json
  %(prog)s scene.json --unit-scale 0.01 --no-hole-correction

The program will:
  1. Load the geometries and visual scene from the descriptor
  2. Build a unique edge list per mesh and decode every primitive into faces
  3. Emit one mesh per geometry and a reference for every further instance
  4. Write meshes, instances, group ids and material assignments as JSON
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program's version number and exit"
    )

    parser.add_argument(
        "input_file",
        type=str,
        help="Input scene descriptor (JSON)"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help=f"Output JSON file (default: <input>{DEFAULT_OUTPUT_SUFFIX}.json)"
    )

    parser.add_argument(
        "--unit-scale",
        type=float,
        default=LINEAR_UNIT_SCALE,
        help=f"Scale applied to vertex positions (default: {LINEAR_UNIT_SCALE})"
    )

    parser.add_argument(
        "--geometry-name",
        type=str,
        default=DEFAULT_GEOMETRY_NAME,
        help=f"Mesh node name for unnamed geometries (default: {DEFAULT_GEOMETRY_NAME})"
    )

    parser.add_argument(
        "--precision",
        type=int,
        default=JSON_COORDINATE_PRECISION,
        help=f"Decimal places of float values in the output (default: {JSON_COORDINATE_PRECISION})"
    )

    parser.add_argument(
        "--no-hole-correction",
        action="store_true",
        help="Emit polygon holes with their source winding"
    )

    parser.add_argument(
        "--no-object-groups",
        action="store_true",
        help="Don't create per-primitive object groups and group ids"
    )

    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first geometry that can't be converted"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )

    return parser


def _print_diagnostics(title: str, messages: List[str], style: str) -> None:
    if not messages:
        return
    console.print(f"[bold {style}]{title}[/bold {style}]")
    for message in messages:
        console.print(f"  [{style}]•[/{style}] {message}")
    console.print()


def print_summary(stats: Dict[str, Any]) -> None:
    """Show the conversion statistics and any diagnostics."""
    console.print()
    if stats['errors']:
        console.print(Panel.fit("[bold yellow]⚠️  Conversion finished with errors[/bold yellow]",
                                border_style="yellow"))
    else:
        console.print(Panel.fit("[bold green]✅ Conversion complete![/bold green]",
                                border_style="green"))

    stats_table = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    stats_table.add_column("Label", style="bold cyan")
    stats_table.add_column("Value", style="white")

    stats_table.add_row("Geometries:", str(stats['num_geometries']))
    stats_table.add_row("Meshes:", f"{stats['num_meshes']} ({stats['num_instances']} extra instances)")
    stats_table.add_row("Faces:", str(stats['num_faces']))
    stats_table.add_row("Edges:", str(stats['num_edges']))
    stats_table.add_row("Group ids:", str(stats['num_group_ids']))
    stats_table.add_row("Materials:", str(stats['num_materials']))
    stats_table.add_row("Output:", stats['output_path'])
    console.print(stats_table)
    console.print()

    _print_diagnostics("Warnings:", stats['warnings'], "yellow")
    _print_diagnostics("Errors:", stats['errors'], "red")


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    input_path = Path(args.input_file)
    if not input_path.exists():
        error_console.print(f"[red]❌ Error: Input file not found: {input_path}[/red]")
        sys.exit(1)

    output_path = args.output if args.output else str(default_output_path(input_path))

    try:
        config = ImportConfig(
            geometry_name=args.geometry_name,
            linear_unit_scale=args.unit_scale,
            correct_hole_orientation=not args.no_hole_correction,
            emit_object_groups=not args.no_object_groups,
            fail_fast=args.fail_fast,
            coordinate_precision=args.precision,
        )
    except ValueError as e:
        error_console.print(f"[red]❌ Invalid parameter: {e}[/red]")
        sys.exit(1)

    console.print(Panel.fit("[bold cyan]🧊 COLLADA Polygon Mesh Importer[/bold cyan]", border_style="cyan"))
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=False
    ) as progress:

        tasks: Dict[str, Any] = {}
        descriptions = {
            'load': "[cyan]📁 Loading scene...",
            'import': "[blue]🎲 Importing geometry...",
            'export': "[green]📦 Writing JSON...",
        }

        def progress_callback(stage: str, message: str):
            if stage not in tasks:
                for task_id in tasks.values():
                    progress.update(task_id, completed=True)
                tasks[stage] = progress.add_task(descriptions.get(stage, stage), total=None)
            progress.update(tasks[stage], description=f"{descriptions.get(stage, stage)} {message}")

        try:
            stats = convert_scene(
                input_path=str(input_path),
                output_path=output_path,
                config=config,
                progress_callback=progress_callback
            )
        except FileNotFoundError as e:
            error_console.print(f"\n[red]❌ Error: {e}[/red]")
            sys.exit(1)
        except ColladaImportError as e:
            error_console.print(f"\n[red]❌ Conversion stopped: {e}[/red]")
            sys.exit(1)
        except ValueError as e:
            error_console.print(f"\n[red]❌ Invalid scene descriptor: {e}[/red]")
            sys.exit(1)

    print_summary(stats)
    if stats['errors']:
        sys.exit(2)


if __name__ == "__main__":
    main()
