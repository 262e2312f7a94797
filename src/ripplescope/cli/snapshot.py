"""Snapshot CLI command: extract the structural snapshot of one file."""

from pathlib import Path

import typer

from ..exceptions import RippleScopeError
from ..logging_config import setup_logging
from ..snapshot.builder import build_snapshot
from . import app
from ._common import console, print_json, read_source


@app.command(name="snapshot")
def snapshot_cmd(
    file: Path = typer.Argument(
        ...,
        help="TypeScript or JavaScript source file",
        exists=True,
        dir_okay=False,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Show the functions, classes, interfaces, types, enums and exports of a file.

    [bold cyan]Examples:[/bold cyan]

      ripplescope snapshot src/math.ts

      ripplescope snapshot src/math.ts --json
    """
    setup_logging(verbose=verbose)
    try:
        snapshot = build_snapshot(str(file.resolve()), read_source(file))
    except RippleScopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print_json(snapshot.to_dict())
        return

    from ._output import ImpactFormatter

    ImpactFormatter(console).render_snapshot(snapshot)
