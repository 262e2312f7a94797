"""Diff CLI command: classify the changes between two versions of a file."""

from pathlib import Path

import typer

from ..diff.engine import diff_snapshots
from ..exceptions import RippleScopeError
from ..logging_config import setup_logging
from ..snapshot.builder import build_snapshot
from . import app
from ._common import console, print_json, read_source


@app.command(name="diff")
def diff_cmd(
    before: Path = typer.Argument(
        ...,
        help="Old version of the file",
        exists=True,
        dir_okay=False,
    ),
    after: Path = typer.Argument(
        ...,
        help="New version of the file",
        exists=True,
        dir_okay=False,
    ),
    no_renames: bool = typer.Option(
        False,
        "--no-renames",
        help="Do not suggest rename hints",
    ),
    fail_on_breaking: bool = typer.Option(
        False,
        "--fail-on-breaking",
        help="Exit with status 1 when a breaking change is found",
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
    """Compare two versions of a file and list breaking changes.

    Both files are parsed as the language of AFTER; the report uses the
    path of AFTER.

    [bold cyan]Examples:[/bold cyan]

      ripplescope diff old/math.ts src/math.ts

      ripplescope diff old/math.ts src/math.ts --json --fail-on-breaking
    """
    logger = setup_logging(verbose=verbose)
    path = str(after.resolve())

    try:
        result = diff_snapshots(
            build_snapshot(path, read_source(before)),
            build_snapshot(path, read_source(after)),
            detect_renames=not no_renames,
        )
    except RippleScopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    logger.debug("%d changed symbols in %s", len(result.changed_symbols), path)
    if json_output:
        print_json(
            {
                "diff": result.to_dict(),
                "findings": [f.to_dict() for f in result.findings()],
                "impacted_names": result.impacted_names(),
                "has_breaking_changes": result.has_breaking_changes,
            }
        )
    else:
        from ._output import ImpactFormatter

        ImpactFormatter(console).render_diff(result)

    if fail_on_breaking and result.has_breaking_changes:
        raise typer.Exit(1)
