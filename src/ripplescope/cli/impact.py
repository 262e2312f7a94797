"""Impact CLI commands: downstream resolution and full change analysis.

Provides:
- ``impact``: Files affected by a change to a file, optionally by name.
- ``analyze``: Diff an old version against the current file, then trace it.
"""

from pathlib import Path
from typing import List, Optional

import typer

from ..api import analyze_change
from ..exceptions import RippleScopeError
from ..graph.builder import build_dependency_graph
from ..impact.resolver import find_downstream
from ..logging_config import setup_logging
from . import app
from ._common import console, print_json, read_source, resolve_config

_ROOT_OPTION = typer.Option(
    None,
    "--root",
    "-r",
    help="Project root (default: current directory)",
    exists=True,
    file_okay=False,
    dir_okay=True,
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Configuration file (TOML)",
    exists=True,
    file_okay=True,
    dir_okay=False,
)
_WORKERS_OPTION = typer.Option(
    None,
    "--workers",
    "-w",
    help="Parallel workers",
    min=1,
    max=32,
)
_BUDGET_OPTION = typer.Option(
    None,
    "--budget",
    help="Graph scan time budget in seconds",
    min=0.1,
)
_JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Output in machine-readable JSON format",
)
_VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging",
)


@app.command(name="impact")
def impact_cmd(
    file: Path = typer.Argument(
        ...,
        help="The changed file",
        exists=True,
        dir_okay=False,
    ),
    names: Optional[List[str]] = typer.Option(
        None,
        "--name",
        "-n",
        help="Impacted export name (repeatable); omit to follow every importer",
    ),
    root: Optional[Path] = _ROOT_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    workers: Optional[int] = _WORKERS_OPTION,
    budget: Optional[float] = _BUDGET_OPTION,
    json_output: bool = _JSON_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """List the files that depend on FILE, with the line that shows it.

    With --name, importers that never reference one of the names are
    dropped, except barrels that re-export them.

    [bold cyan]Examples:[/bold cyan]

      ripplescope impact src/math.ts

      ripplescope impact src/math.ts --name add --name Vector --json
    """
    logger = setup_logging(verbose=verbose)
    project = (root or Path.cwd()).resolve()

    try:
        settings = resolve_config(config=config, workers=workers, budget=budget, verbose=verbose)
        graph = build_dependency_graph(str(project), settings)
        impact = find_downstream(str(file.resolve()), names or None, graph, settings)
    except RippleScopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Unexpected error in impact")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print_json(impact.to_dict())
        return

    from ._output import ImpactFormatter

    ImpactFormatter(console).render_downstream(impact, root=str(project))


@app.command(name="analyze")
def analyze_cmd(
    file: Path = typer.Argument(
        ...,
        help="The edited file (current version)",
        exists=True,
        dir_okay=False,
    ),
    before: Path = typer.Option(
        ...,
        "--before",
        "-b",
        help="Previous version of the file",
        exists=True,
        dir_okay=False,
    ),
    root: Optional[Path] = _ROOT_OPTION,
    include_tests: bool = typer.Option(
        False,
        "--include-tests",
        help="Keep test files among the downstream results",
    ),
    config: Optional[Path] = _CONFIG_OPTION,
    workers: Optional[int] = _WORKERS_OPTION,
    budget: Optional[float] = _BUDGET_OPTION,
    json_output: bool = _JSON_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Diff FILE against its previous version and trace the impact.

    [bold cyan]Examples:[/bold cyan]

      ripplescope analyze src/math.ts --before /tmp/math.orig.ts

      ripplescope analyze src/math.ts -b old.ts --root . --json
    """
    logger = setup_logging(verbose=verbose)
    project = (root or Path.cwd()).resolve()

    try:
        settings = resolve_config(
            config=config,
            workers=workers,
            budget=budget,
            include_tests=include_tests,
            verbose=verbose,
        )
        report = analyze_change(
            str(file.resolve()),
            read_source(before),
            read_source(file),
            str(project),
            config=settings,
        )
    except RippleScopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Unexpected error in analyze")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print_json(report.to_dict())
        return

    from ._output import ImpactFormatter

    ImpactFormatter(console).render_report(report, root=str(project))
