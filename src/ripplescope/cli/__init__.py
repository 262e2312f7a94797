"""CLI entry point: registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="ripplescope",
    help="ripplescope - breaking-change and downstream impact analysis for TypeScript/JavaScript",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _show_version(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]ripplescope[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def _root(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    """Snapshot, diff and trace the impact of TypeScript/JavaScript changes."""


# Import subcommands to register them
from .snapshot import snapshot_cmd as _snapshot_cmd  # noqa: F401, E402
from .diff import diff_cmd as _diff_cmd  # noqa: F401, E402
from .impact import analyze_cmd as _analyze_cmd, impact_cmd as _impact_cmd  # noqa: F401, E402


def main() -> None:
    app()
