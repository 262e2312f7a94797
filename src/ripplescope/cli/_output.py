"""Rich terminal rendering for snapshots, diffs and downstream impact."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from ..api import ImpactReport
from ..diff.models import Severity, SnapshotDiff
from ..impact.models import DownstreamImpact, EvidenceTier
from ..paths import CanonicalPath
from ..snapshot.models import SymbolSnapshot

# ── Presentation ─────────────────────────────────────────────────────────────

_SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}

_TIER_COLORS = {
    EvidenceTier.USAGE: "green",
    EvidenceTier.TEXT: "cyan",
    EvidenceTier.IMPORT: "yellow",
    EvidenceTier.UNKNOWN: "dim",
}


def _display_path(path: CanonicalPath, root: Optional[str]) -> str:
    return path.relative_to(root) if root else str(path)


class ImpactFormatter:
    """Render analysis results to a Rich console.

    Usage::

        formatter = ImpactFormatter(console)
        formatter.render_diff(diff)
        formatter.render_downstream(impact, root="/repo")
    """

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    # ── Snapshot ─────────────────────────────────────────────────────────

    def render_snapshot(self, snapshot: SymbolSnapshot) -> None:
        c = self._console
        c.print()
        c.print(f"[bold cyan]SNAPSHOT[/bold cyan]  {snapshot.file_path}")
        c.print(f"  [dim]{snapshot.language}  sha256:{snapshot.content_hash[:12]}[/dim]")
        if snapshot.degraded:
            c.print("  [yellow]Syntax errors found; symbols are best-effort[/yellow]")
        c.print()

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Kind")
        table.add_column("Name", style="bold")
        table.add_column("Exported")
        table.add_column("Signature", overflow="fold")
        for symbol in sorted(snapshot.symbols(), key=lambda s: s.line):
            table.add_row(
                str(symbol.line),
                symbol.kind.value,
                symbol.name,
                "[green]yes[/green]" if symbol.is_exported else "[dim]no[/dim]",
                symbol.signature,
            )
        c.print(table)

        if snapshot.exports:
            c.print()
            c.print(f"  [bold]Exports[/bold] ({len(snapshot.exports)})")
            for entry in snapshot.exports:
                source = f" [dim]from '{entry.source_module}'[/dim]" if entry.source_module else ""
                c.print(f"    {entry.public_name} [dim]({entry.export_kind.value})[/dim]{source}")
        c.print()

    # ── Diff ─────────────────────────────────────────────────────────────

    def render_diff(self, diff: SnapshotDiff) -> None:
        c = self._console
        findings = diff.findings()
        breaking = sum(1 for f in findings if f.is_breaking)

        c.print()
        c.print(f"[bold cyan]CHANGES[/bold cyan]  {diff.file_path}")
        if diff.degraded:
            c.print("  [yellow]Syntax errors found; the diff is best-effort[/yellow]")
        if not findings:
            c.print("  [green]No structural changes.[/green]")
            c.print()
            return

        c.print(f"  {len(findings)} changes, [bold red]{breaking}[/bold red] breaking")
        c.print()

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Rule", style="dim")
        table.add_column("Severity")
        table.add_column("Name", style="bold")
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Message", overflow="fold")
        for finding in findings:
            color = _SEVERITY_COLORS[finding.severity]
            label = finding.severity.value.upper()
            if finding.is_breaking:
                label += " !"
            table.add_row(
                finding.rule_id.value,
                f"[{color}]{label}[/{color}]",
                finding.name,
                str(finding.line),
                finding.message,
            )
        c.print(table)

        for hint in diff.rename_hints:
            c.print(
                f"  [dim]Possible rename ({hint.confidence} confidence, {hint.similarity:.0%}):[/dim]"
                f" {hint.old_name} -> {hint.new_name}"
            )
        c.print()

    # ── Downstream ───────────────────────────────────────────────────────

    def render_downstream(self, impact: DownstreamImpact, root: Optional[str] = None) -> None:
        c = self._console
        c.print()
        if not impact.attempted:
            c.print("[dim]Downstream analysis not run: nothing changed.[/dim]")
            c.print()
            return

        names = ", ".join(impact.impacted_names) if impact.impacted_names else "(all exports)"
        c.print(f"[bold cyan]DOWNSTREAM[/bold cyan]  {len(impact)} files  [dim]names: {names}[/dim]")
        if not impact.complete:
            c.print("  [yellow]Scan budget exceeded; results may be incomplete[/yellow]")
        if not impact.results:
            c.print("  [green]No affected files.[/green]")
            c.print()
            return
        c.print()

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Depth", justify="right", style="dim")
        table.add_column("File", style="bold")
        table.add_column("Line", justify="right")
        table.add_column("Evidence")
        table.add_column("")
        for result in impact.results:
            tier = result.evidence.tier
            color = _TIER_COLORS[tier]
            # Lines are shown 1-based.
            line = str(result.evidence.line + 1) if result.evidence.is_known else "-"
            table.add_row(
                str(result.depth),
                _display_path(result.file_path, root),
                line,
                f"[{color}]{tier.value}[/{color}]",
                "[magenta]re-export[/magenta]" if result.via_reexport else "",
            )
        c.print(table)
        c.print()

    # ── Full report ──────────────────────────────────────────────────────

    def render_report(self, report: ImpactReport, root: Optional[str] = None) -> None:
        self.render_diff(report.diff)
        self.render_downstream(report.downstream, root=root)
        if report.test_files:
            c = self._console
            c.print(f"  [bold]Affected tests[/bold] ({len(report.test_files)})")
            for result in report.test_files:
                c.print(f"    {_display_path(result.file_path, root)}")
            c.print()
