"""Terminal reporter — prints comparison outcomes to the console with rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from csscritic.models.comparison import ComparisonStarting, SuiteReport
from csscritic.reporter.reporting import ReportedComparison

STATUS_LABELS = {
    "passed": ("PASS", "green"),
    "failed": ("FAIL", "red"),
    "reference_missing": ("NEW", "yellow"),
    "error": ("ERROR", "bold red"),
}


class TerminalReporter:
    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.comparisons: list[ReportedComparison] = []

    def report_comparison_starting(self, starting: ComparisonStarting) -> None:
        self.console.print(f"[dim]Comparing {escape(starting.test_case.url)}[/dim]")

    def report_comparison(self, comparison: ReportedComparison) -> None:
        self.comparisons.append(comparison)
        label, style = STATUS_LABELS.get(comparison.status, (comparison.status.upper(), "white"))
        self.console.print(f"[{style}]{label:>5}[/{style}] {escape(comparison.test_case.url)}")
        for url in comparison.render_errors:
            self.console.print(f"       [yellow]could not load {escape(url)}[/yellow]")
        if comparison.status == "reference_missing":
            self.console.print("       [dim]no reference image yet, run 'csscritic accept' to store one[/dim]")

    def report(self, suite: SuiteReport) -> None:
        table = Table(title="Results Summary")
        table.add_column("Status", style="bold")
        table.add_column("Count")
        for status, (label, style) in STATUS_LABELS.items():
            count = sum(1 for c in self.comparisons if c.status == status)
            table.add_row(label, f"[{style}]{count}[/{style}]")
        self.console.print(table)

        if suite.success:
            self.console.print("[bold green]All comparisons passed[/bold green]")
        else:
            self.console.print("[bold red]Some comparisons did not pass[/bold red]")
