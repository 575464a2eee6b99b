"""Rich terminal renderer for trials and run summaries.

Color scheme
------------
- blue          : dependency names and versions under test
- yellow        : declared bounds, versions being minimized
- green         : OK trials, discovered bounds
- red           : FAILED trials, anomalies
- bright_black  : skipped versions
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cargobounds.models.reports import (
    MinimizeSummary,
    TestSummary,
    TrialResult,
)
from cargobounds.models.versioning import Version

_RESULT_MARKUP: dict[TrialResult, str] = {
    TrialResult.SUCCESS: "[green]OK[/green]",
    TrialResult.FAIL: "[bold red]FAILED[/bold red]",
}

_SPINNER = "dots"


class TrialRenderer:
    """Live progress and summaries for bound checks.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def dependency(self, name: str, bound: str) -> None:
        self.console.print(f"[blue]{escape(name)}[/blue] - [yellow]{escape(bound)}[/yellow]")

    @contextmanager
    def fetching(self, name: str) -> Iterator[None]:
        with self.console.status(
            f"Fetching versions for [blue]{escape(name)}[/blue]", spinner=_SPINNER
        ):
            yield

    @contextmanager
    def trial(self, version: Version) -> Iterator[Callable[[str], None]]:
        """Show a spinner for one trial; yields a callback for validator output.

        Validator output may carry ANSI colors (``cargo --color always``);
        only the latest line is shown.
        """
        label = Text(str(version), style="blue")
        with self.console.status(label, spinner=_SPINNER) as status:

            def update(line: str) -> None:
                message = Text.assemble(label, " ", Text.from_ansi(line))
                message.no_wrap = True
                message.overflow = "ellipsis"
                status.update(message)

            yield update

    def trial_finished(self, version: Version, result: TrialResult) -> None:
        self.console.print(f"  [blue]{version}[/blue] {_RESULT_MARKUP[result]}")

    def skipped(self, version: Version) -> None:
        self.console.print(f"  [bright_black]{version}[/bright_black]")

    def phase(self, message: str, version: Version) -> None:
        self.console.print(f"  {message} [yellow]{version}[/yellow]")

    def found(self, message: str, version: Version) -> None:
        self.console.print(f"  {message} [green]{version}[/green]")

    def discovered_bound(self, bound: str, *, sanity: bool) -> None:
        suffix = " - doing sanity check" if sanity else ""
        self.console.print(f"  [green]{escape(bound)}[/green]{suffix}")

    def anomalies(self, versions: list[Version]) -> None:
        listed = ", ".join(str(v) for v in versions)
        self.console.print(
            f"  [bold red]Sanity check failed inside the range:[/bold red] {listed}"
        )

    def error(self, name: str, message: str) -> None:
        self.console.print(
            f"  [bold red]Error in {escape(name)}:[/bold red] {escape(message)}"
        )

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def render_test_summary(self, summary: TestSummary) -> Panel:
        """Render a sanity-test summary as a Rich Panel."""
        if summary.passed:
            body = Text.from_markup(
                f"[bold green]All {len(summary.reports)} dependencies "
                f"pass their declared bounds.[/bold green]"
            )
            return Panel(body, title="[bold]cargo bounds[/bold]", border_style="green")

        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Dependency", style="blue")
        table.add_column("Bound", style="yellow")
        table.add_column("Failing versions")
        for report in summary.reports:
            if not report.failed:
                continue
            detail = escape(report.error) if report.error else ", ".join(
                str(v) for v in report.failed_versions
            )
            table.add_row(escape(report.dependency), escape(report.bound), f"[red]{detail}[/red]")

        headline = Text.from_markup(
            f"[red]{summary.failed_deps}[/red] deps have failing versions in "
            f"their bounds. ([yellow]{summary.failed_versions}[/yellow] versions "
            f"failed in total)"
        )
        return Panel(
            Group(table, Text(""), headline),
            title="[bold]cargo bounds[/bold]",
            border_style="red",
        )

    def render_minimize_summary(self, summary: MinimizeSummary) -> Table:
        """Render the discovered bounds as a Rich Table."""
        table = Table(title="Minimized bounds", header_style="bold cyan", expand=True)
        table.add_column("Dependency", style="blue")
        table.add_column("Declared", style="yellow")
        table.add_column("Discovered")
        table.add_column("Sanity", justify="center")

        for outcome in summary.outcomes:
            if outcome.error:
                discovered = f"[red]{escape(outcome.error)}[/red]"
            else:
                discovered = f"[green]{escape(outcome.bound)}[/green]"
            if outcome.sanity is None:
                sanity = "[dim]skipped[/dim]"
            elif outcome.sanity.clean:
                sanity = "[green]clean[/green]"
            else:
                sanity = "[red]" + ", ".join(str(v) for v in outcome.sanity.anomalies) + "[/red]"
            table.add_row(
                escape(outcome.dependency), escape(outcome.declared_bound), discovered, sanity
            )
        return table

    def print_test_summary(self, summary: TestSummary) -> None:
        self.console.print(self.render_test_summary(summary))

    def print_minimize_summary(self, summary: MinimizeSummary) -> None:
        self.console.print(self.render_minimize_summary(summary))
