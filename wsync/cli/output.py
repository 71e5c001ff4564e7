"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
per-page outcomes, batch summaries, repository status, spinners, and colored
messages. Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from .models import BatchReport, OutcomeStatus, PageOutcome


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Contacting W..."):
        ...     pass
    """

    OUTCOME_MARKS = {
        OutcomeStatus.CHANGED: "[green]✓[/green]",
        OutcomeStatus.UNCHANGED: "[dim]─[/dim]",
        OutcomeStatus.FAILED: "[red]✗[/red]",
        OutcomeStatus.CONFLICT: "[red]⚡[/red]",
    }

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Optional[Console] = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Optional Console to print to (created if omitted)
        """
        self.verbosity = verbosity
        self.console = console or Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(escape(message))

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Fetching page list..."):
            ...     ids = api.list_pages()
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_outcome(self, outcome: PageOutcome) -> None:
        """Display the outcome of one page operation."""
        mark = self.OUTCOME_MARKS[outcome.status]
        self.console.print(f"{mark} {escape(outcome.page_id)}: {escape(outcome.message)}")

    def print_report(self, report: BatchReport) -> None:
        """Display a batch summary with color coding."""
        self.console.print(f"\n[bold]{report.command.capitalize()} Summary:[/bold]")

        if report.changed_count > 0:
            self.console.print(f"  [green]✓[/green] Changed: {report.changed_count} page(s)")

        if report.unchanged_count > 0:
            self.console.print(f"  [dim]─[/dim] Unchanged: {report.unchanged_count} page(s)")

        if report.conflict_count > 0:
            self.console.print(f"  [red]⚡[/red] Conflicts: {report.conflict_count} page(s)")

        if report.failed_count > 0:
            self.console.print(f"  [red]✗[/red] Failed: {report.failed_count} page(s)")

        if not report.outcomes:
            self.console.print("\n[yellow]No tracked pages[/yellow]")
        elif report.failed_count > 0:
            self.console.print(f"\n[red]{report.command.capitalize()} completed with errors[/red]")
        elif report.conflict_count > 0:
            self.console.print(f"\n[red]{report.command.capitalize()} completed with conflicts[/red]")
        elif report.changed_count == 0:
            self.console.print("\n[green]All tracked pages are already up to date[/green]")
        else:
            self.console.print(f"\n[green]{report.command.capitalize()} completed successfully[/green]")

    def print_status(self, tracked: List[str], edited: List[str], untracked: List[str]) -> None:
        """Display repository content grouped by tracking state."""
        self.console.print("[bold]Repo contains:[/bold]")
        self.console.print(f"  {len(tracked)} tracked file(s) {escape(str(tracked))}")
        self.console.print(f"    ↳ including {len(edited)} locally edited file(s) {escape(str(edited))}")
        self.console.print(f"  {len(untracked)} untracked file(s) {escape(str(untracked))}")
