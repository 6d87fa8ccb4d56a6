# bucketsync Console Output
# Rich-based console output for user-friendly display

from typing import TYPE_CHECKING

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from bucketsync.sync.actions import CopyTask
from bucketsync.sync.engine import SyncOutcome, SyncReport
from bucketsync.sync.item import ObjectRecord

if TYPE_CHECKING:
    from bucketsync.sync.location import StorageLocation


def format_size(size: int) -> str:
    """Format a byte count for humans."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if value < 1024 or unit == "TB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


class Console:
    """
    Console output manager using Rich.

    Progress and results go to stdout, warnings and errors to stderr.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False)
        self._err_console = RichConsole(stderr=True, no_color=not colored, highlight=False)

    @property
    def err_console(self) -> RichConsole:
        """Underlying stderr console (shared with the log handler)."""
        return self._err_console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._err_console.print(f"[red]Error:[/red] {escape(message)}")

    def print_locations(self, source: "StorageLocation", destination: "StorageLocation") -> None:
        """Print the direction of the run."""
        self._console.print(f"[bold]Source:[/bold]      {escape(source.uri)}")
        self._console.print(f"[bold]Destination:[/bold] {escape(destination.uri)}")
        if self.verbose:
            self._console.print(f"[dim]Credentials: {escape(source.credentials.display_name)}[/dim]")

    def print_copy(self, task: CopyTask, source: "StorageLocation", destination: "StorageLocation") -> None:
        """Print the progress line of a starting copy."""
        self._console.print(
            f"Copying {escape(source.uri_for(task.source_key))} → {escape(destination.uri_for(task.destination_key))}"
        )

    def print_listing(self, location: "StorageLocation", records: list[ObjectRecord]) -> None:
        """
        Print the objects of a location with their fingerprints.

        Args:
            location: Listed location.
            records: Listing result.
        """
        if not records:
            self._console.print(f"[dim]No objects under {escape(location.uri)}[/dim]")
            return

        table = Table(title=location.uri, show_header=True, header_style="bold")
        table.add_column("Key", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Fingerprint", style="dim")

        for record in records:
            table.add_row(escape(record.key), format_size(record.size), record.fingerprint)

        self._console.print(table)
        self._console.print(f"{len(records)} objects, {format_size(sum(r.size for r in records))}")

    def print_plan(self, report: SyncReport, destination: "StorageLocation") -> None:
        """
        Print the copies a run would perform.

        Args:
            report: Report holding the DiffSet.
            destination: Destination location for rendering target URIs.
        """
        diff = report.diff
        if diff.is_empty:
            self.print_identical()
            return

        table = Table(title="Objects to copy", show_header=True, header_style="bold")
        table.add_column("Source key", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Destination")

        for task in report.planned:
            table.add_row(
                escape(task.source_key),
                format_size(task.record.size),
                escape(destination.uri_for(task.destination_key)),
            )

        self._console.print(table)
        self._console.print(
            f"{len(diff)} of {diff.source_count} source objects missing "
            f"({format_size(diff.total_bytes)}), destination holds {diff.destination_count}"
        )

    def print_identical(self) -> None:
        """Print the nothing-to-do line."""
        self._console.print("[green]Content is identical[/green]")

    def print_sync_result(self, report: SyncReport) -> None:
        """
        Print sync result summary.

        Args:
            report: Sync report to display.
        """
        outcome = report.outcome

        if outcome == SyncOutcome.NOTHING_TO_DO:
            self.print_identical()
            return

        if outcome == SyncOutcome.PLANNED:
            self._console.print(
                Panel(
                    f"[blue]Dry run completed[/blue]\nObjects: {report.total} would be copied",
                    title="Summary",
                    border_style="blue",
                )
            )
            return

        if outcome == SyncOutcome.COMPLETED:
            self._console.print(
                Panel(
                    f"[green]Sync completed[/green]\n"
                    f"Objects: {report.succeeded} copied in {report.duration:.1f}s",
                    title="Summary",
                    border_style="green",
                )
            )
            return

        status_text = f"Sync completed with {report.failed} failures"
        if report.deadline_exceeded:
            status_text += " (run deadline exceeded)"

        self._console.print(
            Panel(
                f"[red]{status_text}[/red]\n"
                f"Objects: {report.succeeded} copied, {report.failed} failed of {report.total}",
                title="Summary",
                border_style="red",
            )
        )

        for failure in report.failures:
            self._err_console.print(
                f"  [red]✗[/red] {escape(failure.key)} [dim]({failure.stage})[/dim]: {escape(failure.reason)}"
            )


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
