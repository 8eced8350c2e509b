"""Console output formatting for the datasync CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Formats user-facing output with rich.

    Informational messages are suppressed in quiet mode. Errors always go
    to stderr so they stay visible when stdout is piped or in JSON mode.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Console for regular output (defaults to stdout)
            err_console: Console for errors (defaults to stderr)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self.json_output:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        if self.json_output:
            return
        self.console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error message to stderr."""
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")

    def output_json(self, data: Any) -> None:
        """Print data as formatted JSON."""
        self.console.print_json(json.dumps(data, default=str))

    def output_table(self, title: str, rows: list[tuple[str, str]]) -> None:
        """Print a two column key/value table.

        Args:
            title: Table title
            rows: (key, value) pairs
        """
        if self.json_output:
            self.output_json({key: value for key, value in rows})
            return
        table = Table(title=title, show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, value in rows:
            table.add_row(key, value)
        self.console.print(table)
