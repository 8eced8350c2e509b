"""CLI progress display for sync operations.

This module provides a Rich-based progress bar driven by the progress
callback of the sync engine.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


class SyncProgressDisplay:
    """Rich-based progress display for sync operations.

    Use as a context manager and pass ``display.callback`` to the engine::

        with SyncProgressDisplay() as display:
            engine = SyncEngine(progress_callback=display.callback)
            engine.run(request)
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to render on (stdout if omitted)
        """
        self._console = console
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def callback(self, index: int, total: int, relative_path: str) -> None:
        """Handle a progress event from the engine.

        Args:
            index: 1-based index of the entry being processed
            total: Number of entries in the tree
            relative_path: Entry being processed
        """
        if self._progress is None or self._task is None:
            return
        self._progress.update(
            self._task,
            total=total,
            completed=index,
            current=relative_path,
        )

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TextColumn("[cyan]{task.fields[current]}"),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
            refresh_per_second=4,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task("Syncing", total=None, current="")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
