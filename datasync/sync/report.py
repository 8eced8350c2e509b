"""Outcome tracking and summary reporting for sync runs."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..output import OutputFormatter
from ..utils import format_duration

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
"""Called as callback(index, total, relative_path) for every entry."""


class OutcomeKind(str, Enum):
    """What happened to a single entry."""

    COPIED = "copied"
    """File was copied to the destination"""

    SKIPPED_UNCHANGED = "skipped_unchanged"
    """Destination file already has the same content"""

    SKIPPED_EXCLUDED = "skipped_excluded"
    """Entry matched an exclusion pattern"""

    DIRECTORY_CREATED = "directory_created"
    """Destination directory was ensured"""

    FAILED = "failed"
    """Entry could not be synced within the retry budget"""


@dataclass
class SyncOutcome:
    """Result of processing one entry."""

    kind: OutcomeKind
    """Outcome category"""

    relative_path: str
    """Path of the entry relative to the source root"""

    reason: str = ""
    """Human-readable explanation"""

    error: Optional[BaseException] = None
    """Last error for failed entries"""

    attempts: int = 0
    """Attempts made (only meaningful for copies and failures)"""


@dataclass(frozen=True)
class SyncSummary:
    """Final counts of a sync run."""

    copied: int = 0
    skipped_unchanged: int = 0
    skipped_excluded: int = 0
    directories_created: int = 0
    failed: int = 0
    elapsed: float = 0.0
    """Wall clock duration of the run in seconds"""

    dry_run: bool = False
    warnings: tuple[str, ...] = field(default_factory=tuple)
    """Tree-level warnings (e.g. missing source root)"""

    errors: tuple[str, ...] = field(default_factory=tuple)
    """Tree-level errors (e.g. failed clean)"""

    @property
    def processed(self) -> int:
        """Number of entries that received an outcome."""
        return (
            self.copied
            + self.skipped_unchanged
            + self.skipped_excluded
            + self.directories_created
            + self.failed
        )

    @property
    def success(self) -> bool:
        """True when no entry failed and no tree-level error occurred."""
        return self.failed == 0 and not self.errors

    def to_dict(self) -> dict:
        """Convert summary to a dictionary for JSON output."""
        return {
            "copied": self.copied,
            "skipped_unchanged": self.skipped_unchanged,
            "skipped_excluded": self.skipped_excluded,
            "directories_created": self.directories_created,
            "failed": self.failed,
            "processed": self.processed,
            "elapsed": round(self.elapsed, 3),
            "dry_run": self.dry_run,
            "success": self.success,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


class SyncReporter:
    """Aggregates outcomes, forwards progress and prints the summary."""

    def __init__(
        self,
        output: Optional[OutputFormatter] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize reporter.

        Args:
            output: Output formatter for the console summary
            progress_callback: Optional callback(index, total, relative_path)
        """
        self.output = output or OutputFormatter(quiet=True)
        self.progress_callback = progress_callback
        self.outcomes: list[SyncOutcome] = []
        self._counts = {kind: 0 for kind in OutcomeKind}
        self._warnings: list[str] = []
        self._errors: list[str] = []

    def count(self, kind: OutcomeKind) -> int:
        """Number of outcomes recorded for a kind."""
        return self._counts[kind]

    def record(self, outcome: SyncOutcome) -> None:
        """Record the outcome of one entry.

        Args:
            outcome: Outcome to add
        """
        self.outcomes.append(outcome)
        self._counts[outcome.kind] += 1

    def progress(self, index: int, total: int, relative_path: str) -> None:
        """Report that entry ``index`` of ``total`` is being processed."""
        logger.debug(f"[{index}/{total}] {relative_path}")
        if self.progress_callback is not None:
            self.progress_callback(index, total, relative_path)

    def warning(self, message: str) -> None:
        """Record a tree-level warning."""
        self._warnings.append(message)
        if not self.output.quiet:
            self.output.warning(message)

    def error(self, message: str) -> None:
        """Record a tree-level error."""
        self._errors.append(message)
        self.output.error(message)

    def build_summary(self, elapsed: float, dry_run: bool = False) -> SyncSummary:
        """Freeze the collected counts into a summary.

        Args:
            elapsed: Duration of the run in seconds
            dry_run: Whether the run was a dry run

        Returns:
            Immutable SyncSummary
        """
        return SyncSummary(
            copied=self._counts[OutcomeKind.COPIED],
            skipped_unchanged=self._counts[OutcomeKind.SKIPPED_UNCHANGED],
            skipped_excluded=self._counts[OutcomeKind.SKIPPED_EXCLUDED],
            directories_created=self._counts[OutcomeKind.DIRECTORY_CREATED],
            failed=self._counts[OutcomeKind.FAILED],
            elapsed=elapsed,
            dry_run=dry_run,
            warnings=tuple(self._warnings),
            errors=tuple(self._errors),
        )

    def display_summary(self, summary: SyncSummary) -> None:
        """Display sync summary.

        Args:
            summary: Summary of the finished run
        """
        if self.output.json_output:
            self.output.output_json(summary.to_dict())
            return

        if self.output.quiet:
            if summary.failed > 0:
                self.output.error(f"{summary.failed} file(s) failed to sync")
            elif summary.errors:
                self.output.error(f"Sync finished with {len(summary.errors)} error(s)")
            return

        self.output.print("")
        if summary.dry_run:
            self.output.success("Dry run complete!")
        elif summary.success:
            self.output.success("Sync complete!")
        else:
            self.output.warning("Sync finished with errors")

        self.output.info(
            f"Processed {summary.processed} entr"
            f"{'y' if summary.processed == 1 else 'ies'} "
            f"in {format_duration(summary.elapsed)}"
        )
        copied_label = "Would copy" if summary.dry_run else "Copied"
        self.output.info(f"  {copied_label}: {summary.copied}")
        self.output.info(f"  Unchanged: {summary.skipped_unchanged}")
        self.output.info(f"  Excluded: {summary.skipped_excluded}")
        self.output.info(f"  Directories: {summary.directories_created}")
        if summary.failed > 0:
            self.output.warning(f"  Failed: {summary.failed}")
            for outcome in self.outcomes:
                if outcome.kind == OutcomeKind.FAILED:
                    self.output.warning(
                        f"    {outcome.relative_path}: {outcome.reason}"
                    )
        if summary.copied == 0 and summary.failed == 0 and summary.processed > 0:
            self.output.info("No changes needed - everything is in sync!")
