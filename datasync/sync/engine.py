"""Core sync engine for executing sync operations."""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar, Union

from ..exceptions import (
    CleanError,
    DestinationError,
    RetryExhaustedError,
    SourceMissingError,
)
from ..output import OutputFormatter
from ..utils import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, format_size
from .comparator import FileComparator
from .matcher import PathMatcher
from .operations import SyncOperations
from .report import (
    OutcomeKind,
    ProgressCallback,
    SyncOutcome,
    SyncReporter,
    SyncSummary,
)
from .request import SyncRequest
from .retry import with_retry
from .scanner import DirectoryScanner, TreeEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncPhase(str, Enum):
    """Phases of a sync run, in execution order."""

    INIT = "init"
    ENSURE_DESTINATION = "ensure_destination"
    CLEAN = "clean"
    COPY = "copy"
    SUMMARIZE = "summarize"
    DONE = "done"


class SyncEngine:
    """Core sync engine that mirrors one tree onto another.

    A run walks the source tree once, skips excluded entries, skips files
    whose destination copy already has the same digest and copies the rest
    with bounded retries. Per-entry failures are recorded and never stop
    the run.
    """

    def __init__(
        self,
        output: Optional[OutputFormatter] = None,
        scanner: Optional[DirectoryScanner] = None,
        comparator: Optional[FileComparator] = None,
        operations: Optional[SyncOperations] = None,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize sync engine.

        Args:
            output: Output formatter for displaying status and the summary
            scanner: Tree enumerator
            comparator: Content comparator
            operations: Filesystem operations; when omitted one is created
                per run with the request's dry_run setting
            sleep: Sleep function used between retries
            progress_callback: Optional callback(index, total, relative_path)
        """
        self.output = output or OutputFormatter(quiet=True)
        self.scanner = scanner or DirectoryScanner()
        self.comparator = comparator or FileComparator()
        self.operations = operations
        self.sleep = sleep
        self.progress_callback = progress_callback

    def _operations_for(self, dry_run: bool) -> SyncOperations:
        if self.operations is not None:
            return self.operations
        return SyncOperations(dry_run=dry_run)

    @staticmethod
    def _enter_phase(phase: SyncPhase) -> None:
        logger.debug(f"Entering phase: {phase.value}")

    def run(self, request: SyncRequest) -> SyncSummary:
        """Execute a sync request.

        Args:
            request: Fully resolved sync request

        Returns:
            Summary of the run; check ``summary.success`` for the outcome

        Examples:
            >>> engine = SyncEngine()
            >>> summary = engine.run(request)
            >>> print(f"Copied {summary.copied} file(s)")
        """
        start_time = time.time()
        prefix = "[dry run] " if request.dry_run else ""
        reporter = SyncReporter(self.output, self.progress_callback)

        self._enter_phase(SyncPhase.INIT)
        logger.info(
            f"{prefix}Starting {request.direction.value}: "
            f"{request.source_root} -> {request.destination_root}"
        )
        if not self.output.quiet:
            self.output.info(
                f"Syncing ({request.direction.value}): "
                f"{request.source_root} -> {request.destination_root}"
            )
            if request.dry_run:
                self.output.info("Dry run: No changes will be made")
            if request.exclusions:
                self.output.info(f"Excluding: {', '.join(request.exclusions)}")
            self.output.print("")

        # The remote side is provisioned whatever the direction
        self._enter_phase(SyncPhase.ENSURE_DESTINATION)
        try:
            self.ensure_destination_exists(request.remote_root, dry_run=request.dry_run)
        except OSError as e:
            message = f"Cannot create remote directory {request.remote_root}: {e}"
            logger.error(message)
            reporter.error(message)

        self._enter_phase(SyncPhase.CLEAN)
        clean_targets = []
        if request.clean_source:
            clean_targets.append(request.source_root)
        if request.clean_destination:
            clean_targets.append(request.destination_root)
        cleaned = set()
        for root in clean_targets:
            try:
                self.clean(root, dry_run=request.dry_run)
            except CleanError as e:
                # Clean failures are recorded but the copy phase still runs
                logger.error(str(e))
                reporter.error(str(e))
            else:
                cleaned.add(root)

        self._enter_phase(SyncPhase.COPY)
        if request.dry_run and request.source_root in cleaned:
            # A real run would find the source empty after cleaning
            logger.info(f"{prefix}Nothing to copy, {request.source_root} is cleaned")
        else:
            try:
                self.sync_tree(
                    request.source_root,
                    request.destination_root,
                    exclusions=request.exclusions,
                    max_retries=request.max_retries,
                    dry_run=request.dry_run,
                    retry_delay=request.retry_delay,
                    reporter=reporter,
                    destination_cleaned=request.destination_root in cleaned,
                )
            except SourceMissingError as e:
                logger.warning(f"Skipping sync: {e}")
                reporter.warning(f"Skipping sync: {e}")
            except DestinationError as e:
                logger.error(str(e))
                reporter.error(str(e))

        self._enter_phase(SyncPhase.SUMMARIZE)
        elapsed = time.time() - start_time
        summary = reporter.build_summary(elapsed, dry_run=request.dry_run)
        logger.info(
            f"{prefix}Finished {request.direction.value} in {elapsed:.2f}s: "
            f"copied={summary.copied} unchanged={summary.skipped_unchanged} "
            f"excluded={summary.skipped_excluded} "
            f"directories={summary.directories_created} failed={summary.failed}"
        )
        reporter.display_summary(summary)

        self._enter_phase(SyncPhase.DONE)
        return summary

    def ensure_destination_exists(
        self, root: Union[str, Path], dry_run: bool = False
    ) -> bool:
        """Create a tree root if it is missing.

        Args:
            root: Directory that must exist
            dry_run: If True, only log the creation

        Returns:
            True if the directory was (or would be) created

        Raises:
            OSError: If the directory cannot be created
        """
        root = Path(root)
        if root.is_dir():
            logger.debug(f"Destination root exists: {root}")
            return False

        prefix = "[dry run] " if dry_run else ""
        logger.info(f"{prefix}Creating destination root {root}")
        self._operations_for(dry_run).make_dirs(root)
        return True

    def clean(self, root: Union[str, Path], dry_run: bool = False) -> int:
        """Delete the contents of a tree and leave it as an empty directory.

        Args:
            root: Directory to clear
            dry_run: If True, only log the intended deletions

        Returns:
            Number of top-level entries removed (or that would be removed)

        Raises:
            CleanError: If any entry cannot be removed
        """
        root = Path(root)
        prefix = "[dry run] " if dry_run else ""
        logger.info(f"{prefix}Cleaning {root}")
        try:
            removed = self._operations_for(dry_run).clean_tree(root)
        except OSError as e:
            raise CleanError(f"Failed to clean {root}: {e}") from e
        logger.info(f"{prefix}Cleaned {root} ({removed} top-level entries)")
        return removed

    def sync_tree(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        exclusions: Iterable[str] = (),
        max_retries: int = DEFAULT_MAX_RETRIES,
        dry_run: bool = False,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        reporter: Optional[SyncReporter] = None,
        destination_cleaned: bool = False,
    ) -> list[SyncOutcome]:
        """Mirror every entry of source into destination.

        The source tree is walked once up front so progress has a stable
        total.

        Args:
            source: Tree to read
            destination: Tree to write
            exclusions: Glob patterns of entries to skip
            max_retries: Total attempts per entry
            dry_run: If True, decide and log but do not write
            retry_delay: Fixed pause between attempts
            reporter: Reporter collecting outcomes (a private one if omitted)
            destination_cleaned: Destination was cleaned before this call;
                in dry run its current content is treated as gone

        Returns:
            Outcomes of this tree in walk order

        Raises:
            SourceMissingError: If source does not exist
            DestinationError: If the destination root cannot be created
        """
        source = Path(source)
        destination = Path(destination)
        reporter = reporter or SyncReporter()
        operations = self._operations_for(dry_run)
        matcher = PathMatcher(exclusions)
        prefix = "[dry run] " if dry_run else ""
        assume_empty = dry_run and destination_cleaned

        entries = self.scanner.scan(source)
        total = len(entries)
        logger.info(f"{prefix}Found {total} entries in {source}")

        if not destination.is_dir():
            logger.info(f"{prefix}Creating destination root {destination}")
            try:
                operations.make_dirs(destination)
            except OSError as e:
                raise DestinationError(
                    f"Cannot create destination directory {destination}: {e}"
                ) from e

        outcomes: list[SyncOutcome] = []
        for index, entry in enumerate(entries, start=1):
            pattern = matcher.first_match(entry.name, entry.relative_path)
            if pattern is not None:
                outcome = SyncOutcome(
                    kind=OutcomeKind.SKIPPED_EXCLUDED,
                    relative_path=entry.relative_path,
                    reason=f"matches exclusion {pattern!r}",
                )
                logger.info(
                    f"{prefix}Excluded {entry.relative_path} ({outcome.reason})"
                )
                reporter.record(outcome)
                outcomes.append(outcome)
                continue

            reporter.progress(index, total, entry.relative_path)
            if entry.is_directory:
                outcome = self._sync_directory(
                    entry, destination, operations, max_retries, retry_delay, prefix
                )
            else:
                outcome = self._sync_file(
                    entry,
                    destination,
                    operations,
                    max_retries,
                    retry_delay,
                    prefix,
                    assume_empty,
                )

            reporter.record(outcome)
            outcomes.append(outcome)

        return outcomes

    def _sync_directory(
        self,
        entry: TreeEntry,
        destination: Path,
        operations: SyncOperations,
        max_retries: int,
        retry_delay: float,
        prefix: str,
    ) -> SyncOutcome:
        target = destination / entry.relative_path
        logger.info(f"{prefix}Ensuring directory {entry.relative_path}")
        try:
            _, attempts = self._retry(
                lambda: operations.make_dirs(target),
                max_retries,
                retry_delay,
                f"Creating directory {entry.relative_path}",
            )
        except RetryExhaustedError as e:
            return self._failed(entry, e, prefix)

        logger.info(f"{prefix}Directory ready: {entry.relative_path}")
        return SyncOutcome(
            kind=OutcomeKind.DIRECTORY_CREATED,
            relative_path=entry.relative_path,
            reason="directory ensured",
            attempts=attempts,
        )

    def _sync_file(
        self,
        entry: TreeEntry,
        destination: Path,
        operations: SyncOperations,
        max_retries: int,
        retry_delay: float,
        prefix: str,
        assume_empty: bool = False,
    ) -> SyncOutcome:
        target = destination / entry.relative_path

        if not assume_empty and target.is_dir():
            # Never replace a destination directory with a file
            reason = "a directory exists at the destination path"
            logger.error(f"{prefix}Failed {entry.relative_path}: {reason}")
            return SyncOutcome(
                kind=OutcomeKind.FAILED,
                relative_path=entry.relative_path,
                reason=reason,
            )

        def compare_and_copy() -> tuple[OutcomeKind, str, int]:
            # Hash errors propagate and are retried
            if assume_empty or not target.exists():
                reason = "missing at destination"
            elif self.comparator.same_content(entry.full_path, target):
                return OutcomeKind.SKIPPED_UNCHANGED, "content unchanged", 0
            else:
                reason = "content differs"

            logger.info(f"{prefix}Copying {entry.relative_path} ({reason})")
            operations.copy_file(entry.full_path, target)
            return OutcomeKind.COPIED, reason, entry.full_path.stat().st_size

        try:
            (kind, reason, size), attempts = self._retry(
                compare_and_copy,
                max_retries,
                retry_delay,
                f"Sync of {entry.relative_path}",
            )
        except RetryExhaustedError as e:
            return self._failed(entry, e, prefix)

        if kind == OutcomeKind.SKIPPED_UNCHANGED:
            logger.info(f"{prefix}Unchanged {entry.relative_path}")
        else:
            logger.info(f"{prefix}Copied {entry.relative_path} ({format_size(size)})")
        return SyncOutcome(
            kind=kind,
            relative_path=entry.relative_path,
            reason=reason,
            attempts=attempts,
        )

    def _retry(
        self,
        operation: Callable[[], T],
        max_retries: int,
        retry_delay: float,
        description: str,
    ) -> tuple[T, int]:
        """Run operation with retries.

        Returns:
            The operation's result and the number of attempts used
        """
        attempts = 0

        def counted() -> T:
            nonlocal attempts
            attempts += 1
            return operation()

        result = with_retry(
            counted,
            max_retries,
            delay=retry_delay,
            sleep=self.sleep,
            description=description,
        )
        return result, attempts

    @staticmethod
    def _failed(
        entry: TreeEntry, error: RetryExhaustedError, prefix: str
    ) -> SyncOutcome:
        reason = str(error.last_error) if error.last_error else str(error)
        logger.error(
            f"{prefix}Failed {entry.relative_path} after "
            f"{error.attempts} attempt(s): {reason}"
        )
        return SyncOutcome(
            kind=OutcomeKind.FAILED,
            relative_path=entry.relative_path,
            reason=reason,
            error=error.last_error,
            attempts=error.attempts,
        )
