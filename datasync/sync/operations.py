"""Filesystem mutations used by the sync engine.

Every method honors ``dry_run``: in dry run mode the intended change is
logged and nothing on disk is touched.
"""

import logging
import shutil
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SyncOperations:
    """Copy, create and delete operations with dry run support."""

    def __init__(self, dry_run: bool = False):
        """Initialize sync operations.

        Args:
            dry_run: If True, only log what would be done
        """
        self.dry_run = dry_run

    def _prefix(self) -> str:
        return "[dry run] " if self.dry_run else ""

    def make_dirs(self, path: PathLike) -> None:
        """Create a directory and any missing parents.

        Args:
            path: Directory to create
        """
        path = Path(path)
        if self.dry_run:
            logger.debug(f"{self._prefix()}Would create directory {path}")
            return
        path.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: PathLike, destination: PathLike) -> None:
        """Copy a file, creating missing destination parents first.

        File metadata (modification time, permission bits) is copied along
        with the content.

        Args:
            source: File to read
            destination: File to write (overwritten if present)

        Raises:
            IsADirectoryError: If destination is an existing directory
        """
        source = Path(source)
        destination = Path(destination)
        if self.dry_run:
            logger.debug(f"{self._prefix()}Would copy {source} -> {destination}")
            return
        if destination.is_dir():
            # shutil.copy2 would silently copy into the directory instead
            raise IsADirectoryError(f"Destination is a directory: {destination}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    def clean_tree(self, root: PathLike) -> int:
        """Delete everything inside root, leaving root as an empty directory.

        Args:
            root: Directory to clear

        Returns:
            Number of top-level children removed (or that would be removed)

        Raises:
            OSError: If a child cannot be removed
        """
        root = Path(root)
        if not root.exists():
            logger.info(f"{self._prefix()}Nothing to clean, {root} does not exist")
            return 0

        removed = 0
        for child in sorted(root.iterdir()):
            logger.info(f"{self._prefix()}Deleting {child}")
            removed += 1
            if self.dry_run:
                continue
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()

        if not self.dry_run:
            root.mkdir(parents=True, exist_ok=True)
        return removed
