"""Directory tree enumeration for sync operations."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

from ..exceptions import SourceMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeEntry:
    """A file or directory found while walking a tree."""

    full_path: Path
    """Absolute path to the entry"""

    relative_path: str
    """Path relative to the walked root (forward slashes on all platforms)"""

    is_directory: bool
    """Whether the entry is a directory"""

    @property
    def name(self) -> str:
        """Bare entry name."""
        return self.full_path.name


class DirectoryScanner:
    """Walks directory trees depth-first.

    Every directory is yielded before the entries below it, so a consumer
    can create destination directories before copying files into them.
    Entries within one directory are yielded in name order.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for entry in scanner.iter_tree(Path("/repo/data")):
        ...     print(entry.relative_path, entry.is_directory)
    """

    def iter_tree(self, root: Union[str, Path]) -> Iterator[TreeEntry]:
        """Lazily enumerate every entry below root.

        Each call starts a fresh walk. Symbolic links to directories are
        yielded as directories but not descended into.

        Args:
            root: Directory to walk

        Yields:
            TreeEntry for every file and directory below root

        Raises:
            SourceMissingError: If root does not exist or is not a directory
        """
        root = Path(root)
        if not root.exists():
            raise SourceMissingError(f"Source directory does not exist: {root}")
        if not root.is_dir():
            raise SourceMissingError(f"Source path is not a directory: {root}")
        return self._walk(root, root)

    def _walk(self, directory: Path, root: Path) -> Iterator[TreeEntry]:
        try:
            with os.scandir(directory) as it:
                items = sorted(it, key=lambda item: item.name)
        except OSError as e:
            # Skip directories we can't read
            logger.warning(f"Cannot list directory {directory}: {e}")
            return

        for item in items:
            path = Path(item.path)
            try:
                is_dir = item.is_dir()
            except OSError as e:
                logger.warning(f"Cannot stat {path}: {e}")
                continue

            yield TreeEntry(
                full_path=path,
                relative_path=path.relative_to(root).as_posix(),
                is_directory=is_dir,
            )

            if is_dir:
                if item.is_symlink():
                    logger.debug(f"Not following directory symlink: {path}")
                    continue
                yield from self._walk(path, root)

    def scan(self, root: Union[str, Path]) -> list[TreeEntry]:
        """Materialize one walk of root.

        Args:
            root: Directory to walk

        Returns:
            List of all entries in walk order

        Raises:
            SourceMissingError: If root does not exist or is not a directory
        """
        return list(self.iter_tree(root))
