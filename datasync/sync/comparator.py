"""Content comparison for deciding whether a file needs to be copied."""

import hashlib
from pathlib import Path
from typing import Union

from ..utils import DEFAULT_HASH_CHUNK_SIZE

PathLike = Union[str, Path]


class FileComparator:
    """Compares files by SHA-256 digest of their content."""

    def __init__(self, chunk_size: int = DEFAULT_HASH_CHUNK_SIZE):
        """Initialize file comparator.

        Args:
            chunk_size: Number of bytes read per step while hashing
        """
        self.chunk_size = chunk_size

    def digest(self, path: PathLike) -> str:
        """Compute the SHA-256 digest of a file.

        Args:
            path: File to hash

        Returns:
            Hex digest of the whole file content

        Raises:
            OSError: If the file cannot be read
        """
        sha256 = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(self.chunk_size), b""):
                sha256.update(chunk)
        return sha256.hexdigest()

    def same_content(self, path_a: PathLike, path_b: PathLike) -> bool:
        """Check whether two files have identical content.

        Files with different sizes cannot have the same digest, so they are
        reported as different without being read.

        Args:
            path_a: First file
            path_b: Second file

        Returns:
            True if both digests are equal

        Raises:
            OSError: If either file cannot be read
        """
        if Path(path_a).stat().st_size != Path(path_b).stat().st_size:
            return False
        return self.digest(path_a) == self.digest(path_b)


_default_comparator = FileComparator()


def digest(path: PathLike) -> str:
    """Compute the SHA-256 digest of a file with the default chunk size."""
    return _default_comparator.digest(path)


def same_content(path_a: PathLike, path_b: PathLike) -> bool:
    """Check two files for equal content with the default comparator."""
    return _default_comparator.same_content(path_a, path_b)
