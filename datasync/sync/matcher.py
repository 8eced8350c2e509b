"""Exclusion pattern matching.

Patterns use shell glob syntax (``*``, ``?``, ``[seq]``, ``[!seq]``) and are
matched case-insensitively against both the bare entry name and the path
relative to the sync root. Matching is flat: ``*`` also matches ``/`` and a
pattern that matches a directory does not exclude the entries below it unless
it matches them as well.
"""

import fnmatch
import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


def compile_pattern(pattern: str) -> Optional[re.Pattern]:
    """Compile a glob pattern to a case-insensitive regex.

    Args:
        pattern: Glob pattern (e.g., "*.tmp", "cache/*")

    Returns:
        Compiled regex, or None if the pattern cannot be compiled
    """
    try:
        return re.compile(fnmatch.translate(pattern), re.IGNORECASE)
    except (re.error, TypeError) as e:
        logger.debug(f"Ignoring malformed exclusion pattern {pattern!r}: {e}")
        return None


class PathMatcher:
    """Matches entries against a fixed set of exclusion patterns.

    Examples:
        >>> matcher = PathMatcher(["*.tmp", "build/*"])
        >>> matcher.matches("a.TMP", "sub/a.TMP")
        True
        >>> matcher.matches("out.o", "build/out.o")
        True
        >>> matcher.matches("a.txt", "a.txt")
        False
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        """Initialize the matcher.

        Args:
            patterns: Glob patterns; malformed ones never match
        """
        self.patterns: tuple[str, ...] = tuple(patterns or ())
        self._compiled: list[tuple[str, re.Pattern]] = []
        for pattern in self.patterns:
            regex = compile_pattern(pattern)
            if regex is not None:
                self._compiled.append((pattern, regex))

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def first_match(self, entry_name: str, relative_path: str) -> Optional[str]:
        """Return the first pattern matching the entry, if any.

        Args:
            entry_name: Bare file or directory name
            relative_path: Path relative to the sync root (forward slashes)

        Returns:
            The matching pattern as configured, or None
        """
        for pattern, regex in self._compiled:
            if regex.match(entry_name) or regex.match(relative_path):
                return pattern
        return None

    def matches(self, entry_name: str, relative_path: str) -> bool:
        """Check whether the entry matches any pattern."""
        return self.first_match(entry_name, relative_path) is not None


def matches(entry_name: str, relative_path: str, patterns: Iterable[str]) -> bool:
    """Check an entry against patterns without keeping a matcher around.

    Args:
        entry_name: Bare file or directory name
        relative_path: Path relative to the sync root
        patterns: Glob patterns

    Returns:
        True if the name or the relative path matches any pattern
    """
    return PathMatcher(patterns).matches(entry_name, relative_path)
