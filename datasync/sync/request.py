"""Fully resolved sync request handed to the sync engine."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Union

from ..utils import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from .modes import SyncDirection

if TYPE_CHECKING:
    from ..config import SyncSettings


def _unique_patterns(patterns: Iterable[str]) -> tuple[str, ...]:
    """Drop empty and repeated patterns, keeping first occurrence order."""
    seen: dict[str, None] = {}
    for pattern in patterns:
        if pattern and pattern not in seen:
            seen[pattern] = None
    return tuple(seen)


@dataclass(frozen=True)
class SyncRequest:
    """Immutable description of one sync run.

    Exactly one of ``source_root`` and ``destination_root`` is the local
    data folder; which one depends on ``direction``.

    Examples:
        >>> request = SyncRequest(
        ...     direction=SyncDirection.PUSH,
        ...     source_root=Path("/repo/data"),
        ...     destination_root=Path("/mnt/share/repo/data"),
        ... )
        >>> request.remote_root
        PosixPath('/mnt/share/repo/data')
    """

    direction: SyncDirection
    """Push (local -> remote) or pull (remote -> local)"""

    source_root: Path
    """Tree that is read"""

    destination_root: Path
    """Tree that is written"""

    clean_source: bool = False
    """Erase the contents of source_root before syncing"""

    clean_destination: bool = False
    """Erase the contents of destination_root before syncing"""

    exclusions: tuple[str, ...] = field(default_factory=tuple)
    """Glob patterns matched against entry names and relative paths"""

    max_retries: int = DEFAULT_MAX_RETRIES
    """Total attempts per entry (not retries after the first)"""

    dry_run: bool = False
    """Run all decision logic but never touch the filesystem"""

    retry_delay: float = DEFAULT_RETRY_DELAY
    """Fixed pause between attempts in seconds"""

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(
            self, "direction", SyncDirection.from_string(self.direction)
        )
        object.__setattr__(self, "source_root", Path(self.source_root))
        object.__setattr__(self, "destination_root", Path(self.destination_root))
        object.__setattr__(self, "exclusions", _unique_patterns(self.exclusions))
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay cannot be negative, got {self.retry_delay}")

    @property
    def local_root(self) -> Path:
        """The local data folder."""
        if self.direction.is_push:
            return self.source_root
        return self.destination_root

    @property
    def remote_root(self) -> Path:
        """The remote data folder."""
        if self.direction.is_push:
            return self.destination_root
        return self.source_root

    @classmethod
    def from_settings(
        cls,
        settings: "SyncSettings",
        local_root: Union[str, Path],
        remote_root: Union[str, Path],
    ) -> "SyncRequest":
        """Build a request from merged settings and resolved paths.

        Push reads the local folder and cleans the remote one when
        ``clean_remote`` is set. Pull reads the remote folder and cleans the
        local one when ``clean_local`` is set.

        Args:
            settings: Merged configuration
            local_root: Local data folder
            remote_root: Remote data folder

        Returns:
            SyncRequest for the configured direction
        """
        local_root = Path(local_root)
        remote_root = Path(remote_root)
        if settings.direction.is_push:
            source, destination = local_root, remote_root
            clean_destination = settings.clean_remote
        else:
            source, destination = remote_root, local_root
            clean_destination = settings.clean_local

        return cls(
            direction=settings.direction,
            source_root=source,
            destination_root=destination,
            clean_source=False,
            clean_destination=clean_destination,
            exclusions=tuple(settings.exclusions),
            max_retries=settings.max_retries,
            dry_run=settings.dry_run,
            retry_delay=settings.retry_delay,
        )
