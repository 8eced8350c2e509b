"""Sync engine for datasync - one-directional folder mirroring."""

from .comparator import FileComparator, digest, same_content
from .engine import SyncEngine, SyncPhase
from .matcher import PathMatcher, compile_pattern, matches
from .modes import SyncDirection
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

__all__ = [
    "SyncEngine",
    "SyncPhase",
    "SyncDirection",
    "SyncRequest",
    "SyncOperations",
    "DirectoryScanner",
    "TreeEntry",
    "FileComparator",
    "digest",
    "same_content",
    "PathMatcher",
    "compile_pattern",
    "matches",
    "with_retry",
    "OutcomeKind",
    "ProgressCallback",
    "SyncOutcome",
    "SyncReporter",
    "SyncSummary",
]
