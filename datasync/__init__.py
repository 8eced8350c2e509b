"""datasync - Mirror a data folder between a git working copy and its origin."""

from .config import SyncSettings, load_config_file, merge_settings
from .exceptions import (
    CleanError,
    ConfigError,
    DataSyncError,
    DestinationError,
    RemoteResolutionError,
    RetryExhaustedError,
    SourceMissingError,
)
from .remote import RemoteResolver, ResolvedPaths
from .sync import SyncDirection, SyncEngine, SyncRequest, SyncSummary

__all__ = [
    "SyncEngine",
    "SyncDirection",
    "SyncRequest",
    "SyncSummary",
    "SyncSettings",
    "load_config_file",
    "merge_settings",
    "RemoteResolver",
    "ResolvedPaths",
    "DataSyncError",
    "ConfigError",
    "RemoteResolutionError",
    "SourceMissingError",
    "CleanError",
    "DestinationError",
    "RetryExhaustedError",
]
