"""Exceptions raised by datasync."""

from typing import Optional


class DataSyncError(Exception):
    """Base exception for all datasync errors."""


class ConfigError(DataSyncError):
    """Configuration file or command line settings are invalid."""


class RemoteResolutionError(DataSyncError):
    """The remote data location could not be derived from the repository."""


class SourceMissingError(DataSyncError):
    """The source tree root does not exist or is not a directory."""


class CleanError(DataSyncError):
    """Clearing a tree before syncing failed."""


class RetryExhaustedError(DataSyncError):
    """An operation kept failing until the retry budget was used up."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        message = f"Failed after {attempts} attempt(s)"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)


class DestinationError(DataSyncError):
    """The destination tree root could not be prepared for copying."""
