"""Utility functions and constants for datasync."""

# =============================================================================
# Defaults
# =============================================================================

# Name of the synced folder inside the repository and the remote location
DEFAULT_FOLDER_NAME: str = "data"

# Per-repository configuration file
DEFAULT_CONFIG_FILE_NAME: str = ".datasync.json"

# Retry configuration for transient filesystem errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds, fixed between attempts

# Read size used when hashing files (64 KB)
DEFAULT_HASH_CHUNK_SIZE: int = 64 * 1024


# =============================================================================
# Formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def format_duration(seconds: float) -> str:
    """Format an elapsed time for the console summary.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration (e.g., "0.42s", "3m 05s", "1h 02m 03s")

    Examples:
        >>> format_duration(0.4212)
        '0.42s'
        >>> format_duration(185)
        '3m 05s'
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m {secs:02d}s"
