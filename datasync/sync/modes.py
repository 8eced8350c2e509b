"""Sync directions."""

from enum import Enum


class SyncDirection(str, Enum):
    """Direction in which the data folder is mirrored."""

    PUSH = "push"
    """Copy the local data folder to the remote location"""

    PULL = "pull"
    """Copy the remote data folder into the local working copy"""

    @classmethod
    def from_string(cls, value: str) -> "SyncDirection":
        """Parse a direction name.

        Args:
            value: "push" or "pull" (case-insensitive)

        Returns:
            Matching SyncDirection

        Raises:
            ValueError: If value is not a known direction
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for direction in cls:
            if direction.value == normalized:
                return direction
        valid = ", ".join(d.value for d in cls)
        raise ValueError(
            f"Invalid sync direction: {value!r} (expected one of: {valid})"
        )

    @property
    def is_push(self) -> bool:
        return self is SyncDirection.PUSH

    @property
    def is_pull(self) -> bool:
        return self is SyncDirection.PULL
