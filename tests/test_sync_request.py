"""Unit tests for sync requests."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from datasync.config import SyncSettings
from datasync.sync.modes import SyncDirection
from datasync.sync.request import SyncRequest


class TestSyncDirection:
    """Tests for SyncDirection."""

    def test_from_string(self):
        assert SyncDirection.from_string("push") == SyncDirection.PUSH
        assert SyncDirection.from_string("PULL") == SyncDirection.PULL
        assert SyncDirection.from_string(" Push ") == SyncDirection.PUSH

    def test_from_string_passes_enum_through(self):
        assert SyncDirection.from_string(SyncDirection.PULL) is SyncDirection.PULL

    def test_invalid_direction(self):
        with pytest.raises(ValueError, match="Invalid sync direction"):
            SyncDirection.from_string("sideways")

    def test_properties(self):
        assert SyncDirection.PUSH.is_push is True
        assert SyncDirection.PUSH.is_pull is False
        assert SyncDirection.PULL.is_pull is True


class TestSyncRequest:
    """Tests for SyncRequest class."""

    def test_create_request(self):
        request = SyncRequest(
            direction=SyncDirection.PUSH,
            source_root=Path("/repo/data"),
            destination_root=Path("/share/repo/data"),
        )

        assert request.max_retries == 3
        assert request.retry_delay == 1.0
        assert request.dry_run is False
        assert request.clean_source is False
        assert request.clean_destination is False
        assert request.exclusions == ()

    def test_normalization(self):
        """Strings are converted to paths and directions."""
        request = SyncRequest(
            direction="pull",
            source_root="/share/repo/data",
            destination_root="/repo/data",
            exclusions=["*.tmp", "", "*.tmp", "*.log"],
        )

        assert request.direction == SyncDirection.PULL
        assert isinstance(request.source_root, Path)
        assert request.exclusions == ("*.tmp", "*.log")

    def test_request_is_immutable(self):
        request = SyncRequest(SyncDirection.PUSH, Path("/a"), Path("/b"))

        with pytest.raises(FrozenInstanceError):
            request.dry_run = True

    def test_invalid_max_retries(self):
        with pytest.raises(ValueError, match="max_retries"):
            SyncRequest(SyncDirection.PUSH, Path("/a"), Path("/b"), max_retries=0)

    def test_local_and_remote_roots(self):
        push = SyncRequest(SyncDirection.PUSH, Path("/local"), Path("/remote"))
        pull = SyncRequest(SyncDirection.PULL, Path("/remote"), Path("/local"))

        assert push.local_root == Path("/local")
        assert push.remote_root == Path("/remote")
        assert pull.local_root == Path("/local")
        assert pull.remote_root == Path("/remote")

    def test_from_settings_push(self):
        """Push reads local, writes remote and cleans the remote side."""
        settings = SyncSettings(
            direction=SyncDirection.PUSH,
            clean_remote=True,
            clean_local=False,
            exclusions=["*.tmp"],
            max_retries=5,
            dry_run=True,
        )

        request = SyncRequest.from_settings(settings, "/repo/data", "/share/data")

        assert request.source_root == Path("/repo/data")
        assert request.destination_root == Path("/share/data")
        assert request.clean_destination is True
        assert request.clean_source is False
        assert request.exclusions == ("*.tmp",)
        assert request.max_retries == 5
        assert request.dry_run is True

    def test_from_settings_pull(self):
        """Pull reads remote, writes local and cleans the local side."""
        settings = SyncSettings(
            direction=SyncDirection.PULL, clean_remote=True, clean_local=False
        )

        request = SyncRequest.from_settings(settings, "/repo/data", "/share/data")

        assert request.source_root == Path("/share/data")
        assert request.destination_root == Path("/repo/data")
        assert request.clean_destination is False
        assert request.clean_source is False

    def test_from_settings_pull_clean_local(self):
        settings = SyncSettings(direction=SyncDirection.PULL, clean_local=True)

        request = SyncRequest.from_settings(settings, "/repo/data", "/share/data")

        assert request.clean_destination is True
