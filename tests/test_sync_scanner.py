"""Tests for directory tree enumeration."""

import os

import pytest

from datasync.exceptions import SourceMissingError
from datasync.sync.scanner import DirectoryScanner, TreeEntry


@pytest.fixture
def tree(tmp_path):
    """Create a small tree with nested directories."""
    root = tmp_path / "root"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "a.txt").write_text("a")
    (root / "b.tmp").write_text("b")
    (root / "sub" / "c.txt").write_text("c")
    (root / "sub" / "deep" / "d.txt").write_text("d")
    return root


class TestDirectoryScanner:
    """Tests for DirectoryScanner."""

    def test_scan_returns_all_entries(self, tree):
        entries = DirectoryScanner().scan(tree)

        assert [e.relative_path for e in entries] == [
            "a.txt",
            "b.tmp",
            "sub",
            "sub/c.txt",
            "sub/deep",
            "sub/deep/d.txt",
        ]

    def test_directories_flagged(self, tree):
        entries = {e.relative_path: e for e in DirectoryScanner().scan(tree)}

        assert entries["sub"].is_directory is True
        assert entries["sub/deep"].is_directory is True
        assert entries["a.txt"].is_directory is False

    def test_directory_precedes_children(self, tree):
        """Every directory is yielded before anything below it."""
        order = [e.relative_path for e in DirectoryScanner().scan(tree)]

        for path in order:
            parent = path.rpartition("/")[0]
            if parent:
                assert order.index(parent) < order.index(path)

    def test_entry_paths(self, tree):
        entry = next(
            e for e in DirectoryScanner().scan(tree) if e.relative_path == "sub/c.txt"
        )

        assert entry.full_path == tree / "sub" / "c.txt"
        assert entry.name == "c.txt"

    def test_iter_tree_is_lazy(self, tree):
        """Entries are produced one at a time."""
        iterator = DirectoryScanner().iter_tree(tree)

        first = next(iterator)

        assert isinstance(first, TreeEntry)
        assert first.relative_path == "a.txt"

    def test_iter_tree_is_restartable(self, tree):
        """Each call walks the tree again from scratch."""
        scanner = DirectoryScanner()
        first = list(scanner.iter_tree(tree))
        (tree / "new.txt").write_text("new")
        second = list(scanner.iter_tree(tree))

        assert len(second) == len(first) + 1
        assert "new.txt" in [e.relative_path for e in second]

    def test_empty_directory(self, tmp_path):
        assert DirectoryScanner().scan(tmp_path) == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(SourceMissingError, match="does not exist"):
            DirectoryScanner().iter_tree(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")

        with pytest.raises(SourceMissingError, match="not a directory"):
            DirectoryScanner().scan(path)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_directory_symlink_not_followed(self, tree):
        """A symlink cycle does not make the walk infinite."""
        try:
            os.symlink(tree, tree / "sub" / "loop", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        entries = {e.relative_path: e for e in DirectoryScanner().scan(tree)}

        assert entries["sub/loop"].is_directory is True
        assert not any(p.startswith("sub/loop/") for p in entries)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_unreadable_directory_is_skipped(self, tree):
        locked = tree / "locked"
        locked.mkdir()
        (locked / "hidden.txt").write_text("x")
        locked.chmod(0)
        try:
            if os.access(locked, os.R_OK):
                pytest.skip("running with elevated permissions")
            paths = [e.relative_path for e in DirectoryScanner().scan(tree)]
        finally:
            locked.chmod(0o755)

        assert "locked" in paths
        assert "locked/hidden.txt" not in paths
