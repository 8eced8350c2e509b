"""Tests for the FileComparator class."""

import hashlib

import pytest

from datasync.sync.comparator import FileComparator, digest, same_content


class TestDigest:
    """Tests for content digests."""

    def test_digest_is_sha256(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_bytes(b"hello world")

        assert digest(path) == hashlib.sha256(b"hello world").hexdigest()

    def test_digest_reads_whole_file_in_chunks(self, tmp_path):
        """A chunk size smaller than the file still hashes everything."""
        content = b"0123456789" * 100
        path = tmp_path / "big.bin"
        path.write_bytes(content)

        comparator = FileComparator(chunk_size=7)

        assert comparator.digest(path) == hashlib.sha256(content).hexdigest()

    def test_digest_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert digest(path) == hashlib.sha256(b"").hexdigest()

    def test_digest_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            digest(tmp_path / "missing.txt")


class TestSameContent:
    """Tests for content equality."""

    def test_identical_files(self, tmp_path):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_text("same")
        b.write_text("same")

        assert same_content(a, b) is True

    def test_different_content_same_size(self, tmp_path):
        """Files of equal size are compared by digest."""
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_text("abcd")
        b.write_text("abce")

        assert same_content(a, b) is False

    def test_different_sizes_skip_hashing(self, tmp_path, monkeypatch):
        """Files with different sizes are never read."""
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_text("short")
        b.write_text("much longer")

        comparator = FileComparator()

        def fail(path):
            raise AssertionError("digest should not be computed")

        monkeypatch.setattr(comparator, "digest", fail)

        assert comparator.same_content(a, b) is False

    def test_missing_file_raises(self, tmp_path):
        a = tmp_path / "a.txt"
        a.write_text("x")

        with pytest.raises(OSError):
            same_content(a, tmp_path / "missing.txt")
