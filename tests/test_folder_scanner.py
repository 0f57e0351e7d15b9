"""Tests for scan_folder()."""

import os
import time

from packages.core.monitor.folder_scanner import scan_folder


class TestScanFolder:
    def test_empty_folder(self, folders):
        root = folders("empty")

        snapshot = scan_folder(str(root))

        assert snapshot.file_count == 0
        assert snapshot.newest_mtime == 0.0

    def test_counts_files_recursively(self, folders):
        root = folders("rec")
        (root / "a.mkv").write_bytes(b"x")
        (root / "sub").mkdir()
        (root / "sub" / "b.mkv").write_bytes(b"y")
        (root / "sub" / "deeper").mkdir()
        (root / "sub" / "deeper" / "c.mkv").write_bytes(b"z")

        snapshot = scan_folder(str(root))

        assert snapshot.file_count == 3

    def test_directories_are_not_counted(self, folders):
        root = folders("dirs")
        (root / "one").mkdir()
        (root / "two").mkdir()

        assert scan_folder(str(root)).file_count == 0

    def test_reports_newest_mtime(self, folders):
        root = folders("mtimes")
        old = root / "old.mkv"
        new = root / "new.mkv"
        old.write_bytes(b"x")
        new.write_bytes(b"y")
        now = time.time()
        os.utime(old, (now - 100, now - 100))
        os.utime(new, (now - 10, now - 10))

        snapshot = scan_folder(str(root))

        assert abs(snapshot.newest_mtime - (now - 10)) < 1.0

    def test_missing_folder_returns_none(self, tmp_path):
        assert scan_folder(str(tmp_path / "does-not-exist")) is None

    def test_file_path_returns_none(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")

        assert scan_folder(str(f)) is None
