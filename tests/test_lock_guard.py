import os

import pytest

from pagewatch.workflows import lock_guard
from pagewatch.workflows.lock_guard import mark_sent, should_run


def test_should_run_without_lock_file():
    assert should_run(None) is True


def test_should_run_when_marker_missing(tmp_path):
    assert should_run(tmp_path / "lock.txt") is True


def test_should_run_false_when_marker_present(tmp_path):
    marker = tmp_path / "lock.txt"
    marker.write_text("", encoding="utf-8")
    assert should_run(marker) is False
    assert should_run(str(marker)) is False


def test_should_run_false_for_dangling_symlink(tmp_path):
    marker = tmp_path / "lock.txt"
    os.symlink(tmp_path / "missing-target", marker)
    assert should_run(marker) is False


def test_should_run_missing_parent_counts_as_absent(tmp_path):
    assert should_run(tmp_path / "nope" / "lock.txt") is True


def test_should_run_propagates_permission_errors(monkeypatch, tmp_path):
    def denied(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(lock_guard.os, "lstat", denied)
    with pytest.raises(PermissionError):
        should_run(tmp_path / "lock.txt")


def test_mark_sent_creates_empty_marker(tmp_path):
    marker = tmp_path / "lock.txt"
    assert mark_sent(marker) is True
    assert marker.exists()
    assert marker.read_bytes() == b""


def test_mark_sent_is_idempotent_and_truncates(tmp_path):
    marker = tmp_path / "lock.txt"
    marker.write_text("stale contents", encoding="utf-8")
    mark_sent(marker)
    mark_sent(marker)
    assert marker.exists()
    assert marker.read_bytes() == b""


def test_mark_sent_without_lock_file_is_noop():
    assert mark_sent(None) is False


def test_mark_sent_missing_parent_raises(tmp_path):
    with pytest.raises(OSError):
        mark_sent(tmp_path / "missing" / "lock.txt")
