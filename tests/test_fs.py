"""Filesystem writes, dry runs and the project lock."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from kitgen.errors import LockError, NotFoundError
from kitgen.fs import LOCK_FILE_NAME, DryRunFileSystem, FileSystem


def test_write_creates_parents_and_replaces(tmp_path: Path) -> None:
    fs = FileSystem(tmp_path)
    fs.write_file("a/b/c.go", "package c\n")
    fs.write_file("a/b/c.go", "package d\n")
    assert (tmp_path / "a/b/c.go").read_text(encoding="utf-8") == "package d\n"
    assert sorted(p.name for p in (tmp_path / "a/b").iterdir()) == ["c.go"]


def test_append_and_executable(tmp_path: Path) -> None:
    fs = FileSystem(tmp_path)
    fs.write_file("log.txt", "one\n", append=True)
    fs.write_file("log.txt", "two\n", append=True)
    assert fs.read_file("log.txt") == "one\ntwo\n"
    fs.write_file("compile.sh", "#!/bin/sh\n", executable=True)
    if os.name == "posix":
        assert os.access(tmp_path / "compile.sh", os.X_OK)


def test_read_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        FileSystem(tmp_path).read_file("nope.go")


def test_lock_is_exclusive_and_released(tmp_path: Path) -> None:
    fs = FileSystem(tmp_path)
    with fs.lock() as lock_path:
        assert lock_path == tmp_path.resolve() / LOCK_FILE_NAME
        assert lock_path.read_text(encoding="utf-8") == str(os.getpid())
        with pytest.raises(LockError):
            with fs.lock():
                pass
    assert not (tmp_path / LOCK_FILE_NAME).exists()


def test_dry_run_keeps_writes_in_memory(tmp_path: Path) -> None:
    (tmp_path / "x.go").write_text("package x\n", encoding="utf-8")
    fs = DryRunFileSystem(tmp_path)
    fs.write_file("x.go", "package x\n\nvar A = 1\n")
    fs.write_file("new/y.go", "package y\n")
    assert fs.exists("new/y.go")
    assert fs.read_file("x.go").endswith("var A = 1\n")
    assert (tmp_path / "x.go").read_text(encoding="utf-8") == "package x\n"
    assert not (tmp_path / "new").exists()

    diff = fs.diff()
    assert "--- x.go (original)" in diff
    assert "+var A = 1" in diff
    assert "+++ new/y.go (updated)" in diff
    with fs.lock():
        assert not (tmp_path / LOCK_FILE_NAME).exists()
