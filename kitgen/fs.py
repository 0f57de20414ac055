"""Filesystem access for generated artifacts."""

from __future__ import annotations

import difflib
import os
from contextlib import contextmanager
from pathlib import Path, PurePath
from typing import Dict, Iterator, List

from .errors import LockError, NotFoundError
from .logging import artifact_extra, get_logger

LOCK_FILE_NAME = ".kitgen.lock"


class FileSystem:
    """Reads and writes files relative to a project root.

    Whole-file writes go through a temporary sibling and ``os.replace`` so an
    artifact is either fully rewritten or left untouched.
    """

    sep = os.sep

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        self.logger = get_logger("fs")

    def resolve(self, path: PurePath | str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def exists(self, path: PurePath | str) -> bool:
        return self.resolve(path).exists()

    def read_file(self, path: PurePath | str) -> str:
        target = self.resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"File missing: {path}", artifact=path) from exc

    def mkdir_all(self, path: PurePath | str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)

    def write_file(
        self, path: PurePath | str, text: str, *, append: bool = False, executable: bool = False
    ) -> None:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if append:
            with target.open("a", encoding="utf-8") as handle:
                handle.write(text)
            return
        tmp = target.with_name(f"{target.name}.tmp.{os.getpid()}")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, target)
            if executable:
                os.chmod(target, 0o755)
        finally:
            if tmp.exists():
                tmp.unlink()
        self.logger.debug("Wrote %d bytes", len(text), extra=artifact_extra(path))

    @contextmanager
    def lock(self, name: str = LOCK_FILE_NAME) -> Iterator[Path]:
        """Hold an advisory lock file for the duration of one command."""
        lock_path = self.root / name
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            raise LockError(
                f"{lock_path} exists; another kitgen run is in progress "
                "(delete the file if that run has died)",
                artifact=lock_path,
            ) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(str(os.getpid()))
            yield lock_path
        finally:
            if lock_path.exists():
                lock_path.unlink()


class DryRunFileSystem(FileSystem):
    """Keeps writes in memory and reports them as unified diffs."""

    def __init__(self, root: Path | str) -> None:
        super().__init__(root)
        self.pending: Dict[Path, str] = {}

    def exists(self, path: PurePath | str) -> bool:
        return self.resolve(path) in self.pending or super().exists(path)

    def read_file(self, path: PurePath | str) -> str:
        target = self.resolve(path)
        if target in self.pending:
            return self.pending[target]
        return super().read_file(path)

    def mkdir_all(self, path: PurePath | str) -> None:
        return None

    def write_file(
        self, path: PurePath | str, text: str, *, append: bool = False, executable: bool = False
    ) -> None:
        target = self.resolve(path)
        if append and self.exists(path):
            text = self.read_file(path) + text
        self.pending[target] = text

    @contextmanager
    def lock(self, name: str = LOCK_FILE_NAME) -> Iterator[Path]:
        yield self.root / name

    def diff(self) -> str:
        chunks: List[str] = []
        for target, updated in self.pending.items():
            original = target.read_text(encoding="utf-8") if target.exists() else ""
            relative = target.relative_to(self.root).as_posix()
            chunks.extend(
                difflib.unified_diff(
                    original.splitlines(keepends=True),
                    updated.splitlines(keepends=True),
                    fromfile=f"{relative} (original)",
                    tofile=f"{relative} (updated)",
                )
            )
        return "".join(chunks)


__all__ = ["DryRunFileSystem", "FileSystem", "LOCK_FILE_NAME"]
