"""Formatting for generated Go source."""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Sequence

from ..errors import FormatError
from ..logging import artifact_extra, get_logger
from .lexer import STRING, Lexer

_BLANK_RUN_RE = re.compile(r"\n{3,}")
_HELD_MARK = "\x00%d\x00"
_HELD_RE = re.compile(r"\x00(\d+)\x00")


class GoFormatter:
    """Runs ``gofmt`` over generated source when it is installed.

    Without it, only whitespace is normalised: trailing spaces are dropped,
    blank-line runs collapse to one and the file ends with a single newline.
    String literals spanning lines are left exactly as written.
    """

    def __init__(
        self,
        command: str | None = "gofmt",
        runner: Callable[[Sequence[str], str], str] | None = None,
    ) -> None:
        self.command = command
        self._runner = runner
        self.logger = get_logger("format")
        if runner is None and command is not None and shutil.which(command) is None:
            self.logger.debug("%s not found on PATH; using whitespace normalisation", command)
            self.command = None

    def format(self, source: str, *, artifact: Path | str | None = None) -> str:
        if self.command is None:
            return self.normalise(source)
        runner = self._runner or self._default_runner
        try:
            return runner([self.command], source)
        except subprocess.CalledProcessError as exc:
            message = (exc.stderr or "").strip() or str(exc)
            self.logger.error("gofmt rejected generated source", extra=artifact_extra(artifact))
            raise FormatError(f"{self.command} failed: {message}", artifact=artifact) from exc

    @staticmethod
    def normalise(source: str) -> str:
        source = source.replace("\r\n", "\n")
        # Multi-line string literals are held out so their contents stay verbatim.
        held: List[str] = []
        parts: List[str] = []
        cursor = 0
        for token in Lexer(source).tokenize():
            if token.kind == STRING and "\n" in token.text:
                parts.append(source[cursor : token.start])
                parts.append(_HELD_MARK % len(held))
                held.append(token.text)
                cursor = token.end
        parts.append(source[cursor:])
        lines: List[str] = [line.rstrip() for line in "".join(parts).split("\n")]
        text = _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip("\n") + "\n"
        return _HELD_RE.sub(lambda match: held[int(match.group(1))], text)

    @staticmethod
    def _default_runner(args: Sequence[str], source: str) -> str:
        completed = subprocess.run(
            list(args),
            input=source,
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["GoFormatter"]
