"""Constructor bodies as ordered, tagged statements.

Generated constructors follow one shape: some setup, one binding statement per
endpoint, then a trailing ``return``. Extending a constructor detaches the
return, appends the missing bindings and re-attaches the return, so repeated
regeneration never duplicates either.
"""

from __future__ import annotations

import enum
import re
import textwrap
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Set, Tuple

from .lexer import EOF, IDENT, NEWLINE, Lexer, ends_statement

_MIDDLEWARE_RE = re.compile(r"^(\w+)\s*=\s*[\w.]+\(.*\)\(\s*\1\s*\)$", re.DOTALL)


class StatementKind(enum.Enum):
    PREAMBLE = "preamble"
    BIND = "bind"
    MIDDLEWARE = "middleware"
    RETURN = "return"


@dataclass
class Statement:
    """One top-level statement; ``text`` includes its leading whitespace and comments."""

    text: str
    kind: StatementKind = StatementKind.PREAMBLE
    key: Optional[str] = None


@dataclass(frozen=True)
class Binding:
    """A statement to add unless a statement bound to ``key`` already exists."""

    key: str
    text: str


def split_statements(body: str) -> List[Tuple[int, int]]:
    """Return ``(start, end)`` spans of the top-level statements in ``body``."""
    spans: List[Tuple[int, int]] = []
    depth = 0
    first = last = None
    for token in Lexer(body).tokenize():
        if token.kind == EOF:
            break
        if token.kind == NEWLINE:
            if depth == 0 and last is not None and ends_statement(last):
                spans.append((first.start, last.end))
                first = last = None
            continue
        if token.text == ";" and depth == 0:
            if first is not None:
                spans.append((first.start, last.end))
            first = last = None
            continue
        if token.text in "([{":
            depth += 1
        elif token.text in ")]}":
            depth -= 1
        if first is None:
            first = token
        last = token
    if first is not None:
        spans.append((first.start, last.end))
    return spans


@dataclass
class ConstructorBody:
    statements: List[Statement] = field(default_factory=list)
    tail: str = "\n"

    @classmethod
    def parse(cls, body: str, binding: Optional[Pattern[str]] = None) -> "ConstructorBody":
        statements: List[Statement] = []
        position = 0
        for start, end in split_statements(body):
            text = body[position:end]
            statements.append(_classify(text, body[start:end], binding))
            position = end
        return cls(statements=statements, tail=body[position:])

    def keys(self) -> Set[str]:
        return {stmt.key for stmt in self.statements if stmt.key is not None}

    @property
    def return_statement(self) -> Optional[Statement]:
        if self.statements and self.statements[-1].kind is StatementKind.RETURN:
            return self.statements[-1]
        return None

    def extend(self, bindings: Sequence[Binding], *, indent: str = "\t") -> List[str]:
        """Append bindings whose key is not yet bound; return the keys added."""
        present = self.keys()
        missing = [item for item in bindings if item.key not in present]
        if not missing:
            return []
        returned = self.statements.pop() if self.return_statement else None
        for item in missing:
            text = "\n" + textwrap.indent(item.text.strip("\n"), indent)
            self.statements.append(Statement(text=text, kind=StatementKind.BIND, key=item.key))
            present.add(item.key)
        if returned is not None:
            self.statements.append(returned)
        return [item.key for item in missing]

    def render(self) -> str:
        return "".join(stmt.text for stmt in self.statements) + self.tail


def _classify(text: str, code: str, binding: Optional[Pattern[str]]) -> Statement:
    first = next((tok for tok in Lexer(code).tokenize() if tok.kind != NEWLINE), None)
    if first is not None and first.kind == IDENT and first.text == "return":
        return Statement(text=text, kind=StatementKind.RETURN)
    if binding is not None:
        match = binding.search(code)
        if match:
            return Statement(text=text, kind=StatementKind.BIND, key=match.group(1))
    if _MIDDLEWARE_RE.match(code.strip()):
        return Statement(text=text, kind=StatementKind.MIDDLEWARE)
    return Statement(text=text, kind=StatementKind.PREAMBLE)


__all__ = ["Binding", "ConstructorBody", "Statement", "StatementKind", "split_statements"]
