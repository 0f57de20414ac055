"""Brace-structured IDL documents (protobuf and Thrift) kept as source text.

Top-level items are either statements (``syntax = "proto3";``,
``namespace go foo``) or blocks (``message Foo { ... }``). Each item keeps its
text so an existing schema is re-emitted verbatim apart from the additions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import SourceParseError
from ..source.gofile import insert_lines
from ..source.lexer import EOF, IDENT, NEWLINE, Lexer, Token

BLOCK_KEYWORDS = frozenset(
    {"message", "service", "enum", "oneof", "extend", "struct", "union", "exception"}
)
_NOT_METHOD_NAMES = frozenset({"returns", "throws", "stream", "rpc"})
STATEMENT = "statement"


@dataclass
class IdlItem:
    raw: str
    kind: str = STATEMENT
    name: Optional[str] = None
    members: List[str] = field(default_factory=list)
    close: Optional[int] = None


@dataclass
class IdlDocument:
    items: List[IdlItem] = field(default_factory=list)
    trailer: str = ""

    def find(self, kind: str, name: str) -> Optional[IdlItem]:
        for item in self.items:
            if item.kind == kind and item.name == name:
                return item
        return None

    def names(self, kind: str) -> List[str]:
        return [item.name for item in self.items if item.kind == kind and item.name]

    def append(self, item: IdlItem) -> None:
        self.items.append(item)

    def replace(self, old: IdlItem, new: IdlItem) -> None:
        self.items[self.items.index(old)] = new

    def render(self) -> str:
        chunks: List[str] = []
        previous: Optional[IdlItem] = None
        for item in self.items:
            if previous is not None:
                both_statements = previous.kind == STATEMENT and item.kind == STATEMENT
                chunks.append("\n" if both_statements else "\n\n")
            chunks.append(item.raw)
            previous = item
        if self.trailer:
            chunks.append("\n\n" + self.trailer)
        return "".join(chunks).strip("\n") + "\n"


class IdlParser:
    """Parses ``.proto`` or ``.thrift`` text into an ``IdlDocument``."""

    def __init__(self, *, hash_comments: bool = False, artifact: Path | str | None = None) -> None:
        self.hash_comments = hash_comments
        self.artifact = artifact

    def parse(self, text: str) -> IdlDocument:
        tokens = Lexer(text, hash_comments=self.hash_comments, artifact=self.artifact).tokenize()
        document = IdlDocument()
        index = 0
        prev_end = 0
        while True:
            while tokens[index].kind == NEWLINE or tokens[index].text == ";":
                index += 1
            start = tokens[index]
            if start.kind == EOF:
                break
            collected: List[Token] = []
            block: Optional[Sequence[Token]] = None
            while True:
                token = tokens[index]
                if token.kind == EOF:
                    break
                if token.text == "{":
                    close = _matching_brace(tokens, index)
                    if close == -1:
                        raise SourceParseError("unbalanced '{'", line=token.line, artifact=self.artifact)
                    block = tokens[index : close + 1]
                    index = close + 1
                    if tokens[index].text == ";":
                        index += 1
                    break
                if token.text == ";":
                    collected.append(token)
                    index += 1
                    break
                if token.kind == NEWLINE:
                    if collected and collected[0].text not in BLOCK_KEYWORDS:
                        break
                    index += 1
                    continue
                collected.append(token)
                index += 1

            last = block[-1] if block else (collected[-1] if collected else start)
            end = tokens[index - 1].end if block and tokens[index - 1].text == ";" else last.end
            end = _line_end(text, end)
            segment = text[prev_end : start.start]
            raw_start = prev_end + len(segment) - len(segment.lstrip())
            raw = text[raw_start:end]
            if block is None:
                document.append(IdlItem(raw=raw))
            else:
                kind = collected[0].text if collected else "block"
                name = collected[1].text if len(collected) > 1 and collected[1].kind == IDENT else None
                document.append(
                    IdlItem(
                        raw=raw,
                        kind=kind,
                        name=name,
                        members=_method_names(block[1:-1]) if kind == "service" else [],
                        close=block[-1].start - raw_start,
                    )
                )
            prev_end = end
        document.trailer = text[prev_end:].strip()
        return document

    def extend_block(self, item: IdlItem, lines: Sequence[str], indent: str = "  ") -> IdlItem:
        """Return ``item`` with ``lines`` appended inside its braces."""
        if item.close is None:
            raise ValueError(f"{item.kind} {item.name} is not a block")
        raw = insert_lines(item.raw, item.close, lines, indent=indent)
        return self.parse(raw).items[0]


def _matching_brace(tokens: Sequence[Token], open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(tokens)):
        if tokens[index].text == "{":
            depth += 1
        elif tokens[index].text == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _method_names(tokens: Sequence[Token]) -> List[str]:
    names: List[str] = []
    depth = 0
    for index, token in enumerate(tokens):
        if token.text in "({[" and token.text:
            depth += 1
        elif token.text in ")}]" and token.text:
            depth -= 1
        elif (
            depth == 0
            and token.kind == IDENT
            and token.text not in _NOT_METHOD_NAMES
            and index + 1 < len(tokens)
            and tokens[index + 1].text == "("
        ):
            names.append(token.text)
    return names


def _line_end(text: str, end: int) -> int:
    newline = text.find("\n", end)
    newline = len(text) if newline == -1 else newline
    rest = text[end:newline].strip()
    if rest.startswith("//") or rest.startswith("#"):
        return newline
    return end


__all__ = ["BLOCK_KEYWORDS", "IdlDocument", "IdlItem", "IdlParser", "STATEMENT"]
