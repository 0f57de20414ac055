"""Tokenizer for Go source and the brace-structured IDLs (protobuf, Thrift)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..errors import SourceParseError

IDENT = "ident"
NUMBER = "number"
STRING = "string"
CHAR = "char"
COMMENT = "comment"
NEWLINE = "newline"
PUNCT = "punct"
EOF = "eof"

_TWO_CHAR_OPS = (
    ":=", "<-", "++", "--", "==", "!=", "<=", ">=", "&&", "||",
    "+=", "-=", "*=", "/=", "<<", ">>",
)

# Go inserts a semicolon at a line break after these.
_TERMINATING_KEYWORDS = {"break", "continue", "fallthrough", "return"}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: int
    end: int
    line: int


def ends_statement(token: Token) -> bool:
    """True when a newline after ``token`` terminates the statement."""
    if token.kind in (IDENT, NUMBER, STRING, CHAR):
        return True
    return token.text in (")", "]", "}", "++", "--") or token.text in _TERMINATING_KEYWORDS


class Lexer:
    """Splits text into tokens carrying absolute offsets.

    ``hash_comments`` enables ``#`` line comments for Thrift.
    """

    def __init__(
        self, text: str, *, hash_comments: bool = False, artifact: Path | str | None = None
    ) -> None:
        self.text = text
        self.hash_comments = hash_comments
        self.artifact = artifact

    def tokenize(self, *, keep_comments: bool = False) -> List[Token]:
        text = self.text
        length = len(text)
        tokens: List[Token] = []
        index = 0
        line = 1

        def emit(kind: str, start: int, end: int) -> None:
            if kind == COMMENT and not keep_comments:
                return
            tokens.append(Token(kind, text[start:end], start, end, line))

        while index < length:
            char = text[index]
            if char == "\n":
                emit(NEWLINE, index, index + 1)
                line += 1
                index += 1
            elif char in " \t\r\f\v":
                index += 1
            elif text.startswith("//", index) or (self.hash_comments and char == "#"):
                end = text.find("\n", index)
                end = length if end == -1 else end
                emit(COMMENT, index, end)
                index = end
            elif text.startswith("/*", index):
                end = text.find("*/", index + 2)
                if end == -1:
                    raise self._error("unterminated block comment", line)
                end += 2
                emit(COMMENT, index, end)
                line += text.count("\n", index, end)
                index = end
            elif char in "\"'":
                end = self._scan_quoted(index, char, line)
                emit(STRING if char == '"' else CHAR, index, end)
                index = end
            elif char == "`":
                end = text.find("`", index + 1)
                if end == -1:
                    raise self._error("unterminated raw string", line)
                end += 1
                emit(STRING, index, end)
                line += text.count("\n", index, end)
                index = end
            elif char.isdigit() or (char == "." and text[index + 1 : index + 2].isdigit()):
                end = index + 1
                while end < length and (text[end].isalnum() or text[end] in "._"):
                    end += 1
                emit(NUMBER, index, end)
                index = end
            elif char.isalpha() or char == "_":
                end = index + 1
                while end < length and (text[end].isalnum() or text[end] == "_"):
                    end += 1
                emit(IDENT, index, end)
                index = end
            elif text.startswith("...", index):
                emit(PUNCT, index, index + 3)
                index += 3
            elif text[index : index + 2] in _TWO_CHAR_OPS:
                emit(PUNCT, index, index + 2)
                index += 2
            else:
                emit(PUNCT, index, index + 1)
                index += 1

        tokens.append(Token(EOF, "", length, length, line))
        return tokens

    def _scan_quoted(self, start: int, quote: str, line: int) -> int:
        text = self.text
        index = start + 1
        while index < len(text):
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == quote:
                return index + 1
            if char == "\n":
                break
            index += 1
        raise self._error("unterminated string literal", line)

    def _error(self, message: str, line: int) -> SourceParseError:
        return SourceParseError(message, line=line, artifact=self.artifact)


__all__ = [
    "CHAR",
    "COMMENT",
    "EOF",
    "IDENT",
    "Lexer",
    "NEWLINE",
    "NUMBER",
    "PUNCT",
    "STRING",
    "Token",
    "ends_statement",
]
