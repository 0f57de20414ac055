"""Tokenizer behaviour for Go and IDL text."""

from __future__ import annotations

import pytest

from kitgen.errors import SourceParseError
from kitgen.source.lexer import COMMENT, IDENT, NEWLINE, PUNCT, STRING, Lexer


def _texts(text: str, **kwargs) -> list[str]:
    return [tok.text for tok in Lexer(text, **kwargs).tokenize() if tok.kind != NEWLINE][:-1]


def test_tokenizes_operators_and_identifiers() -> None:
    assert _texts("a := b... <- c") == ["a", ":=", "b", "...", "<-", "c"]


def test_comments_are_dropped_unless_requested() -> None:
    source = "x // trailing\n/* block */ y"
    assert _texts(source) == ["x", "y"]
    kinds = [tok.kind for tok in Lexer(source).tokenize(keep_comments=True)]
    assert kinds.count(COMMENT) == 2


def test_raw_strings_span_lines_and_keep_line_numbers() -> None:
    tokens = Lexer("s := `a\nb`\nnext").tokenize()
    raw = next(tok for tok in tokens if tok.kind == STRING)
    assert raw.text == "`a\nb`"
    last = next(tok for tok in tokens if tok.text == "next")
    assert last.line == 3


def test_hash_comments_only_for_thrift() -> None:
    assert _texts("# note\nstruct", hash_comments=True) == ["struct"]
    tokens = Lexer("# note").tokenize()
    assert tokens[0].kind == PUNCT and tokens[0].text == "#"


def test_escaped_quote_inside_string() -> None:
    tokens = Lexer('"a\\"b" c').tokenize()
    assert tokens[0].kind == STRING
    assert tokens[0].text == '"a\\"b"'
    assert tokens[1].kind == IDENT


def test_unterminated_string_reports_line() -> None:
    with pytest.raises(SourceParseError) as excinfo:
        Lexer('x\ny := "open\n', artifact="broken.go").tokenize()
    assert excinfo.value.line == 2
    assert str(excinfo.value.artifact) == "broken.go"
