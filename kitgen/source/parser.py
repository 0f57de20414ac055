"""Recursive-descent parser for the subset of Go that generated files use.

Recognised: package clause, imports (single, grouped, aliased), const/var
declarations, type declarations (struct, interface, any other type, grouped),
functions and methods with grouped, unnamed and variadic parameters. Type
expressions stay opaque strings; function bodies are brace-matched text.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import SourceParseError
from ..models import Interface, Method, NamedTypeValue, Struct
from .gofile import Decl, FuncDecl, GoFile, ImportDecl, TypeDecl, TypeSpec, ValueDecl
from .lexer import EOF, IDENT, NEWLINE, NUMBER, STRING, Lexer, Token, ends_statement

_DECL_KEYWORDS = ("import", "const", "var", "type", "func")
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


def type_text(tokens: Sequence[Token]) -> str:
    """Canonical spelling of a type expression, independent of source spacing."""
    parts: List[str] = []
    previous: Optional[Token] = None
    for token in tokens:
        if token.kind == NEWLINE:
            continue
        if previous is not None and _needs_space(previous, token):
            parts.append(" ")
        parts.append(token.text)
        previous = token
    return "".join(parts)


def _is_word(token: Token) -> bool:
    return token.kind in (IDENT, NUMBER)


def _needs_space(previous: Token, token: Token) -> bool:
    if _is_word(previous) and _is_word(token):
        return True
    if previous.text in (",", ";", "chan"):
        return True
    return previous.text == ")" and (_is_word(token) or token.text in ("(", "*", "["))


def split_top_level(tokens: Sequence[Token], separator: str = ",") -> List[List[Token]]:
    """Split on ``separator`` outside brackets, dropping newlines and empty items."""
    items: List[List[Token]] = []
    current: List[Token] = []
    depth = 0
    for token in tokens:
        if token.kind == NEWLINE:
            continue
        if token.text in _OPENERS:
            depth += 1
        elif token.text in _CLOSERS:
            depth -= 1
        if depth == 0 and token.text == separator:
            if current:
                items.append(current)
            current = []
            continue
        current.append(token)
    if current:
        items.append(current)
    return items


def _matching(tokens: Sequence[Token], open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(tokens)):
        text = tokens[index].text
        if text in _OPENERS:
            depth += 1
        elif text in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index
    return -1


def _is_named(item: Sequence[Token]) -> bool:
    """Whether a parameter or field entry starts with a name rather than a type."""
    if len(item) < 2 or item[0].kind != IDENT:
        return False
    second = item[1]
    if second.text == ".":
        return False
    if second.text == "[":
        # ``T[int]`` is a generic type; ``name [2]int`` names an array.
        return _matching(item, 1) < len(item) - 1
    return True


def parse_params(tokens: Sequence[Token]) -> List[NamedTypeValue]:
    """Parse the tokens between a parameter list's parentheses."""
    items = split_top_level(tokens)
    if not any(_is_named(item) for item in items):
        return [NamedTypeValue(name="", type=type_text(item)) for item in items]

    params: List[NamedTypeValue] = []
    pending: List[str] = []
    for item in items:
        if _is_named(item):
            kind = type_text(item[1:])
            for name in pending:
                params.append(NamedTypeValue(name=name, type=kind))
            pending = []
            params.append(NamedTypeValue(name=item[0].text, type=kind))
        else:
            pending.append(item[0].text)
    for name in pending:
        # a trailing bare name: the list was malformed, keep it untyped
        params.append(NamedTypeValue(name=name, type=""))
    return params


def parse_results(tokens: Sequence[Token]) -> List[NamedTypeValue]:
    tokens = [token for token in tokens if token.kind != NEWLINE]
    if not tokens:
        return []
    if tokens[0].text == "(" and _matching(tokens, 0) == len(tokens) - 1:
        return parse_params(tokens[1:-1])
    return [NamedTypeValue(name="", type=type_text(tokens))]


def _doc_comment(leading: str) -> Optional[str]:
    lines: List[str] = []
    for line in reversed(leading.splitlines()):
        stripped = line.strip()
        if not stripped.startswith("//"):
            break
        lines.append(stripped[2:].strip())
    if not lines:
        return None
    return "\n".join(reversed(lines))


class _Cursor:
    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.last: Optional[Token] = None

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def next(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != EOF:
            self.pos += 1
        self.last = token
        return token

    def skip_separators(self) -> None:
        while self.peek().kind == NEWLINE or self.peek().text == ";":
            self.next()

    def group(self) -> List[Token]:
        """Consume a bracketed group and return its tokens, delimiters included."""
        close = _matching(self.tokens, self.pos)
        if close == -1:
            raise SourceParseError(f"unbalanced '{self.peek().text}'", line=self.peek().line)
        group = self.tokens[self.pos : close + 1]
        self.pos = close + 1
        self.last = group[-1]
        return group

    def line(self) -> List[Token]:
        """Consume one logical line, stopping before an unmatched closer."""
        collected: List[Token] = []
        while True:
            token = self.peek()
            if token.kind == EOF or token.text in _CLOSERS:
                break
            if token.kind == NEWLINE and collected and ends_statement(collected[-1]):
                break
            if token.text == ";":
                break
            if token.text in _OPENERS:
                collected.extend(self.group())
                continue
            token = self.next()
            if token.kind != NEWLINE:
                collected.append(token)
        return collected


class GoParser:
    """Parses Go source into a ``GoFile``."""

    def __init__(self, *, artifact: Path | str | None = None) -> None:
        self.artifact = artifact

    def parse(self, text: str) -> GoFile:
        cursor = _Cursor(Lexer(text, artifact=self.artifact).tokenize())
        cursor.skip_separators()
        start = cursor.peek()
        if start.kind != IDENT or start.text != "package":
            raise self._error("expected package clause", start)
        cursor.next()
        name = self._expect_ident(cursor)
        decls, trailer = self._declarations(cursor, text, name.end)
        return GoFile(package=name.text, header=text[: start.start], decls=decls, trailer=trailer)

    def parse_declarations(self, text: str) -> List[Decl]:
        """Parse a fragment made only of top-level declarations."""
        cursor = _Cursor(Lexer(text, artifact=self.artifact).tokenize())
        decls, _ = self._declarations(cursor, text, 0)
        return decls

    # -- top level ---------------------------------------------------------

    def _declarations(self, cursor: _Cursor, text: str, prev_end: int) -> Tuple[List[Decl], str]:
        decls: List[Decl] = []
        while True:
            cursor.skip_separators()
            token = cursor.peek()
            if token.kind == EOF:
                break
            if token.kind != IDENT or token.text not in _DECL_KEYWORDS:
                raise self._error(f"unexpected '{token.text}' at top level", token)

            segment = text[prev_end : token.start]
            raw_start = prev_end + len(segment) - len(segment.lstrip())
            comment = _doc_comment(text[raw_start : token.start])
            handler = getattr(self, f"_parse_{token.text}")
            build = handler(cursor, comment)
            end = self._line_end(text, cursor.last.end if cursor.last else token.end)
            decls.append(build(text[raw_start:end], raw_start))
            prev_end = end
        return decls, text[prev_end:].strip()

    @staticmethod
    def _line_end(text: str, end: int) -> int:
        """Extend a declaration over a trailing comment on its last line."""
        newline = text.find("\n", end)
        newline = len(text) if newline == -1 else newline
        if text[end:newline].strip().startswith("//"):
            return newline
        return end

    # -- declarations ------------------------------------------------------

    def _parse_import(self, cursor: _Cursor, comment: Optional[str]):
        cursor.next()
        imports: List[NamedTypeValue] = []
        close: Optional[int] = None
        if cursor.peek().text == "(":
            cursor.next()
            while True:
                cursor.skip_separators()
                if cursor.peek().text == ")":
                    close = cursor.next().start
                    break
                imports.append(self._import_spec(cursor))
        else:
            imports.append(self._import_spec(cursor))

        def build(raw: str, base: int) -> Decl:
            return ImportDecl(
                kind="import",
                raw=raw,
                imports=imports,
                close=close - base if close is not None else None,
            )

        return build

    def _import_spec(self, cursor: _Cursor) -> NamedTypeValue:
        alias = ""
        token = cursor.peek()
        if token.kind == IDENT or token.text == ".":
            alias = cursor.next().text
        path = cursor.next()
        if path.kind != STRING:
            raise self._error("expected import path", path)
        return NamedTypeValue(name=alias, type=path.text[1:-1])

    def _parse_const(self, cursor: _Cursor, comment: Optional[str]):
        return self._parse_values(cursor, "const")

    def _parse_var(self, cursor: _Cursor, comment: Optional[str]):
        return self._parse_values(cursor, "var")

    def _parse_values(self, cursor: _Cursor, keyword: str):
        cursor.next()
        values: List[NamedTypeValue] = []
        if cursor.peek().text == "(":
            cursor.next()
            while True:
                cursor.skip_separators()
                if cursor.peek().text == ")":
                    cursor.next()
                    break
                values.extend(self._value_spec(cursor.line()))
        else:
            values.extend(self._value_spec(cursor.line()))

        def build(raw: str, base: int) -> Decl:
            return ValueDecl(kind=keyword, raw=raw, values=values)

        return build

    def _value_spec(self, tokens: Sequence[Token]) -> List[NamedTypeValue]:
        names: List[str] = []
        index = 0
        while index < len(tokens) and tokens[index].kind == IDENT:
            names.append(tokens[index].text)
            index += 1
            if index < len(tokens) and tokens[index].text == ",":
                index += 1
                continue
            break
        rest = list(tokens[index:])
        value_at = next((i for i, token in enumerate(rest) if token.text == "="), len(rest))
        kind = type_text(rest[:value_at])
        value = type_text(rest[value_at + 1 :]) if value_at < len(rest) else None
        return [NamedTypeValue(name=name, type=kind, value=value) for name in names]

    def _parse_type(self, cursor: _Cursor, comment: Optional[str]):
        cursor.next()
        specs: List[Tuple[str, object, Optional[int]]] = []
        if cursor.peek().text == "(":
            cursor.next()
            while True:
                cursor.skip_separators()
                if cursor.peek().text == ")":
                    cursor.next()
                    break
                specs.append(self._type_spec(cursor, None))
        else:
            specs.append(self._type_spec(cursor, comment))

        def build(raw: str, base: int) -> Decl:
            return TypeDecl(
                kind="type",
                raw=raw,
                specs=[
                    TypeSpec(name=name, model=model, close=close - base if close is not None else None)
                    for name, model, close in specs
                ],
            )

        return build

    def _type_spec(self, cursor: _Cursor, comment: Optional[str]):
        name = self._expect_ident(cursor).text
        if cursor.peek().text == "[" and cursor.peek(1).kind == IDENT and cursor.peek(2).text != "]":
            cursor.group()
        if cursor.peek().text == "=":
            cursor.next()
        head = cursor.peek()
        if head.kind == IDENT and head.text in ("struct", "interface") and cursor.peek(1).text == "{":
            cursor.next()
            body = cursor.group()
            close = body[-1].start
            if head.text == "struct":
                return name, Struct(name=name, fields=self._fields(body[1:-1]), comment=comment), close
            return name, Interface(name=name, methods=self._interface_methods(body[1:-1]), comment=comment), close
        return name, NamedTypeValue(name=name, type=type_text(cursor.line()), comment=comment), None

    def _fields(self, tokens: Sequence[Token]) -> List[NamedTypeValue]:
        fields: List[NamedTypeValue] = []
        for line in _logical_lines(tokens):
            tag = None
            if len(line) > 1 and line[-1].kind == STRING:
                tag = line[-1].text
                line = line[:-1]
            if len(line) > 1 and line[0].kind == IDENT and line[1].text == ",":
                names = []
                index = 0
                while index < len(line) and line[index].kind == IDENT:
                    names.append(line[index].text)
                    if index + 1 < len(line) and line[index + 1].text == ",":
                        index += 2
                        continue
                    index += 1
                    break
                kind = type_text(line[index:])
                fields.extend(NamedTypeValue(name=n, type=kind, tag=tag) for n in names)
            elif _is_named(line):
                fields.append(NamedTypeValue(name=line[0].text, type=type_text(line[1:]), tag=tag))
            else:
                embedded = type_text(line)
                base = embedded.lstrip("*").split("[", 1)[0].rsplit(".", 1)[-1]
                fields.append(NamedTypeValue(name=base, type=embedded, tag=tag))
        return fields

    def _interface_methods(self, tokens: Sequence[Token]) -> List[Method]:
        methods: List[Method] = []
        for line in _logical_lines(tokens):
            if len(line) < 2 or line[0].kind != IDENT or line[1].text != "(":
                continue  # embedded interface or type-set term
            close = _matching(line, 1)
            methods.append(
                Method(
                    name=line[0].text,
                    parameters=parse_params(line[2:close]),
                    results=parse_results(line[close + 1 :]),
                )
            )
        return methods

    def _parse_func(self, cursor: _Cursor, comment: Optional[str]):
        cursor.next()
        receiver = None
        if cursor.peek().text == "(":
            group = cursor.group()
            receivers = parse_params(group[1:-1])
            if receivers:
                receiver = receivers[0]
        name = self._expect_ident(cursor).text
        if cursor.peek().text == "[":
            cursor.group()
        if cursor.peek().text != "(":
            raise self._error(f"expected parameters of {name}", cursor.peek())
        params = cursor.group()
        results: List[Token] = []
        while True:
            token = cursor.peek()
            if token.kind == EOF or token.kind == NEWLINE or token.text == ";":
                break
            if token.text == "{":
                if results and results[-1].text in ("struct", "interface"):
                    results.extend(cursor.group())
                    continue
                break
            if token.text in _OPENERS:
                results.extend(cursor.group())
                continue
            results.append(cursor.next())

        body_open = body_close = None
        if cursor.peek().text == "{":
            body = cursor.group()
            body_open, body_close = body[0].end, body[-1].start

        method = Method(
            name=name,
            parameters=parse_params(params[1:-1]),
            results=parse_results(results),
            receiver=receiver,
            comment=comment,
        )

        def build(raw: str, base: int) -> Decl:
            decl = FuncDecl(
                kind="func",
                raw=raw,
                method=method,
                body_open=body_open - base if body_open is not None else None,
                body_close=body_close - base if body_close is not None else None,
            )
            method.body = decl.body
            return decl

        return build

    # -- helpers -----------------------------------------------------------

    def _expect_ident(self, cursor: _Cursor) -> Token:
        token = cursor.next()
        if token.kind != IDENT:
            raise self._error(f"expected identifier, found '{token.text}'", token)
        return token

    def _error(self, message: str, token: Token) -> SourceParseError:
        return SourceParseError(message, line=token.line, artifact=self.artifact)


def _logical_lines(tokens: Sequence[Token]) -> List[List[Token]]:
    """Split a struct or interface body into its entries."""
    lines: List[List[Token]] = []
    current: List[Token] = []
    depth = 0
    for token in tokens:
        if token.text in _OPENERS:
            depth += 1
        elif token.text in _CLOSERS:
            depth -= 1
        if depth == 0 and (token.text == ";" or token.kind == NEWLINE):
            if current and (token.text == ";" or ends_statement(current[-1])):
                lines.append(current)
                current = []
            continue
        if token.kind != NEWLINE:
            current.append(token)
    if current:
        lines.append(current)
    return lines


__all__ = [
    "GoParser",
    "parse_params",
    "parse_results",
    "split_top_level",
    "type_text",
]
