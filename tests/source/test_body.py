"""Constructor body splitting and binding extension."""

from __future__ import annotations

import re

from kitgen.source import Binding, ConstructorBody, StatementKind
from kitgen.source.body import split_statements

BINDING = re.compile(r"set\.(\w+)Endpoint\s*=")

BODY = """
\t// keep this comment
\tsvc = LoggingMiddleware(logger)(svc)
\t{
\t\tep := MakeGetEndpoint(svc)
\t\tset.GetEndpoint = ep
\t}
\treturn set
"""


def test_split_statements_respects_blocks() -> None:
    spans = split_statements(BODY)
    assert len(spans) == 3
    start, end = spans[1]
    assert BODY[start:end].startswith("{") and BODY[start:end].endswith("}")


def test_split_statements_on_semicolons() -> None:
    body = "a := 1; b := 2"
    assert [body[s:e] for s, e in split_statements(body)] == ["a := 1", "b := 2"]


def test_parse_classifies_statements() -> None:
    body = ConstructorBody.parse(BODY, BINDING)
    kinds = [stmt.kind for stmt in body.statements]
    assert kinds == [StatementKind.MIDDLEWARE, StatementKind.BIND, StatementKind.RETURN]
    assert body.keys() == {"Get"}
    assert "// keep this comment" in body.statements[0].text
    assert body.render() == BODY


def test_extend_appends_before_return_once() -> None:
    body = ConstructorBody.parse(BODY, BINDING)
    added = body.extend([Binding("Get", "set.GetEndpoint = x"), Binding("Put", "set.PutEndpoint = y")])
    assert added == ["Put"]
    rendered = body.render()
    assert rendered.index("set.PutEndpoint = y") < rendered.index("return set")
    assert rendered.count("set.GetEndpoint") == 1

    again = ConstructorBody.parse(rendered, BINDING)
    assert again.extend([Binding("Put", "set.PutEndpoint = y")]) == []
    assert again.render() == rendered


def test_extend_indents_multiline_bindings() -> None:
    body = ConstructorBody.parse("\n\treturn s\n", BINDING)
    body.extend([Binding("A", "{\n\tset.AEndpoint = a\n}")])
    assert body.render() == "\n\t{\n\t\tset.AEndpoint = a\n\t}\n\treturn s\n"


def test_extend_without_return_appends_at_end() -> None:
    body = ConstructorBody.parse("\n\tx := 1\n", BINDING)
    assert body.return_statement is None
    body.extend([Binding("A", "set.AEndpoint = a")])
    assert body.render() == "\n\tx := 1\n\tset.AEndpoint = a\n"
