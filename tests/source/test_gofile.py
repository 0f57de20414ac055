"""GoFile lookups, insertion and verbatim rendering."""

from __future__ import annotations

import pytest

from kitgen.source import GoParser
from kitgen.source.gofile import insert_lines

SOURCE = """package orders

import "context"

// Set holds endpoints.
type Set struct{}

type impl struct {
\tname string
}

func (i *impl) Name(ctx context.Context) string {
\treturn i.name
}
"""


def test_lookups() -> None:
    gofile = GoParser().parse(SOURCE)
    assert gofile.has_import("context")
    assert not gofile.has_import("fmt")
    assert gofile.find_struct("Set") is not None
    assert gofile.find_interface("Set") is None
    assert gofile.find_func("Name", "impl") is not None
    assert gofile.find_func("Name", "*impl") is not None
    assert gofile.find_func("Name") is None
    assert [m.name for m in gofile.methods] == ["Name"]


def test_insert_places_imports_after_existing_imports() -> None:
    gofile = GoParser().parse(SOURCE)
    parser = GoParser()
    gofile.insert(parser.parse_declarations('import "fmt"\n\nvar x = 1\n'))
    assert [decl.kind for decl in gofile.decls] == ["import", "import", "type", "type", "func", "var"]
    assert gofile.has_import("fmt")


def test_replace_unknown_declaration_fails() -> None:
    gofile = GoParser().parse(SOURCE)
    stranger = GoParser().parse_declarations("var y = 2\n")[0]
    with pytest.raises(ValueError):
        gofile.replace(stranger, stranger)


def test_with_body_keeps_signature_and_comment() -> None:
    decl = GoParser().parse("package p\n\n// F does f.\nfunc F() {\n\treturn\n}\n").find_func("F")
    assert decl is not None
    updated = decl.with_body("\n\tpanic(1)\n")
    assert updated == "// F does f.\nfunc F() {\n\tpanic(1)\n}"


def test_insert_lines_before_closer_on_its_own_line() -> None:
    raw = "type T struct {\n\ta int\n}"
    result = insert_lines(raw, raw.rindex("}"), ["b string"])
    assert result == "type T struct {\n\ta int\n\tb string\n}"


def test_insert_lines_breaks_an_empty_inline_body() -> None:
    raw = "type T struct{}"
    result = insert_lines(raw, raw.rindex("}"), ["b string"])
    assert result == "type T struct{\n\tb string\n}"


def test_empty_file_renders_package_clause() -> None:
    gofile = GoParser().parse("package empty\n")
    assert gofile.decls == []
    assert gofile.render() == "package empty\n"
