"""Presence-checked additions to Go files."""

from __future__ import annotations

import re

import pytest

from kitgen.errors import MissingScaffoldError
from kitgen.models import Interface, Method, NamedTypeValue, Struct
from kitgen.source import Binding, GoParser
from kitgen.synthesis import ArtifactMerger, GoRenderer

SOURCE = """package ordersendpoint

import (
\t"context"
)

// Set collects the endpoints.
type Set struct {
\tGetEndpoint endpoint.Endpoint
}

func New() (set Set) {
\tset.GetEndpoint = nil
\treturn set
}
"""

BINDING = re.compile(r"set\.(\w+)Endpoint\s*=")


def _merger(source: str = SOURCE) -> ArtifactMerger:
    return ArtifactMerger(GoParser().parse(source), artifact="endpoints.go")


def test_imports_join_the_existing_group() -> None:
    merger = _merger()
    assert merger.ensure_imports([("", "context"), ("", "fmt"), ("kitlog", "github.com/go-kit/kit/log")]) == [
        "fmt",
        "github.com/go-kit/kit/log",
    ]
    rendered = merger.gofile.render()
    assert 'import (\n\t"context"\n\t"fmt"\n\tkitlog "github.com/go-kit/kit/log"\n)' in rendered
    assert merger.ensure_imports([("", "fmt")]) == []


def test_imports_added_as_new_declaration_when_none_grouped() -> None:
    merger = _merger("package p\n\nimport \"context\"\n")
    merger.ensure_imports([("", "fmt")])
    assert merger.gofile.render() == 'package p\n\nimport "context"\n\nimport "fmt"\n'


def test_fields_are_appended_by_name() -> None:
    merger = _merger()
    added = merger.ensure_fields(
        "Set",
        [
            NamedTypeValue(name="GetEndpoint", type="endpoint.Endpoint"),
            NamedTypeValue(name="PutEndpoint", type="endpoint.Endpoint"),
        ],
    )
    assert added == ["PutEndpoint"]
    assert merger.gofile.find_struct("Set").field_names() == ["GetEndpoint", "PutEndpoint"]
    assert "// Set collects the endpoints." in merger.gofile.render()


def test_fields_require_the_struct() -> None:
    with pytest.raises(MissingScaffoldError):
        _merger().ensure_fields("Missing", [NamedTypeValue(name="A", type="int")])


def test_bindings_keep_return_last() -> None:
    merger = _merger()
    added = merger.ensure_bindings(
        "New",
        [Binding("Get", "set.GetEndpoint = x"), Binding("Put", "set.PutEndpoint = nil")],
        BINDING,
    )
    assert added == ["Put"]
    body = merger.gofile.find_func("New").body
    assert body == "\n\tset.GetEndpoint = nil\n\tset.PutEndpoint = nil\n\treturn set\n"
    assert merger.added == ["binding New[Put]"]


def test_bindings_require_the_constructor() -> None:
    with pytest.raises(MissingScaffoldError, match="Could not find constructor NewServer"):
        _merger().ensure_bindings("NewServer", [], BINDING)


def test_methods_are_identified_by_name_and_receiver() -> None:
    merger = _merger()
    method = Method(
        name="Get",
        parameters=[NamedTypeValue(name="ctx", type="context.Context")],
        results=[NamedTypeValue(name="", type="error")],
        receiver=NamedTypeValue(name="s", type="Set"),
        body="return nil",
    )
    assert merger.ensure_method(method) is True
    assert merger.ensure_method(method) is False
    other = Method(name="Get", receiver=NamedTypeValue(name="x", type="*Other"), body="return")
    assert merger.ensure_method(other) is True
    assert "func (s Set) Get(ctx context.Context) error {\n\treturn nil\n}" in merger.gofile.render()
    assert merger.added == ["func (Set).Get", "func (*Other).Get"]


def test_types_and_values_are_added_once() -> None:
    merger = _merger()
    assert merger.ensure_struct(Struct(name="Set")) is False
    assert merger.ensure_struct(Struct(name="GetReq", fields=[NamedTypeValue(name="ID", type="string")])) is True
    assert merger.ensure_alias("Middleware", "func(Service) Service") is True
    assert merger.ensure_alias("Middleware", "func(Service) Service") is False
    failer = Interface(name="Failer", methods=[Method(name="Failed", results=[NamedTypeValue(name="", type="error")])])
    assert merger.ensure_interface(failer) is True
    assert merger.ensure_interface(failer) is False
    assert merger.ensure_values("const", [NamedTypeValue(name="Host", type="", value='"h"')]) == ["Host"]
    assert merger.ensure_values("const", [NamedTypeValue(name="Host", type="", value='"h"')]) == []
    rendered = merger.gofile.render()
    assert "type Failer interface {\n\tFailed() error\n}" in rendered
    assert 'const (\n\tHost = "h"\n)' in rendered


def test_render_then_merge_again_is_stable() -> None:
    merger = _merger()
    merger.ensure_struct(Struct(name="PutReq", fields=[NamedTypeValue(name="ID", type="string", tag='`json:"id"`')]))
    first = merger.gofile.render()
    again = _merger(first)
    again.ensure_struct(Struct(name="PutReq"))
    assert again.gofile.render() == first
    assert again.added == []


def test_renderer_spells_structs() -> None:
    renderer = GoRenderer()
    assert renderer.struct(Struct(name="Empty", comment="Empty is empty.")) == "// Empty is empty.\ntype Empty struct{}"
    field = NamedTypeValue(name="ID", type="string", tag='`json:"id"`', comment="identifier")
    assert renderer.field_line(field) == 'ID string `json:"id"` // identifier'
