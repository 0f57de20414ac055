"""Go to protobuf/Thrift type mapping."""

from __future__ import annotations

import pytest

from kitgen.errors import UnsupportedTypeError
from kitgen.schema import MessageRegistry, ThriftTypeMapper, TypeMapper


@pytest.mark.parametrize(
    ("go_type", "wire_type"),
    [
        ("string", "string"),
        ("int", "int32"),
        ("int64", "int64"),
        ("uint16", "uint32"),
        ("float64", "double"),
        ("float32", "float"),
        ("bool", "bool"),
        ("error", "string"),
        ("[]byte", "bytes"),
        ("[]string", "repeated string"),
        ("[3]int", "repeated int32"),
        ("map[string]int64", "map<string, int64>"),
        ("*string", "string"),
    ],
)
def test_proto_mapping(go_type: str, wire_type: str) -> None:
    assert TypeMapper().map(go_type).wire_type == wire_type


@pytest.mark.parametrize(
    ("go_type", "wire_type"),
    [
        ("int", "i32"),
        ("int64", "i64"),
        ("float32", "double"),
        ("[]byte", "binary"),
        ("[]bool", "list<bool>"),
        ("map[string]string", "map<string,string>"),
    ],
)
def test_thrift_mapping(go_type: str, wire_type: str) -> None:
    assert ThriftTypeMapper().map(go_type).wire_type == wire_type


def test_named_types_become_registered_messages() -> None:
    registry = MessageRegistry(existing=["Known"])
    mapper = TypeMapper(registry)
    assert mapper.map("*orders.Order").wire_type == "Order"
    mapping = mapper.map("map[string]*Item")
    assert mapping.wire_type == "map<string, Item>"
    assert mapping.messages == ["Item"]
    mapper.map("[]Known")
    mapper.map("Order")
    assert registry.new_names() == ["Order", "Item"]
    assert "Known" in registry and "Order" in registry


def test_sequences_and_qualified_map_values_register_their_elements() -> None:
    mapper = TypeMapper()
    listed = mapper.map("[]Foo")
    assert listed.wire_type == "repeated Foo"
    assert listed.messages == ["Foo"]
    pointers = mapper.map("[]*pkg.Foo")
    assert pointers.wire_type == "repeated Foo"
    assert pointers.messages == ["Foo"]
    mapping = mapper.map("map[string]pkg.Bar")
    assert mapping.wire_type == "map<string, Bar>"
    assert mapping.messages == ["Bar"]
    assert mapper.registry.new_names() == ["Foo", "Bar"]

    thrift = ThriftTypeMapper()
    assert thrift.map("[]Foo").wire_type == "list<Foo>"
    assert thrift.map("map[string]pkg.Bar").wire_type == "map<string,Bar>"
    assert thrift.registry.new_names() == ["Foo", "Bar"]


@pytest.mark.parametrize(
    "go_type",
    [
        "chan int",
        "<-chan string",
        "func(int) error",
        "interface{}",
        "any",
        "complex128",
        "[][]int",
        "[]map[string]int",
        "map[string][]int",
        "map[Key]string",
        "map[error]string",
        "struct{}",
    ],
)
def test_unrepresentable_types(go_type: str) -> None:
    with pytest.raises(UnsupportedTypeError) as excinfo:
        TypeMapper().map(go_type)
    assert excinfo.value.type_expr == go_type
    assert excinfo.value.exit_code == 5
