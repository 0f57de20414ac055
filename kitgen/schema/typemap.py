"""Mapping from Go type syntax to wire-schema types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Tuple

from ..errors import UnsupportedTypeError

PROTO_SCALARS: Dict[str, str] = {
    "error": "string",
    "int": "int32",
    "int8": "int32",
    "int16": "int32",
    "rune": "int32",
    "int32": "int32",
    "int64": "int64",
    "uint": "uint32",
    "uint8": "uint32",
    "uint16": "uint32",
    "byte": "uint32",
    "uint32": "uint32",
    "uint64": "uint64",
    "float32": "float",
    "float64": "double",
    "bool": "bool",
    "string": "string",
}

THRIFT_SCALARS: Dict[str, str] = {
    "error": "string",
    "int": "i32",
    "int8": "byte",
    "int16": "i16",
    "rune": "i32",
    "int32": "i32",
    "int64": "i64",
    "uint": "i32",
    "uint8": "byte",
    "uint16": "i16",
    "byte": "byte",
    "uint32": "i32",
    "uint64": "i64",
    "float32": "double",
    "float64": "double",
    "bool": "bool",
    "string": "string",
}

_UNREPRESENTABLE: FrozenSet[str] = frozenset({"any", "interface{}", "uintptr", "complex64", "complex128"})


class MessageRegistry:
    """Ordered set of message names referenced by the schema.

    Registering a name that is already known is a no-op.
    """

    def __init__(self, existing: Iterable[str] = ()) -> None:
        self._names: List[str] = []
        self._existing = set(existing)

    def register(self, name: str) -> bool:
        if name in self._existing or name in self._names:
            return False
        self._names.append(name)
        return True

    def __contains__(self, name: object) -> bool:
        return name in self._existing or name in self._names

    def new_names(self) -> List[str]:
        """Names registered during this run that the schema does not define yet."""
        return list(self._names)


@dataclass
class TypeMapping:
    wire_type: str
    messages: List[str] = field(default_factory=list)


class TypeMapper:
    """Maps a Go type expression onto protobuf types, registering referenced messages."""

    scalars: Dict[str, str] = PROTO_SCALARS
    bytes_type = "bytes"

    def __init__(self, registry: MessageRegistry | None = None) -> None:
        self.registry = registry if registry is not None else MessageRegistry()

    def map(self, type_expr: str) -> TypeMapping:
        expr = type_expr.strip()
        messages: List[str] = []
        if expr == "[]byte":
            return TypeMapping(self.bytes_type)
        if expr.startswith("map["):
            key, value = _split_map(expr)
            if (value.startswith("[]") and value != "[]byte") or value.startswith("map["):
                raise UnsupportedTypeError(expr, "maps with sequence or map values are not representable")
            key_type = self.scalars.get(key.lstrip("*"))
            if key_type is None or key == "error":
                raise UnsupportedTypeError(expr, "map keys must be scalar")
            value_type = self._element(value, expr, messages)
            return TypeMapping(self.map_type(key_type, value_type), messages)
        if expr.startswith("["):
            element = expr[expr.index("]") + 1 :]
            if element.startswith("map[") or (element.startswith("[") and element != "[]byte"):
                raise UnsupportedTypeError(expr, "nested sequences are not representable")
            element_type = self._element(element, expr, messages)
            return TypeMapping(self.list_type(element_type), messages)
        return TypeMapping(self._element(expr, expr, messages), messages)

    def map_type(self, key: str, value: str) -> str:
        return f"map<{key}, {value}>"

    def list_type(self, element: str) -> str:
        return f"repeated {element}"

    def _element(self, expr: str, whole: str, messages: List[str]) -> str:
        if expr == "[]byte":
            return self.bytes_type
        name = expr.lstrip("*")
        if name in self.scalars:
            return self.scalars[name]
        if name in _UNREPRESENTABLE or name.startswith(("chan ", "<-chan", "func(", "interface{", "struct{")):
            raise UnsupportedTypeError(whole, f"'{expr}' has no wire representation")
        if "." in name:
            name = name.rsplit(".", 1)[1]
        if not name.isidentifier():
            raise UnsupportedTypeError(whole, f"'{expr}' has no wire representation")
        self.registry.register(name)
        messages.append(name)
        return name


class ThriftTypeMapper(TypeMapper):
    """The same rules spelled in Thrift IDL."""

    scalars = THRIFT_SCALARS
    bytes_type = "binary"

    def map_type(self, key: str, value: str) -> str:
        return f"map<{key},{value}>"

    def list_type(self, element: str) -> str:
        return f"list<{element}>"


def _split_map(expr: str) -> Tuple[str, str]:
    depth = 0
    for index in range(3, len(expr)):
        char = expr[index]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return expr[4:index], expr[index + 1 :]
    raise UnsupportedTypeError(expr, "malformed map type")


__all__ = [
    "MessageRegistry",
    "PROTO_SCALARS",
    "THRIFT_SCALARS",
    "ThriftTypeMapper",
    "TypeMapper",
    "TypeMapping",
]
