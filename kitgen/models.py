"""Core data models shared across kitgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class NamedTypeValue:
    """A name/type pair: parameter, result, struct field, const or var."""

    name: str
    type: str
    value: Optional[str] = None
    tag: Optional[str] = None
    comment: Optional[str] = None
    index: Optional[int] = None


def receiver_base(type_expr: Optional[str]) -> Optional[str]:
    """Strip the pointer marker; Go forbids one method name on both T and *T."""
    if type_expr is None:
        return None
    return type_expr.lstrip("*").strip()


@dataclass
class Method:
    """A function, or a method when ``receiver`` is set."""

    name: str
    parameters: List[NamedTypeValue] = field(default_factory=list)
    results: List[NamedTypeValue] = field(default_factory=list)
    receiver: Optional[NamedTypeValue] = None
    body: Optional[str] = None
    comment: Optional[str] = None

    @property
    def receiver_type(self) -> Optional[str]:
        return self.receiver.type if self.receiver else None

    def matches(self, name: str, receiver_type: Optional[str] = None) -> bool:
        """Artifact identity: equal names and equal receiver base types."""
        return self.name == name and receiver_base(self.receiver_type) == receiver_base(
            receiver_type
        )


@dataclass
class Interface:
    name: str
    methods: List[Method] = field(default_factory=list)
    comment: Optional[str] = None


@dataclass
class Struct:
    """A struct type; fields keep their declaration order."""

    name: str
    fields: List[NamedTypeValue] = field(default_factory=list)
    comment: Optional[str] = None

    def field_names(self) -> List[str]:
        return [item.name for item in self.fields]


@dataclass
class MessagePair:
    """Request/response shapes derived from one interface method.

    ``params`` are the non-context parameters, in order, matching
    ``request.fields`` one for one.
    """

    method: Method
    params: List[NamedTypeValue]
    request: Struct
    response: Struct

    @property
    def name(self) -> str:
        return self.method.name


@dataclass
class EndpointModel:
    """Endpoint set plus the per-method messages for one service."""

    service_name: str
    interface_name: str
    set: Struct
    pairs: List[MessagePair] = field(default_factory=list)

    def pair(self, method_name: str) -> Optional[MessagePair]:
        for pair in self.pairs:
            if pair.name == method_name:
                return pair
        return None


@dataclass
class WireField:
    name: str
    type: str
    number: int


@dataclass
class WireMessage:
    """A message in the wire schema."""

    name: str
    fields: List[WireField] = field(default_factory=list)


__all__ = [
    "EndpointModel",
    "Interface",
    "MessagePair",
    "Method",
    "NamedTypeValue",
    "Struct",
    "WireField",
    "WireMessage",
    "receiver_base",
]
