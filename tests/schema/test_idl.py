"""Parsing and extending protobuf and Thrift documents."""

from __future__ import annotations

import pytest

from kitgen.errors import SourceParseError
from kitgen.schema import IdlParser

PROTO = """syntax = "proto3";
package orderspb;

// Orders is the service.
service Orders {
  rpc GetOrder (GetOrderReq) returns (GetOrderRes) {}
}

message GetOrderReq {
  int32 Id = 1; // trailing
}
"""

THRIFT = """namespace go orders

# Orders is the service.
service Orders {
  GetOrderReply GetOrder(1: GetOrderRequest req)
}

struct GetOrderRequest {
  1: i32 Id
}
"""


def test_parse_proto_items() -> None:
    document = IdlParser().parse(PROTO)
    kinds = [item.kind for item in document.items]
    assert kinds == ["statement", "statement", "service", "message"]
    service = document.find("service", "Orders")
    assert service is not None
    assert service.members == ["GetOrder"]
    assert service.raw.startswith("// Orders is the service.")
    assert document.names("message") == ["GetOrderReq"]
    assert document.render() == PROTO


def test_extend_service_block() -> None:
    parser = IdlParser()
    document = parser.parse(PROTO)
    service = document.find("service", "Orders")
    extended = parser.extend_block(service, ["rpc Cancel (CancelReq) returns (CancelRes) {}"])
    assert extended.members == ["GetOrder", "Cancel"]
    document.replace(service, extended)
    rendered = document.render()
    assert "  rpc Cancel (CancelReq) returns (CancelRes) {}\n}" in rendered
    assert parser.parse(rendered).render() == rendered


def test_parse_thrift_with_hash_comments() -> None:
    document = IdlParser(hash_comments=True).parse(THRIFT)
    assert [item.kind for item in document.items] == ["statement", "service", "struct"]
    assert document.find("service", "Orders").members == ["GetOrder"]
    assert document.names("struct") == ["GetOrderRequest"]
    assert document.render() == THRIFT


def test_statement_is_not_a_block() -> None:
    parser = IdlParser()
    statement = parser.parse(PROTO).items[0]
    with pytest.raises(ValueError):
        parser.extend_block(statement, ["x"])


def test_unbalanced_block_is_an_error() -> None:
    with pytest.raises(SourceParseError):
        IdlParser(artifact="orders.proto").parse("service Orders {\n")
