"""Protobuf and Thrift schema layers."""

from __future__ import annotations

import os
import sys

import pytest

from kitgen.errors import MissingScaffoldError, SchemaError
from kitgen.layers import CREATED, UNCHANGED, UPDATED
from kitgen.layers.schema import ProtoSchemaLayer, ThriftSchemaLayer
from tests._fixtures.project_builder import ORDERS_SERVICE, ProjectBuilder

PROTO = "pb/orderspb/orders.proto"
THRIFT = "pkg/orderstransport/thrift/orders.thrift"
SCRIPT = "compile.bat" if sys.platform.startswith("win") else "compile.sh"

CANCEL = "(order Order, err error)\n\tCancelOrder(ctx context.Context, id int) (err error)\n"


def _context(project: ProjectBuilder, transport: str = "grpc"):
    ctx, _ = project.generator().context("orders", transport)
    return ctx


def test_proto_schema_is_created(project: ProjectBuilder) -> None:
    project.orders_service()
    result = ProtoSchemaLayer().generate(_context(project))
    assert result.status == CREATED
    text = project.read(PROTO)
    assert text.startswith('syntax = "proto3";\npackage orderspb;\noption go_package = "example.com/shop/pb/orderspb";\n')
    assert "service Orders {\n  rpc GetOrder (GetOrderReq) returns (GetOrderRes) {}\n}" in text
    assert "message GetOrderReq {\n  int32 Id = 1;\n}" in text
    assert "message GetOrderRes {\n  Order Order = 1;\n  string Err = 2;\n}" in text
    assert "// Order mirrors the Go type of the same name; define its fields.\nmessage Order {\n}" in text
    assert result.added == ["rpc GetOrder", "message GetOrderReq", "message GetOrderRes", "message Order"]


def test_compile_script_is_written_once(project: ProjectBuilder) -> None:
    project.orders_service()
    ProtoSchemaLayer().generate(_context(project))
    script = f"pb/orderspb/{SCRIPT}"
    assert "protoc orders.proto --go_out=plugins=grpc:." in project.read(script)
    if not sys.platform.startswith("win"):
        assert os.access(project.root / script, os.X_OK)
    project.write({script: "custom\n"})
    ProtoSchemaLayer().generate(_context(project))
    assert project.read(script) == "custom\n"


def test_proto_schema_is_extended_monotonically(project: ProjectBuilder) -> None:
    path = project.orders_service()
    ProtoSchemaLayer().generate(_context(project))
    edited = project.read(PROTO).replace("message Order {\n}", "message Order {\n  string ID = 1;\n}")
    project.write({PROTO: edited})
    project.write({path: ORDERS_SERVICE.replace("(order Order, err error)\n", CANCEL)})

    result = ProtoSchemaLayer().generate(_context(project))
    assert result.status == UPDATED
    text = project.read(PROTO)
    assert "  rpc GetOrder (GetOrderReq) returns (GetOrderRes) {}\n  rpc CancelOrder (CancelOrderReq) returns (CancelOrderRes) {}\n}" in text
    assert "message CancelOrderReq {\n  int32 Id = 1;\n}" in text
    assert "message CancelOrderRes {\n  string Err = 1;\n}" in text
    assert text.count("message Order {") == 1
    assert "string ID = 1;" in text
    assert ProtoSchemaLayer().generate(_context(project)).status == UNCHANGED


def test_unsupported_types_are_all_reported(project: ProjectBuilder) -> None:
    project.orders_service(
        ORDERS_SERVICE.replace(
            "(order Order, err error)\n",
            "(order Order, err error)\n"
            "\tWatch(ctx context.Context, ch chan int) (err error)\n"
            "\tApply(ctx context.Context, fn func()) (err error)\n",
        )
    )
    with pytest.raises(SchemaError) as excinfo:
        ProtoSchemaLayer().generate(_context(project))
    assert [issue.method for issue in excinfo.value.issues] == ["Watch", "Apply"]
    assert excinfo.value.exit_code == 5
    assert not project.exists(PROTO)
    assert not project.exists(f"pb/orderspb/{SCRIPT}")


def test_schema_without_service_block(project: ProjectBuilder) -> None:
    project.orders_service()
    project.write({PROTO: 'syntax = "proto3";\n'})
    with pytest.raises(MissingScaffoldError):
        ProtoSchemaLayer().generate(_context(project))


def test_thrift_idl(project: ProjectBuilder) -> None:
    project.orders_service()
    result = ThriftSchemaLayer().generate(_context(project, "thrift"))
    assert result.status == CREATED
    text = project.read(THRIFT)
    assert text.startswith("namespace go orders\n\n# Orders is generated from the Service interface.\nservice Orders {")
    assert "  GetOrderReply GetOrder(1: GetOrderRequest req)\n}" in text
    assert "struct GetOrderRequest {\n  1: i32 Id\n}" in text
    assert "struct GetOrderReply {\n  1: Order Order\n  2: string Err\n}" in text
    assert "# Order mirrors the Go type of the same name; define its fields.\nstruct Order {\n}" in text
    assert "thrift -r --gen go orders.thrift" in project.read(f"pkg/orderstransport/thrift/{SCRIPT}")
    assert ThriftSchemaLayer().generate(_context(project, "thrift")).status == UNCHANGED
