"""Thrift handler layer."""

from __future__ import annotations

import logging

import pytest

from kitgen.errors import NotFoundError
from kitgen.layers import CREATED, UNCHANGED
from kitgen.layers.thrift import ThriftHandlerLayer
from tests._fixtures.project_builder import ProjectBuilder

HANDLER = "pkg/orderstransport/thrift/handler.go"


def _context(project: ProjectBuilder):
    ctx, _ = project.generator().context("orders", "thrift")
    return ctx


def test_requires_compiled_thrift(project: ProjectBuilder) -> None:
    project.orders_service()
    with pytest.raises(NotFoundError, match="gen-go/orders/orders.go"):
        ThriftHandlerLayer().generate(_context(project))


def test_handler(project: ProjectBuilder) -> None:
    project.orders_service()
    project.compile_thrift()
    result = ThriftHandlerLayer().generate(_context(project))
    assert result.status == CREATED
    text = project.read(HANDLER)
    assert text.startswith("package thrift\n")
    assert '"example.com/shop/pkg/orderstransport/thrift/gen-go/orders"' in text
    assert "type thriftServer struct{\n\tgetOrder endpoint.Endpoint\n}" in text
    assert "func MakeThriftHandler(endpoints ordersendpoint.Set) orders.Orders {" in text
    assert text.index("s.getOrder = endpoints.GetOrderEndpoint") < text.index("return s")
    assert (
        "func DecodeThriftGetOrderRequest(r *orders.GetOrderRequest) (req ordersendpoint.GetOrderReq, err error) {"
        in text
    )
    assert "err = errors.New(\"'GetOrder' encoder is not implemented\")" in text
    assert (
        "func (s *thriftServer) GetOrder(ctx context.Context, req *orders.GetOrderRequest) (*orders.GetOrderReply, error) {"
        in text
    )
    assert ThriftHandlerLayer().generate(_context(project)).status == UNCHANGED


def test_new_codec_stubs_are_reported(project: ProjectBuilder, caplog: pytest.LogCaptureFixture) -> None:
    project.orders_service()
    project.compile_thrift()
    with caplog.at_level(logging.WARNING, logger="kitgen"):
        ThriftHandlerLayer().generate(_context(project))
    assert "Implement the Thrift codecs of GetOrder" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="kitgen"):
        ThriftHandlerLayer().generate(_context(project))
    assert "Implement the Thrift codecs" not in caplog.text
