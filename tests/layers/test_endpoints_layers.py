"""Endpoint set and endpoint middleware layers."""

from __future__ import annotations

import pytest

from kitgen.errors import MissingScaffoldError
from kitgen.layers import CREATED, UNCHANGED, UPDATED
from kitgen.layers.endpoints import EndpointMiddlewareLayer, EndpointsLayer
from tests._fixtures.project_builder import ORDERS_SERVICE, ProjectBuilder

ENDPOINTS = "pkg/ordersendpoint/endpoints.go"


def _context(project: ProjectBuilder):
    ctx, _ = project.generator().context("orders", "http")
    return ctx


def test_endpoints_file_is_created(project: ProjectBuilder) -> None:
    project.orders_service()
    result = EndpointsLayer().generate(_context(project))
    assert result.status == CREATED
    text = project.read(ENDPOINTS)
    assert text.startswith("package ordersendpoint\n")
    assert '"example.com/shop/pkg/ordersservice"' in text
    assert "type Set struct{\n\tGetOrderEndpoint endpoint.Endpoint\n}" in text
    assert "func New(svc ordersservice.Service, logger log.Logger, duration metrics.Histogram) (set Set) {" in text
    assert text.index("set.GetOrderEndpoint = ep") < text.index("return set")
    assert 'type GetOrderReq struct {\n\tId int `json:"id"`\n}' in text
    assert 'type GetOrderRes struct {\n\tOrder ordersservice.Order `json:"order"`\n\tErr error `json:"err"`\n}' in text
    assert "func (r GetOrderRes) Failed() error {\n\treturn r.Err\n}" in text


def test_make_endpoint_and_set_method(project: ProjectBuilder) -> None:
    project.orders_service()
    EndpointsLayer().generate(_context(project))
    text = project.read(ENDPOINTS)
    assert "func MakeGetOrderEndpoint(svc ordersservice.Service) endpoint.Endpoint {" in text
    assert "\t\treq := request.(GetOrderReq)\n\t\torder, err := svc.GetOrder(ctx, req.Id)" in text
    assert "func (s Set) GetOrder(ctx context.Context, id int) (order ordersservice.Order, err error) {" in text
    assert "\tresp, err := s.GetOrderEndpoint(ctx, GetOrderReq{\n\t\tId: id,\n\t})" in text
    assert "\torder = response.Order\n\terr = response.Err\n\treturn\n}" in text


def test_second_run_is_unchanged(project: ProjectBuilder) -> None:
    project.orders_service()
    EndpointsLayer().generate(_context(project))
    first = project.read(ENDPOINTS)
    assert EndpointsLayer().generate(_context(project)).status == UNCHANGED
    assert project.read(ENDPOINTS) == first


def test_new_method_is_merged_in_interface_order(project: ProjectBuilder) -> None:
    path = project.orders_service()
    EndpointsLayer().generate(_context(project))
    project.write(
        {
            path: ORDERS_SERVICE.replace(
                "(order Order, err error)\n",
                "(order Order, err error)\n\tCancelOrder(ctx context.Context, id int) (err error)\n",
            )
        }
    )
    result = EndpointsLayer().generate(_context(project))
    assert result.status == UPDATED
    assert "field Set.CancelOrderEndpoint" in result.added
    text = project.read(ENDPOINTS)
    assert text.count("type GetOrderReq struct") == 1
    assert text.index("set.GetOrderEndpoint = ep") < text.index("set.CancelOrderEndpoint = ep") < text.index("return set")
    assert "\tGetOrderEndpoint endpoint.Endpoint\n\tCancelOrderEndpoint endpoint.Endpoint" in text


def test_hand_written_constructor_statements_survive(project: ProjectBuilder) -> None:
    project.orders_service()
    EndpointsLayer().generate(_context(project))
    edited = project.read(ENDPOINTS).replace("\treturn set\n", '\tlogger.Log("msg", "endpoints ready")\n\treturn set\n')
    project.write({ENDPOINTS: edited})
    assert EndpointsLayer().generate(_context(project)).status == UNCHANGED
    assert 'logger.Log("msg", "endpoints ready")' in project.read(ENDPOINTS)


def test_missing_constructor_is_reported(project: ProjectBuilder) -> None:
    project.orders_service()
    project.write({ENDPOINTS: "package ordersendpoint\n\ntype Set struct{}\n"})
    with pytest.raises(MissingScaffoldError):
        EndpointsLayer().generate(_context(project))
    assert project.read(ENDPOINTS) == "package ordersendpoint\n\ntype Set struct{}\n"


def test_service_package_alias(project: ProjectBuilder) -> None:
    project.orders_service(ORDERS_SERVICE.replace("package ordersservice", "package orders"))
    ctx = _context(project)
    assert ctx.service_import() == ("orders", "example.com/shop/pkg/ordersservice")
    EndpointsLayer().generate(ctx)
    text = project.read(ENDPOINTS)
    assert 'orders "example.com/shop/pkg/ordersservice"' in text
    assert "Order orders.Order" in text


def test_endpoint_middleware(project: ProjectBuilder) -> None:
    project.orders_service()
    EndpointMiddlewareLayer().generate(_context(project))
    text = project.read("pkg/ordersendpoint/middleware.go")
    assert "func InstrumentingMiddleware(duration metrics.Histogram) endpoint.Middleware {" in text
    assert "func LoggingMiddleware(logger log.Logger) endpoint.Middleware {" in text
    assert 'logger.Log("transport_error", err, "took", time.Since(begin))' in text


def test_set_methods_avoid_parameter_and_result_names(project: ProjectBuilder) -> None:
    project.orders_service(
        ORDERS_SERVICE.replace(
            "(order Order, err error)\n",
            "(order Order, err error)\n"
            "\tSum(ctx context.Context, a int, b int) (s int, err error)\n"
            "\tLookup(ctx context.Context, resp string) (response string, err error)\n",
        )
    )
    EndpointsLayer().generate(_context(project))
    text = project.read(ENDPOINTS)
    assert "func (s Set) GetOrder(ctx context.Context, id int) (order ordersservice.Order, err error) {" in text
    assert "func (s1 Set) Sum(ctx context.Context, a int, b int) (s int, err error) {" in text
    assert "\tresp, err := s1.SumEndpoint(ctx, SumReq{\n\t\tA: a,\n\t\tB: b,\n\t})" in text
    assert "\ts = response.S\n" in text
    assert "func (s Set) Lookup(ctx context.Context, resp string) (response string, err error) {" in text
    assert "\tresp1, err := s.LookupEndpoint(ctx, LookupReq{\n\t\tResp: resp,\n\t})" in text
    assert "\tresponse1 := resp1.(LookupRes)\n\tresponse = response1.Response\n\terr = response1.Err\n" in text
