"""Endpoint set, request/response models and endpoint middlewares."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, List

from ..gotypes import is_error, is_variadic, local_names, qualify
from ..models import Interface, MessagePair, Method, NamedTypeValue, Struct
from ..source import Binding
from ..synthesis import ArtifactMerger
from .base import GoLayer, LayerContext
from .service import KIT_LOG, KIT_METRICS

KIT_ENDPOINT = "github.com/go-kit/kit/endpoint"

BINDING_RE = re.compile(r"set\.(\w+)Endpoint\s*=")

_TEMPLATE = "go/endpoints.j2"


def qualified_method(ctx: LayerContext, method: Method) -> Method:
    """``method`` as seen from outside the service package."""
    package = ctx.service_package
    return Method(
        name=method.name,
        parameters=[_requalify(p, package) for p in method.parameters],
        results=[_requalify(r, package) for r in method.results],
    )


def _requalify(item: NamedTypeValue, package: str) -> NamedTypeValue:
    return NamedTypeValue(name=item.name, type=qualify(item.type, package))


def request_values(pair: MessagePair) -> List[Dict[str, str]]:
    return [{"field": f.name, "value": p.name} for f, p in zip(pair.request.fields, pair.params)]


def response_values(pair: MessagePair) -> List[Dict[str, str]]:
    return [{"field": f.name, "value": r.name} for f, r in zip(pair.response.fields, pair.method.results)]


class EndpointsLayer(GoLayer):
    """Maintains ``endpoints.go``: the ``Set``, its constructor and per-method plumbing."""

    name = "endpoints"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.endpoints_file

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        merger.ensure_struct(Struct(name="Set", comment=ctx.model.set.comment))
        merger.ensure_method(
            Method(
                name="New",
                parameters=[
                    NamedTypeValue(name="svc", type=f"{ctx.service_package}.{ctx.layout.interface_name}"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                    NamedTypeValue(name="duration", type="metrics.Histogram"),
                ],
                results=[NamedTypeValue(name="set", type="Set")],
                body="return set",
                comment="New returns a Set that wraps the provided server, and wires in all of the expected endpoint middlewares.",
            )
        )

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        merger.ensure_imports(
            [("", "context"), ("", KIT_ENDPOINT), ("", KIT_LOG), ("", KIT_METRICS), ctx.service_import()]
            + ctx.source_imports(ctx.method_types())
        )
        merger.ensure_interface(
            Interface(
                name="Failer",
                methods=[Method(name="Failed", results=[NamedTypeValue(name="", type="error")])],
                comment="Failer is implemented by responses that carry a business error.",
            )
        )
        merger.ensure_fields("Set", ctx.model.set.fields)
        merger.ensure_bindings(
            "New",
            [Binding(pair.name, templates.macro(_TEMPLATE, "binding", pair)) for pair in ctx.model.pairs],
            BINDING_RE,
        )
        for pair in ctx.model.pairs:
            self._merge_pair(ctx, merger, pair)

    def _merge_pair(self, ctx: LayerContext, merger: ArtifactMerger, pair: MessagePair) -> None:
        templates = ctx.templates
        request = Struct(
            name=pair.request.name,
            fields=pair.request.fields,
            comment=f"{pair.request.name} collects the request parameters for the {pair.name} method.",
        )
        response = Struct(
            name=pair.response.name,
            fields=pair.response.fields,
            comment=f"{pair.response.name} collects the response values for the {pair.name} method.",
        )
        merger.ensure_struct(request)
        merger.ensure_struct(response)

        failed = next((f.name for f in pair.response.fields if is_error(f.type)), None)
        merger.ensure_method(
            Method(
                name="Failed",
                results=[NamedTypeValue(name="", type="error")],
                receiver=NamedTypeValue(name="r", type=pair.response.name),
                body=f"return r.{failed}" if failed else "return nil",
                comment="Failed implements Failer.",
            )
        )

        call: List[str] = []
        fields = iter(pair.request.fields)
        for param in pair.method.parameters:
            if param.type == ctx.context_type:
                call.append("ctx")
                continue
            value = f"req.{next(fields).name}"
            call.append(f"{value}..." if is_variadic(param.type) else value)
        merger.ensure_method(
            Method(
                name=f"Make{pair.name}Endpoint",
                parameters=[
                    NamedTypeValue(name="svc", type=f"{ctx.service_package}.{ctx.layout.interface_name}")
                ],
                results=[NamedTypeValue(name="", type="endpoint.Endpoint")],
                body=templates.macro(
                    _TEMPLATE,
                    "make_endpoint",
                    pair,
                    call,
                    [r.name for r in pair.method.results],
                    response_values(pair),
                ),
                comment=f"Make{pair.name}Endpoint returns an endpoint that invokes {pair.name} on the service.",
            )
        )

        method = qualified_method(ctx, pair.method)
        receiver, raw, typed, err = local_names(method, "s", "resp", "response", "err")
        error = next((r.name for r in method.results if is_error(r.type)), err)
        merger.ensure_method(
            Method(
                name=pair.name,
                parameters=method.parameters,
                results=method.results,
                receiver=NamedTypeValue(name=receiver, type="Set"),
                body=templates.macro(
                    _TEMPLATE,
                    "set_method",
                    pair,
                    (receiver, raw, typed),
                    ctx.context_arg(pair),
                    error,
                    request_values(pair),
                    response_values(pair),
                ),
                comment=f"{pair.name} implements the service interface, so Set may be used as a service.",
            )
        )


class EndpointMiddlewareLayer(GoLayer):
    """Endpoint-level logging and instrumenting middlewares used by ``New``."""

    name = "endpoint-middleware"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.endpoint_middleware_file

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        merger.ensure_imports(
            [("", "context"), ("", "fmt"), ("", "time"), ("", KIT_ENDPOINT), ("", KIT_LOG), ("", KIT_METRICS)]
        )
        merger.ensure_method(
            Method(
                name="InstrumentingMiddleware",
                parameters=[NamedTypeValue(name="duration", type="metrics.Histogram")],
                results=[NamedTypeValue(name="", type="endpoint.Middleware")],
                body=ctx.templates.macro(_TEMPLATE, "instrumenting_middleware"),
                comment=(
                    "InstrumentingMiddleware returns an endpoint middleware that records\n"
                    "the duration of each invocation to the passed histogram."
                ),
            )
        )
        merger.ensure_method(
            Method(
                name="LoggingMiddleware",
                parameters=[NamedTypeValue(name="logger", type="log.Logger")],
                results=[NamedTypeValue(name="", type="endpoint.Middleware")],
                body=ctx.templates.macro(_TEMPLATE, "logging_middleware"),
                comment=(
                    "LoggingMiddleware returns an endpoint middleware that logs the\n"
                    "duration of each invocation, and the resulting error, if any."
                ),
            )
        )


__all__ = [
    "BINDING_RE",
    "EndpointMiddlewareLayer",
    "EndpointsLayer",
    "KIT_ENDPOINT",
    "qualified_method",
    "request_values",
    "response_values",
]
