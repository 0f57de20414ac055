"""Layers that live in the service package itself."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import List

from ..errors import NotFoundError
from ..gotypes import is_error, local_names
from ..models import Method, NamedTypeValue, Struct
from ..naming import upper_first
from ..synthesis import ArtifactMerger
from .base import GoLayer, LayerContext

KIT_LOG = "github.com/go-kit/kit/log"
KIT_METRICS = "github.com/go-kit/kit/metrics"

_TEMPLATE = "go/service.j2"


class ServiceStubLayer(GoLayer):
    """Adds the concrete service struct and one stub per accepted method."""

    name = "service"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.service_file

    def package(self, ctx: LayerContext) -> str:
        return ctx.service_file.package

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        raise NotFoundError(f"Service file missing: {self.target(ctx)}", artifact=self.target(ctx))

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        layout = ctx.layout
        interface = layout.interface_name
        struct = layout.struct_name
        merger.ensure_imports([("", KIT_LOG)])
        merger.ensure_alias("Middleware", f"func({interface}) {interface}", "Middleware describes a service middleware.")
        merger.ensure_struct(
            Struct(
                name=struct,
                fields=[NamedTypeValue(name="Logger", type="log.Logger")],
                comment=f"{struct} is the concrete implementation of {interface}.",
            )
        )
        merger.ensure_method(
            Method(
                name=f"New{upper_first(struct)}",
                parameters=[NamedTypeValue(name="logger", type="log.Logger")],
                results=[NamedTypeValue(name="svc", type=interface)],
                body=ctx.templates.macro(_TEMPLATE, "constructor", struct),
                comment=f"New{upper_first(struct)} returns a naive, stateless implementation of {interface}.",
            )
        )
        for pair in ctx.model.pairs:
            method = pair.method
            (receiver,) = local_names(method, struct[:1].lower())
            merger.ensure_method(
                Method(
                    name=method.name,
                    parameters=method.parameters,
                    results=method.results,
                    receiver=NamedTypeValue(name=receiver, type=struct),
                    body=ctx.templates.macro(_TEMPLATE, "stub", method),
                    comment=f"{method.name} implements {interface}.",
                )
            )


class ServiceLoggingLayer(GoLayer):
    """Service middleware that logs every call with its arguments and results."""

    name = "service-logging"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.logging_file

    def package(self, ctx: LayerContext) -> str:
        return ctx.service_file.package

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        interface = ctx.layout.interface_name
        merger.ensure_imports([("", KIT_LOG)] + ctx.source_imports(ctx.method_types()))
        merger.ensure_struct(
            Struct(
                name="loggingMiddleware",
                fields=[
                    NamedTypeValue(name="logger", type="log.Logger"),
                    NamedTypeValue(name="next", type=interface),
                ],
            )
        )
        merger.ensure_method(
            Method(
                name="LoggingMiddleware",
                parameters=[NamedTypeValue(name="logger", type="log.Logger")],
                results=[NamedTypeValue(name="", type="Middleware")],
                body=ctx.templates.macro(_TEMPLATE, "logging_constructor", interface),
                comment="LoggingMiddleware takes a logger as a dependency and returns a service Middleware.",
            )
        )
        for pair in ctx.model.pairs:
            method = pair.method
            (receiver,) = local_names(method, "mw")
            logged = [p for p in method.parameters if p.type != ctx.context_type] + method.results
            merger.ensure_method(
                Method(
                    name=method.name,
                    parameters=method.parameters,
                    results=method.results,
                    receiver=NamedTypeValue(name=receiver, type="loggingMiddleware"),
                    body=ctx.templates.macro(_TEMPLATE, "logging_method", method, receiver, logged),
                )
            )


class ServiceInstrumentingLayer(GoLayer):
    """Service middleware that counts calls and records their latency."""

    name = "service-instrumenting"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.instrumenting_file

    def package(self, ctx: LayerContext) -> str:
        return ctx.service_file.package

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        interface = ctx.layout.interface_name
        imports = [("", "time"), ("", KIT_METRICS)]
        if any(_error_result(pair.method) for pair in ctx.model.pairs):
            imports.append(("", "fmt"))
        merger.ensure_imports(imports + ctx.source_imports(ctx.method_types()))
        merger.ensure_struct(
            Struct(
                name="instrumentingMiddleware",
                fields=[
                    NamedTypeValue(name="requestCount", type="metrics.Counter"),
                    NamedTypeValue(name="requestLatency", type="metrics.Histogram"),
                    NamedTypeValue(name="next", type=interface),
                ],
            )
        )
        merger.ensure_method(
            Method(
                name="InstrumentingMiddleware",
                parameters=[
                    NamedTypeValue(name="requestCount", type="metrics.Counter"),
                    NamedTypeValue(name="requestLatency", type="metrics.Histogram"),
                ],
                results=[NamedTypeValue(name="", type="Middleware")],
                body=ctx.templates.macro(_TEMPLATE, "instrumenting_constructor", interface),
                comment="InstrumentingMiddleware returns a service middleware that instruments each method.",
            )
        )
        for pair in ctx.model.pairs:
            method = pair.method
            (receiver,) = local_names(method, "mw")
            merger.ensure_method(
                Method(
                    name=method.name,
                    parameters=method.parameters,
                    results=method.results,
                    receiver=NamedTypeValue(name=receiver, type="instrumentingMiddleware"),
                    body=ctx.templates.macro(
                        _TEMPLATE, "instrumenting_method", method, receiver, _error_result(method)
                    ),
                )
            )


def _error_result(method: Method) -> str | None:
    names: List[str] = [result.name for result in method.results if is_error(result.type)]
    return names[0] if names else None


__all__ = ["ServiceInstrumentingLayer", "ServiceLoggingLayer", "ServiceStubLayer"]
