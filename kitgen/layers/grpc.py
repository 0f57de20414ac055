"""gRPC transport: server/client adapters and a load-balanced client set.

Both layers need the Go bindings compiled from the proto schema; they refuse
to run until the compile script has produced them.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, List

from ..errors import NotFoundError
from ..gotypes import is_error
from ..models import MessagePair, Method, NamedTypeValue, Struct
from ..naming import camel_case
from ..schema import PROTO_SCALARS
from ..source import Binding
from ..synthesis import ArtifactMerger
from ..synthesis.merger import Import
from .base import GoLayer, LayerContext
from .endpoints import BINDING_RE, KIT_ENDPOINT
from .http import KIT_TRANSPORT
from .service import KIT_LOG

KIT_GRPC = "github.com/go-kit/kit/transport/grpc"
KIT_SD = "github.com/go-kit/kit/sd"
KIT_LB = "github.com/go-kit/kit/sd/lb"
GRPC = "google.golang.org/grpc"

SERVER_BINDING_RE = re.compile(r"gs\.(\w+)\s*=")

_TEMPLATE = "go/grpc.j2"
_CASTS = frozenset({"int", "int8", "int16", "uint", "uint8", "uint16", "byte"})


def to_wire(item: NamedTypeValue, value: str) -> str:
    if is_error(item.type):
        return f"err2str({value})"
    if item.type in _CASTS:
        return f"{PROTO_SCALARS[item.type]}({value})"
    return value


def from_wire(item: NamedTypeValue, value: str) -> str:
    if is_error(item.type):
        return f"str2err({value})"
    if item.type in _CASTS:
        return f"{item.type}({value})"
    return value


def conversions(fields: List[NamedTypeValue], source: str, *, wire: bool) -> List[Dict[str, str]]:
    convert = to_wire if wire else from_wire
    return [{"field": item.name, "value": convert(item, f"{source}.{item.name}")} for item in fields]


class _CompiledProtoLayer(GoLayer):
    def check(self, ctx: LayerContext) -> None:
        compiled = ctx.layout.pb_go_file
        if not ctx.fs.exists(compiled):
            raise NotFoundError(
                f"Compiled protobuf {compiled} not found; run the compile script in {compiled.parent} first",
                artifact=compiled,
            )

    def pb_package(self, ctx: LayerContext) -> str:
        return ctx.layout.package(ctx.layout.pb_dir)

    def pb_import(self, ctx: LayerContext) -> Import:
        return "", ctx.layout.import_path(ctx.layout.pb_dir)


class GRPCLayer(_CompiledProtoLayer):
    """Maintains ``grpc.go``: the server adapter, the client and the message codecs."""

    name = "grpc"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.grpc_file

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        layout = ctx.layout
        merger.ensure_struct(Struct(name="grpcServer"))
        merger.ensure_method(
            Method(
                name="NewGRPCServer",
                parameters=[
                    NamedTypeValue(name="endpoints", type=f"{ctx.endpoints_package}.Set"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                ],
                results=[NamedTypeValue(name="", type=f"{self.pb_package(ctx)}.{layout.pascal}Server")],
                body=ctx.templates.macro(_TEMPLATE, "server_preamble"),
                comment="NewGRPCServer makes a set of endpoints available as a gRPC server.",
            )
        )
        merger.ensure_method(
            Method(
                name="NewGRPCClient",
                parameters=[
                    NamedTypeValue(name="conn", type="*grpc.ClientConn"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                ],
                results=[NamedTypeValue(name="", type=f"{ctx.service_package}.{layout.interface_name}")],
                body=ctx.templates.macro(_TEMPLATE, "client_preamble", ctx.endpoints_package),
                comment=(
                    "NewGRPCClient returns a service backed by a gRPC server at the other end\n"
                    "of the conn."
                ),
            )
        )

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        pb = self.pb_package(ctx)
        merger.ensure_imports(
            [
                ("", "context"),
                ("", "errors"),
                ("", GRPC),
                ("", KIT_LOG),
                ("", KIT_TRANSPORT),
                ("grpctransport", KIT_GRPC),
                self.pb_import(ctx),
                ctx.endpoints_import(),
                ctx.service_import(),
            ]
        )
        pairs = ctx.model.pairs
        merger.ensure_fields(
            "grpcServer",
            [NamedTypeValue(name=camel_case(pair.name), type="grpctransport.Handler") for pair in pairs],
        )
        merger.ensure_bindings(
            "NewGRPCServer",
            [Binding(camel_case(p.name), templates.macro(_TEMPLATE, "server_binding", p)) for p in pairs],
            SERVER_BINDING_RE,
        )
        service = f"{pb}.{ctx.layout.pascal}"
        merger.ensure_bindings(
            "NewGRPCClient",
            [Binding(p.name, templates.macro(_TEMPLATE, "client_binding", p, pb, service)) for p in pairs],
            BINDING_RE,
        )
        for pair in pairs:
            self._merge_pair(ctx, merger, pair, pb)
        merger.ensure_method(
            Method(
                name="str2err",
                parameters=[NamedTypeValue(name="s", type="string")],
                results=[NamedTypeValue(name="", type="error")],
                body=templates.macro(_TEMPLATE, "str2err"),
            )
        )
        merger.ensure_method(
            Method(
                name="err2str",
                parameters=[NamedTypeValue(name="err", type="error")],
                results=[NamedTypeValue(name="", type="string")],
                body=templates.macro(_TEMPLATE, "err2str"),
            )
        )

    def _merge_pair(self, ctx: LayerContext, merger: ArtifactMerger, pair: MessagePair, pb: str) -> None:
        templates = ctx.templates
        endpoints = ctx.endpoints_package
        name = pair.name
        request = f"{endpoints}.{pair.request.name}"
        response = f"{endpoints}.{pair.response.name}"
        merger.ensure_method(
            Method(
                name=name,
                parameters=[
                    NamedTypeValue(name="ctx", type="context.Context"),
                    NamedTypeValue(name="req", type=f"*{pb}.{name}Req"),
                ],
                results=[
                    NamedTypeValue(name="", type=f"*{pb}.{name}Res"),
                    NamedTypeValue(name="", type="error"),
                ],
                receiver=NamedTypeValue(name="s", type="*grpcServer"),
                body=templates.macro(_TEMPLATE, "serve", pair, pb),
            )
        )
        request_fields, response_fields = pair.request.fields, pair.response.fields
        self._codec(
            ctx, merger, f"decodeGRPC{name}Req", "grpcReq",
            ("req", f"grpcReq.(*{pb}.{name}Req)", request, conversions(request_fields, "req", wire=False), False),
            f"converts a gRPC request to a user-domain {name} request.",
        )
        self._codec(
            ctx, merger, f"encodeGRPC{name}Res", "response",
            ("res", f"response.({response})", f"{pb}.{name}Res", conversions(response_fields, "res", wire=True), True),
            f"converts a user-domain {name} response to a gRPC reply.",
        )
        self._codec(
            ctx, merger, f"encodeGRPC{name}Req", "request",
            ("req", f"request.({request})", f"{pb}.{name}Req", conversions(request_fields, "req", wire=True), True),
            f"converts a user-domain {name} request to a gRPC request.",
        )
        self._codec(
            ctx, merger, f"decodeGRPC{name}Res", "grpcReply",
            ("reply", f"grpcReply.(*{pb}.{name}Res)", response, conversions(response_fields, "reply", wire=False), False),
            f"converts a gRPC reply to a user-domain {name} response.",
        )

    @staticmethod
    def _codec(ctx: LayerContext, merger: ArtifactMerger, func: str, argument: str, convert: tuple, doc: str) -> None:
        merger.ensure_method(
            Method(
                name=func,
                parameters=[
                    NamedTypeValue(name="_", type="context.Context"),
                    NamedTypeValue(name=argument, type="interface{}"),
                ],
                results=[NamedTypeValue(name="", type="interface{}"), NamedTypeValue(name="", type="error")],
                body=ctx.templates.macro(_TEMPLATE, "convert", *convert),
                comment=f"{func} {doc}",
            )
        )


class GRPCClientLayer(_CompiledProtoLayer):
    """Maintains ``grpc_client.go``: endpoints discovered through go-kit ``sd``."""

    name = "grpc-client"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.grpc_client_file

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        merger.ensure_method(
            Method(
                name="NewEndpointClientSet",
                parameters=[
                    NamedTypeValue(name="instancer", type="sd.Instancer"),
                    NamedTypeValue(name="retryMax", type="int"),
                    NamedTypeValue(name="retryTimeout", type="time.Duration"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                ],
                results=[NamedTypeValue(name="set", type=f"{ctx.endpoints_package}.Set")],
                body="return set",
                comment=(
                    "NewEndpointClientSet returns a Set whose endpoints are load balanced\n"
                    "over the service instances found by instancer."
                ),
            )
        )

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        endpoints = ctx.endpoints_package
        merger.ensure_imports(
            [
                ("", "io"),
                ("", "time"),
                ("", GRPC),
                ("", KIT_ENDPOINT),
                ("", KIT_LOG),
                ("", KIT_SD),
                ("", KIT_LB),
                ctx.endpoints_import(),
                ctx.service_import(),
            ]
        )
        merger.ensure_bindings(
            "NewEndpointClientSet",
            [
                Binding(pair.name, templates.macro(_TEMPLATE, "balanced_binding", pair, endpoints))
                for pair in ctx.model.pairs
            ],
            BINDING_RE,
        )
        interface = f"{ctx.service_package}.{ctx.layout.interface_name}"
        merger.ensure_method(
            Method(
                name="factory",
                parameters=[
                    NamedTypeValue(name="makeEndpoint", type=f"func({interface}) endpoint.Endpoint"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                ],
                results=[NamedTypeValue(name="", type="sd.Factory")],
                body=templates.macro(_TEMPLATE, "factory"),
                comment="factory dials an instance and adapts it to one endpoint.",
            )
        )


__all__ = [
    "GRPC",
    "GRPCClientLayer",
    "GRPCLayer",
    "KIT_GRPC",
    "SERVER_BINDING_RE",
    "conversions",
    "from_wire",
    "to_wire",
]
