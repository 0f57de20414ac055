"""HTTP transport: handler, request decoders and a smoke-test file."""

from __future__ import annotations

import json
import re
from pathlib import PurePosixPath

from ..models import Method, NamedTypeValue, Struct
from ..naming import snake_case
from ..source import Binding
from ..synthesis import ArtifactMerger
from .base import GoLayer, LayerContext
from .service import KIT_LOG

KIT_TRANSPORT = "github.com/go-kit/kit/transport"
KIT_HTTP = "github.com/go-kit/kit/transport/http"

ROUTE_RE = re.compile(r"endpoints\.(\w+)Endpoint")

_TEMPLATE = "go/http.j2"


class HTTPLayer(GoLayer):
    name = "http"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.http_file

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        merger.ensure_method(
            Method(
                name="NewHTTPHandler",
                parameters=[
                    NamedTypeValue(name="endpoints", type=f"{ctx.endpoints_package}.Set"),
                    NamedTypeValue(name="logger", type="log.Logger"),
                ],
                results=[NamedTypeValue(name="", type="http.Handler")],
                body=ctx.templates.macro(_TEMPLATE, "handler_preamble"),
                comment="NewHTTPHandler returns a handler that makes a set of endpoints available on predefined paths.",
            )
        )

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        endpoints = ctx.endpoints_package
        merger.ensure_imports(
            [
                ("", "context"),
                ("", "encoding/json"),
                ("", "io"),
                ("", "net/http"),
                ("", KIT_LOG),
                ("", KIT_TRANSPORT),
                ("httptransport", KIT_HTTP),
                ctx.endpoints_import(),
            ]
        )
        merger.ensure_bindings(
            "NewHTTPHandler",
            [Binding(pair.name, templates.macro(_TEMPLATE, "route", pair)) for pair in ctx.model.pairs],
            ROUTE_RE,
        )
        for pair in ctx.model.pairs:
            merger.ensure_method(
                Method(
                    name=f"decodeHTTP{pair.name}Req",
                    parameters=[
                        NamedTypeValue(name="_", type="context.Context"),
                        NamedTypeValue(name="r", type="*http.Request"),
                    ],
                    results=[
                        NamedTypeValue(name="", type="interface{}"),
                        NamedTypeValue(name="", type="error"),
                    ],
                    body=templates.macro(_TEMPLATE, "decode_request", pair, endpoints),
                    comment=(
                        f"decodeHTTP{pair.name}Req is a transport/http.DecodeRequestFunc that decodes a\n"
                        "JSON-encoded request from the HTTP request body."
                    ),
                )
            )
        merger.ensure_method(
            Method(
                name="encodeHTTPGenericResponse",
                parameters=[
                    NamedTypeValue(name="ctx", type="context.Context"),
                    NamedTypeValue(name="w", type="http.ResponseWriter"),
                    NamedTypeValue(name="response", type="interface{}"),
                ],
                results=[NamedTypeValue(name="", type="error")],
                body=templates.macro(_TEMPLATE, "encode_response", endpoints),
                comment=(
                    "encodeHTTPGenericResponse is a transport/http.EncodeResponseFunc that encodes\n"
                    "the response as JSON to the response writer."
                ),
            )
        )
        merger.ensure_method(
            Method(
                name="errorEncoder",
                parameters=[
                    NamedTypeValue(name="_", type="context.Context"),
                    NamedTypeValue(name="err", type="error"),
                    NamedTypeValue(name="w", type="http.ResponseWriter"),
                ],
                body=templates.macro(_TEMPLATE, "error_encoder"),
            )
        )
        merger.ensure_struct(
            Struct(
                name="errorWrapper",
                fields=[NamedTypeValue(name="Error", type="string", tag='`json:"error"`')],
            )
        )


class HTTPTestLayer(GoLayer):
    """One POST-per-route smoke test against a running server."""

    name = "http-test"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.http_test_file

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        merger.ensure_imports([("", "bytes"), ("", "io"), ("", "net/http"), ("", "testing")])
        merger.ensure_values(
            "const", [NamedTypeValue(name="Host", type="", value='"http://localhost:8080"')]
        )
        merger.ensure_method(
            Method(
                name="HTTPPostJSON",
                parameters=[
                    NamedTypeValue(name="t", type="*testing.T"),
                    NamedTypeValue(name="host", type="string"),
                    NamedTypeValue(name="path", type="string"),
                    NamedTypeValue(name="content", type="[]byte"),
                ],
                results=[NamedTypeValue(name="", type="[]byte")],
                body=templates.macro(_TEMPLATE, "post_json"),
                comment="HTTPPostJSON posts content to host+path and returns the response body.",
            )
        )
        for pair in ctx.model.pairs:
            payload = json.dumps({snake_case(p.name): None for p in pair.params}, separators=(",", ":"))
            merger.ensure_method(
                Method(
                    name=f"Test{pair.name}",
                    parameters=[NamedTypeValue(name="t", type="*testing.T")],
                    body=templates.macro(_TEMPLATE, "test_method", pair, payload),
                )
            )


__all__ = ["HTTPLayer", "HTTPTestLayer", "KIT_HTTP", "KIT_TRANSPORT", "ROUTE_RE"]
