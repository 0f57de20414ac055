"""Thrift transport handler over the code generated from the Thrift IDL."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import List

from ..errors import NotFoundError
from ..logging import artifact_extra, get_logger
from ..models import Method, NamedTypeValue, Struct
from ..naming import camel_case
from ..source import Binding
from ..synthesis import ArtifactMerger
from .base import GoLayer, LayerContext
from .endpoints import KIT_ENDPOINT

HANDLER_BINDING_RE = re.compile(r"s\.(\w+)\s*=\s*endpoints\.")

_TEMPLATE = "go/thrift.j2"


class ThriftHandlerLayer(GoLayer):
    """Maintains the handler that serves the Thrift service from the endpoint set.

    Request and response codecs start out returning "not implemented" errors;
    the field mapping between the IDL structs and the endpoint models is left
    to the developer.
    """

    name = "thrift-handler"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.thrift_handler_file

    def check(self, ctx: LayerContext) -> None:
        compiled = ctx.layout.thrift_compiled_file
        if not ctx.fs.exists(compiled):
            raise NotFoundError(
                f"Compiled thrift {compiled} not found; run the compile script in {ctx.layout.thrift_dir} first",
                artifact=compiled,
            )

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        layout = ctx.layout
        merger.ensure_struct(Struct(name="thriftServer"))
        merger.ensure_method(
            Method(
                name="MakeThriftHandler",
                parameters=[NamedTypeValue(name="endpoints", type=f"{ctx.endpoints_package}.Set")],
                results=[NamedTypeValue(name="", type=f"{layout.snake}.{layout.pascal}")],
                body=ctx.templates.macro(_TEMPLATE, "handler_preamble"),
                comment="MakeThriftHandler makes a set of endpoints available as a Thrift service.",
            )
        )

    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        templates = ctx.templates
        layout = ctx.layout
        generated = layout.snake
        endpoints = ctx.endpoints_package
        merger.ensure_imports(
            [
                ("", "context"),
                ("", "errors"),
                ("", KIT_ENDPOINT),
                ("", layout.import_path(layout.thrift_gen_dir)),
                ctx.endpoints_import(),
            ]
        )
        pairs = ctx.model.pairs
        merger.ensure_fields(
            "thriftServer",
            [NamedTypeValue(name=camel_case(pair.name), type="endpoint.Endpoint") for pair in pairs],
        )
        merger.ensure_bindings(
            "MakeThriftHandler",
            [Binding(camel_case(pair.name), templates.macro(_TEMPLATE, "binding", pair)) for pair in pairs],
            HANDLER_BINDING_RE,
        )
        stubbed: List[str] = []
        for pair in pairs:
            name = pair.name
            request = f"*{generated}.{name}Request"
            reply = f"*{generated}.{name}Reply"
            if merger.ensure_method(
                Method(
                    name=f"DecodeThrift{name}Request",
                    parameters=[NamedTypeValue(name="r", type=request)],
                    results=[
                        NamedTypeValue(name="req", type=f"{endpoints}.{pair.request.name}"),
                        NamedTypeValue(name="err", type="error"),
                    ],
                    body=templates.macro(_TEMPLATE, "not_implemented", pair, "decoder"),
                    comment=f"DecodeThrift{name}Request converts a Thrift request into the endpoint request.",
                )
            ):
                stubbed.append(name)
            merger.ensure_method(
                Method(
                    name=f"EncodeThrift{name}Response",
                    parameters=[NamedTypeValue(name="response", type="interface{}")],
                    results=[
                        NamedTypeValue(name="rep", type=reply),
                        NamedTypeValue(name="err", type="error"),
                    ],
                    body=templates.macro(_TEMPLATE, "not_implemented", pair, "encoder"),
                    comment=f"EncodeThrift{name}Response converts the endpoint response into a Thrift reply.",
                )
            )
            merger.ensure_method(
                Method(
                    name=name,
                    parameters=[
                        NamedTypeValue(name="ctx", type="context.Context"),
                        NamedTypeValue(name="req", type=request),
                    ],
                    results=[NamedTypeValue(name="", type=reply), NamedTypeValue(name="", type="error")],
                    receiver=NamedTypeValue(name="s", type="*thriftServer"),
                    body=templates.macro(_TEMPLATE, "serve", pair),
                )
            )
        if stubbed:
            get_logger(f"layers.{self.name}").warning(
                "Implement the Thrift codecs of %s",
                ", ".join(stubbed),
                extra=artifact_extra(merger.artifact),
            )


__all__ = ["HANDLER_BINDING_RE", "ThriftHandlerLayer"]
