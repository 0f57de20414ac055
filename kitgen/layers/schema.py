"""Wire-schema layers: the protobuf and Thrift IDL files plus their compile scripts."""

from __future__ import annotations

import sys
from pathlib import PurePosixPath
from typing import List, Optional, Sequence, Tuple, Type

from ..errors import MissingScaffoldError, SchemaError, UnsupportedTypeError
from ..logging import artifact_extra, get_logger
from ..models import MessagePair, NamedTypeValue, WireField, WireMessage
from ..schema import IdlParser, MessageRegistry, ThriftTypeMapper, TypeMapper
from .base import Layer, LayerContext, LayerResult


class SchemaLayer(Layer):
    """Keeps one IDL file in step with the endpoint model.

    Every unsupported type across all methods is collected first; if any is
    found nothing is written and a single ``SchemaError`` lists them all.
    """

    block_kind = "message"
    hash_comments = False
    mapper_class: Type[TypeMapper] = TypeMapper
    schema_template = ""
    message_template = ""
    script_name = "compile"
    script_template = ""
    method_keyword = "rpc"

    def message_names(self, pair: MessagePair) -> Tuple[str, str]:
        return pair.request.name, pair.response.name

    def method_line(self, pair: MessagePair) -> str:
        raise NotImplementedError

    def scaffold(self, ctx: LayerContext) -> str:
        raise NotImplementedError

    def generate(self, ctx: LayerContext) -> LayerResult:
        self.check(ctx)
        path = self.target(ctx)
        parser = IdlParser(hash_comments=self.hash_comments, artifact=path)
        original: Optional[str] = None
        if ctx.fs.exists(path):
            original = ctx.fs.read_file(path)
            document = parser.parse(original)
        else:
            document = parser.parse(self.scaffold(ctx))
        service = document.find("service", ctx.layout.pascal)
        if service is None:
            raise MissingScaffoldError(f"Could not find service {ctx.layout.pascal}", artifact=path)

        registry = MessageRegistry(document.names(self.block_kind))
        mapper = self.mapper_class(registry)
        issues: List[UnsupportedTypeError] = []
        methods: List[Tuple[str, str]] = []
        messages: List[WireMessage] = []
        for pair in ctx.model.pairs:
            request_name, response_name = self.message_names(pair)
            wanted = [n for n in (request_name, response_name) if document.find(self.block_kind, n) is None]
            if pair.name in service.members and not wanted:
                continue
            try:
                request = self.wire_message(request_name, pair.request.fields, mapper, offset=1)
                response = self.wire_message(response_name, pair.response.fields, mapper, offset=0)
            except UnsupportedTypeError as exc:
                issues.append(UnsupportedTypeError(exc.type_expr, exc.reason, method=pair.name, artifact=path))
                continue
            if pair.name not in service.members:
                methods.append((pair.name, self.method_line(pair)))
            messages.extend(message for message in (request, response) if message.name in wanted)
        if issues:
            raise SchemaError(issues, artifact=path)

        added: List[str] = []
        if methods:
            document.replace(service, parser.extend_block(service, [line for _, line in methods]))
            added.extend(f"{self.method_keyword} {name}" for name, _ in methods)
        generated = {message.name for message in messages}
        placeholders = [WireMessage(name=name) for name in registry.new_names() if name not in generated]
        for message in messages + placeholders:
            text = self.render_message(ctx, message, placeholder=message.name not in generated)
            document.append(parser.parse(text).items[0])
            added.append(f"{self.block_kind} {message.name}")

        result = self.write(ctx, path, original, document.render(), added)
        self.write_script(ctx, path)
        if original is None:
            get_logger(f"layers.{self.name}").warning(
                "Schema created; run %s to generate the bindings before initializing the transport",
                self.script_path(path).name,
                extra=artifact_extra(path),
            )
        return result

    def wire_message(
        self, name: str, fields: Sequence[NamedTypeValue], mapper: TypeMapper, *, offset: int
    ) -> WireMessage:
        """Field numbers are the model indices shifted by ``offset``."""
        return WireMessage(
            name=name,
            fields=[
                WireField(name=item.name, type=mapper.map(item.type).wire_type, number=(item.index or 0) + offset)
                for item in fields
            ],
        )

    def render_message(self, ctx: LayerContext, message: WireMessage, *, placeholder: bool = False) -> str:
        comment = f"{message.name} mirrors the Go type of the same name; define its fields." if placeholder else None
        return ctx.templates.render(self.message_template, message=message, comment=comment)

    def script_path(self, schema: PurePosixPath) -> PurePosixPath:
        suffix = ".bat" if sys.platform.startswith("win") else ".sh"
        return schema.parent / f"{self.script_name}{suffix}"

    def write_script(self, ctx: LayerContext, schema: PurePosixPath) -> None:
        script = self.script_path(schema)
        if ctx.fs.exists(script):
            return
        text = ctx.templates.render(
            f"{self.script_template}{script.suffix}.j2", schema=schema.name, output=self.compiled_name(ctx)
        )
        ctx.fs.write_file(script, text + "\n", executable=True)
        get_logger(f"layers.{self.name}").info("Created compile script", extra=artifact_extra(script))

    def compiled_name(self, ctx: LayerContext) -> str:
        return ""


class ProtoSchemaLayer(SchemaLayer):
    name = "proto"
    schema_template = "proto/schema.proto.j2"
    message_template = "proto/message.proto.j2"
    script_template = "scripts/compile_proto"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.proto_file

    def scaffold(self, ctx: LayerContext) -> str:
        layout = ctx.layout
        return ctx.templates.render(
            self.schema_template,
            package=layout.package(layout.pb_dir),
            go_package=layout.import_path(layout.pb_dir),
            service=layout.pascal,
            interface=layout.interface_name,
        )

    def method_line(self, pair: MessagePair) -> str:
        request, response = self.message_names(pair)
        return f"rpc {pair.name} ({request}) returns ({response}) {{}}"

    def compiled_name(self, ctx: LayerContext) -> str:
        return ctx.layout.pb_go_file.name


class ThriftSchemaLayer(SchemaLayer):
    name = "thrift-idl"
    block_kind = "struct"
    hash_comments = True
    mapper_class = ThriftTypeMapper
    schema_template = "thrift/schema.thrift.j2"
    message_template = "thrift/struct.thrift.j2"
    script_template = "scripts/compile_thrift"
    method_keyword = "method"

    def target(self, ctx: LayerContext) -> PurePosixPath:
        return ctx.layout.thrift_idl_file

    def scaffold(self, ctx: LayerContext) -> str:
        return ctx.templates.render(
            self.schema_template,
            namespace=ctx.layout.snake,
            service=ctx.layout.pascal,
            interface=ctx.layout.interface_name,
        )

    def message_names(self, pair: MessagePair) -> Tuple[str, str]:
        return f"{pair.name}Request", f"{pair.name}Reply"

    def method_line(self, pair: MessagePair) -> str:
        request, response = self.message_names(pair)
        return f"{response} {pair.name}(1: {request} req)"


__all__ = ["ProtoSchemaLayer", "SchemaLayer", "ThriftSchemaLayer"]
