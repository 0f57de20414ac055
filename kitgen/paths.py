"""Where each generated artifact lives for a given service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from .config import KitgenConfig
from .naming import pascal_case, snake_case
from .rendering import TemplateEngine


@dataclass(frozen=True)
class ServiceLayout:
    """Resolved, root-relative paths and Go package names for one service."""

    name: str
    module: str
    interface_name: str
    struct_name: str
    service_dir: PurePosixPath
    service_file: PurePosixPath
    logging_file: PurePosixPath
    instrumenting_file: PurePosixPath
    endpoints_dir: PurePosixPath
    endpoints_file: PurePosixPath
    endpoint_middleware_file: PurePosixPath
    http_dir: PurePosixPath
    http_file: PurePosixPath
    http_test_file: PurePosixPath
    grpc_dir: PurePosixPath
    grpc_file: PurePosixPath
    grpc_client_file: PurePosixPath
    pb_dir: PurePosixPath
    thrift_dir: PurePosixPath
    thrift_handler_file: PurePosixPath

    @property
    def snake(self) -> str:
        return snake_case(self.name)

    @property
    def pascal(self) -> str:
        return pascal_case(self.name)

    @property
    def proto_file(self) -> PurePosixPath:
        return self.pb_dir / f"{self.snake}.proto"

    @property
    def pb_go_file(self) -> PurePosixPath:
        return self.pb_dir / f"{self.snake}.pb.go"

    @property
    def thrift_idl_file(self) -> PurePosixPath:
        return self.thrift_dir / f"{self.snake}.thrift"

    @property
    def thrift_gen_dir(self) -> PurePosixPath:
        return self.thrift_dir / "gen-go" / self.snake

    @property
    def thrift_compiled_file(self) -> PurePosixPath:
        return self.thrift_gen_dir / f"{self.snake}.go"

    def package(self, directory: PurePosixPath) -> str:
        """Go package name of a directory: its last element."""
        return directory.name

    def import_path(self, directory: PurePosixPath) -> str:
        return f"{self.module}/{directory.as_posix()}" if self.module else directory.as_posix()


def resolve_layout(
    config: KitgenConfig,
    templates: TemplateEngine,
    service_name: str,
    *,
    transport: str | None = None,
) -> ServiceLayout:
    """Evaluate the configured path templates for ``service_name``."""

    def render(source: str) -> PurePosixPath:
        text = templates.render_string(
            source, service_name=service_name, transport_type=transport or config.default_transport
        )
        return PurePosixPath(text.strip().strip("/") or ".")

    service_dir = render(config.service.path)
    endpoints_dir = render(config.endpoints.path)
    http_dir = render(config.http.path)
    grpc_dir = render(config.grpc.path)
    thrift_dir = render(config.thrift.path)
    return ServiceLayout(
        name=service_name,
        module=config.module,
        interface_name=config.service.interface_name,
        struct_name=config.service.struct_name,
        service_dir=service_dir,
        service_file=service_dir / config.service.file_name,
        logging_file=service_dir / config.service.logging_file_name,
        instrumenting_file=service_dir / config.service.instrumenting_file_name,
        endpoints_dir=endpoints_dir,
        endpoints_file=endpoints_dir / config.endpoints.file_name,
        endpoint_middleware_file=endpoints_dir / config.endpoints.middleware_file_name,
        http_dir=http_dir,
        http_file=http_dir / config.http.file_name,
        http_test_file=http_dir / config.http.test_file_name,
        grpc_dir=grpc_dir,
        grpc_file=grpc_dir / config.grpc.file_name,
        grpc_client_file=grpc_dir / config.grpc.client_file_name,
        pb_dir=render(config.pb.path),
        thrift_dir=thrift_dir,
        thrift_handler_file=thrift_dir / config.thrift.file_name,
    )


__all__ = ["ServiceLayout", "resolve_layout"]
