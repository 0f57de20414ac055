"""Pipeline orchestration for the new/init/update commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import SUPPORTED_TRANSPORTS, KitgenConfig, load_config
from .errors import (
    ArtifactExistsError,
    ConfigError,
    KitgenError,
    LockError,
    NotFoundError,
    UnsupportedTransportError,
)
from .fs import DryRunFileSystem, FileSystem
from .layers import (
    CREATED,
    UNCHANGED,
    LayerContext,
    LayerResult,
    discover_layers,
    layers_for_service,
    layers_for_transport,
)
from .logging import artifact_extra, get_logger
from .paths import ServiceLayout, resolve_layout
from .rendering import TemplateEngine
from .source import GoFormatter
from .synthesis import InterfaceExtractor, MethodPolicyFilter, ModelBuilder, Rejection

# Errors that invalidate every layer of a run rather than just the one raising it.
_FATAL = (ConfigError, UnsupportedTransportError, NotFoundError, LockError)


@dataclass
class LayerFailure:
    layer: str
    error: KitgenError


@dataclass
class GenerationReport:
    """What one command did, layer by layer."""

    command: str
    service: str
    results: List[LayerResult] = field(default_factory=list)
    failures: List[LayerFailure] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)
    diff: str = ""

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        return self.failures[0].error.exit_code if self.failures else 0

    def changed(self) -> List[LayerResult]:
        return [result for result in self.results if result.status != UNCHANGED]


class Generator:
    """Coordinates extraction, modelling and the generation layers.

    Collaborators are injectable; by default they are built from the project's
    ``.kitgen.yml``. Nothing is cached between calls: every command re-reads
    the files it works on.
    """

    def __init__(
        self,
        root: Path | str = ".",
        *,
        config: KitgenConfig | None = None,
        fs: FileSystem | None = None,
        templates: TemplateEngine | None = None,
        formatter: GoFormatter | None = None,
        dry_run: bool = False,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.config = config or load_config(self.root)
        self.dry_run = dry_run
        if fs is None:
            fs = DryRunFileSystem(self.root) if dry_run else FileSystem(self.root)
        self.fs = fs
        self.templates = templates or TemplateEngine(self.config.templates_dir)
        if formatter is None:
            formatter = GoFormatter(self.config.format.command if self.config.format.enabled else None)
        self.formatter = formatter
        self.logger = get_logger("generator")

    # -- commands -----------------------------------------------------------

    def new_service(self, name: str) -> GenerationReport:
        """Write a service file holding an empty interface for the developer to fill in."""
        layout = self.layout(name)
        report = GenerationReport(command="new service", service=name)
        path = layout.service_file
        with self.fs.lock():
            if self.fs.exists(path):
                raise ArtifactExistsError(f"Service file already exists: {path}", artifact=path)
            text = self.templates.render(
                "go/new_service.go.j2",
                package=layout.package(layout.service_dir),
                interface=layout.interface_name,
                service=name,
            )
            self.fs.write_file(path, self.formatter.format(text + "\n", artifact=path))
        self.logger.info("Created service %s; add methods to %s", name, layout.interface_name, extra=artifact_extra(path))
        report.results.append(LayerResult("new-service", path, CREATED, [f"interface {layout.interface_name}"]))
        return self._finish(report)

    def init_service(self, name: str, transport: str | None = None) -> GenerationReport:
        """Generate the service stubs, endpoints and the transport's first artifacts."""
        transport = self._transport(transport)
        return self._run("init service", name, layers_for_service(transport), transport)

    def update_service(self, name: str, transport: str | None = None) -> GenerationReport:
        """Merge newly added interface methods into an initialized service."""
        transport = self._transport(transport)
        layout = self.layout(name, transport)
        if not self.fs.exists(layout.endpoints_file):
            raise NotFoundError(
                f"{layout.endpoints_file} not found; run `kitgen init service {name}` first",
                artifact=layout.endpoints_file,
            )
        return self._run("update service", name, layers_for_service(transport), transport)

    def init_transport(self, name: str, transport: str) -> GenerationReport:
        transport = self._transport(transport)
        return self._run(f"init {transport}", name, layers_for_transport(transport), transport)

    def update_grpc(self, name: str) -> GenerationReport:
        """Bring ``grpc.go`` up to date with the compiled protobuf bindings."""
        layout = self.layout(name, "grpc")
        if not self.fs.exists(layout.grpc_file):
            raise NotFoundError(
                f"{layout.grpc_file} not found; run `kitgen init grpc {name}` first",
                artifact=layout.grpc_file,
            )
        return self._run("update grpc", name, layers_for_transport("grpc"), "grpc")

    # -- pipeline -----------------------------------------------------------

    def layout(self, name: str, transport: str | None = None) -> ServiceLayout:
        return resolve_layout(self.config, self.templates, name, transport=transport)

    def context(self, name: str, transport: str | None = None) -> Tuple[LayerContext, List[Rejection]]:
        """Extract, filter and model the service interface of ``name``."""
        layout = self.layout(name, transport)
        policy = self.config.policy
        extractor = InterfaceExtractor(self.fs)
        service_file = extractor.load(layout.service_file)
        interface = extractor.from_file(service_file, layout.interface_name, artifact=layout.service_file)
        selected = MethodPolicyFilter(policy.context_type, require_context=policy.require_context).apply(interface)
        model = ModelBuilder(policy.context_type).build(
            name, interface.name, selected.accepted, package=service_file.package
        )
        self.logger.debug(
            "Interface %s: %d methods accepted, %d rejected",
            interface.name,
            len(selected.accepted),
            len(selected.rejected),
            extra=artifact_extra(layout.service_file),
        )
        ctx = LayerContext(
            layout=layout,
            config=self.config,
            interface=interface,
            model=model,
            service_file=service_file,
            fs=self.fs,
            templates=self.templates,
            formatter=self.formatter,
        )
        return ctx, selected.rejected

    def _run(self, command: str, name: str, layer_names: Sequence[str], transport: str) -> GenerationReport:
        report = GenerationReport(command=command, service=name)
        layers = discover_layers(layer_names)
        with self.fs.lock():
            ctx, report.rejected = self.context(name, transport)
            for layer in layers:
                try:
                    report.results.append(layer.generate(ctx))
                except _FATAL:
                    raise
                except KitgenError as exc:
                    self.logger.error("%s layer failed: %s", layer.name, exc, extra=artifact_extra(exc.artifact))
                    report.failures.append(LayerFailure(layer.name, exc))
        return self._finish(report)

    def _finish(self, report: GenerationReport) -> GenerationReport:
        if isinstance(self.fs, DryRunFileSystem):
            report.diff = self.fs.diff()
        self.logger.info(
            "%s %s: %d changed, %d failed",
            report.command,
            report.service,
            len(report.changed()),
            len(report.failures),
        )
        return report

    def _transport(self, transport: Optional[str]) -> str:
        chosen = (transport or self.config.default_transport).lower()
        if chosen not in SUPPORTED_TRANSPORTS:
            raise UnsupportedTransportError(
                f"Transport '{chosen}' is not supported; choose one of {', '.join(SUPPORTED_TRANSPORTS)}"
            )
        return chosen


__all__ = ["GenerationReport", "Generator", "LayerFailure"]
