"""Base classes for generation layers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, List, Optional

from ..config import KitgenConfig
from ..fs import FileSystem
from ..gotypes import qualifiers
from ..logging import artifact_extra, get_logger
from ..models import EndpointModel, Interface, MessagePair
from ..paths import ServiceLayout
from ..rendering import TemplateEngine
from ..source import GoFile, GoFormatter, GoParser
from ..synthesis import ArtifactMerger
from ..synthesis.merger import Import

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


@dataclass
class LayerContext:
    """Everything a layer needs for one run; rebuilt from disk every invocation."""

    layout: ServiceLayout
    config: KitgenConfig
    interface: Interface
    model: EndpointModel
    service_file: GoFile
    fs: FileSystem
    templates: TemplateEngine
    formatter: GoFormatter

    @property
    def context_type(self) -> str:
        return self.config.policy.context_type

    @property
    def service_package(self) -> str:
        return self.service_file.package

    @property
    def endpoints_package(self) -> str:
        return self.layout.package(self.layout.endpoints_dir)

    def service_import(self) -> Import:
        return self._package_import(self.layout.service_dir, self.service_package)

    def endpoints_import(self) -> Import:
        return self._package_import(self.layout.endpoints_dir, self.endpoints_package)

    def _package_import(self, directory: PurePosixPath, package: str) -> Import:
        alias = "" if package == self.layout.package(directory) else package
        return alias, self.layout.import_path(directory)

    def source_imports(self, type_exprs: Iterable[str]) -> List[Import]:
        """Imports of the service file needed by the given (unqualified) types."""
        wanted = qualifiers(type_exprs)
        found: List[Import] = []
        for item in self.service_file.imports:
            local = item.name or item.type.rsplit("/", 1)[-1]
            if local in wanted:
                found.append((item.name, item.type))
        return found

    def method_types(self, pairs: Iterable[MessagePair] | None = None) -> List[str]:
        pairs = self.model.pairs if pairs is None else pairs
        return [p.type for pair in pairs for p in pair.method.parameters + pair.method.results]

    def context_arg(self, pair: MessagePair) -> str:
        for param in pair.method.parameters:
            if param.type == self.context_type:
                return param.name
        return "context.Background()"


@dataclass
class LayerResult:
    layer: str
    path: PurePosixPath
    status: str
    added: List[str] = field(default_factory=list)


class Layer(ABC):
    """Contract for anything that synthesizes one artifact."""

    name: str = ""

    @abstractmethod
    def target(self, ctx: LayerContext) -> PurePosixPath:
        """Root-relative path of the artifact this layer maintains."""

    @abstractmethod
    def generate(self, ctx: LayerContext) -> LayerResult:
        """Create the artifact or merge into the existing one."""

    def check(self, ctx: LayerContext) -> None:
        """Raise when a precondition of the layer is not met."""

    def write(
        self, ctx: LayerContext, path: PurePosixPath, original: Optional[str], text: str, added: List[str]
    ) -> LayerResult:
        logger = get_logger(f"layers.{self.name}")
        if original == text:
            logger.debug("Already up to date", extra=artifact_extra(path))
            return LayerResult(self.name, path, UNCHANGED, added)
        ctx.fs.write_file(path, text)
        status = CREATED if original is None else UPDATED
        logger.info("%s (%d additions)", status.capitalize(), len(added), extra=artifact_extra(path))
        return LayerResult(self.name, path, status, added)


class GoLayer(Layer):
    """A layer whose artifact is a Go source file.

    A missing file is bootstrapped from ``scaffold`` once; afterwards only
    ``merge`` runs, against whatever the developer has left in the file.
    """

    def generate(self, ctx: LayerContext) -> LayerResult:
        self.check(ctx)
        path = self.target(ctx)
        original: Optional[str] = None
        if ctx.fs.exists(path):
            original = ctx.fs.read_file(path)
            merger = ArtifactMerger(GoParser(artifact=path).parse(original), artifact=path)
        else:
            merger = ArtifactMerger(GoFile(package=self.package(ctx)), artifact=path)
            self.scaffold(ctx, merger)
        gofile = merger.gofile
        self.merge(ctx, merger)
        text = ctx.formatter.format(gofile.render(), artifact=path)
        return self.write(ctx, path, original, text, merger.added)

    def package(self, ctx: LayerContext) -> str:
        return ctx.layout.package(self.target(ctx).parent)

    def scaffold(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        """Add the structs and constructors later runs extend."""

    @abstractmethod
    def merge(self, ctx: LayerContext, merger: ArtifactMerger) -> None:
        """Add whatever the current model needs and the file lacks."""


__all__ = [
    "CREATED",
    "GoLayer",
    "Layer",
    "LayerContext",
    "LayerResult",
    "UNCHANGED",
    "UPDATED",
]
