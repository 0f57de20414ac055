"""Generation layers and the commands that run them."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from ..errors import UnsupportedTransportError
from .base import CREATED, UNCHANGED, UPDATED, GoLayer, Layer, LayerContext, LayerResult
from .endpoints import EndpointMiddlewareLayer, EndpointsLayer
from .grpc import GRPCClientLayer, GRPCLayer
from .http import HTTPLayer, HTTPTestLayer
from .schema import ProtoSchemaLayer, SchemaLayer, ThriftSchemaLayer
from .service import ServiceInstrumentingLayer, ServiceLoggingLayer, ServiceStubLayer
from .thrift import ThriftHandlerLayer

_ENTRY_POINT_GROUP = "kitgen.layers"

_BUILTIN_FACTORIES: Dict[str, Callable[[], Layer]] = {
    "service": ServiceStubLayer,
    "service-logging": ServiceLoggingLayer,
    "service-instrumenting": ServiceInstrumentingLayer,
    "endpoints": EndpointsLayer,
    "endpoint-middleware": EndpointMiddlewareLayer,
    "http": HTTPLayer,
    "http-test": HTTPTestLayer,
    "proto": ProtoSchemaLayer,
    "grpc": GRPCLayer,
    "grpc-client": GRPCClientLayer,
    "thrift-idl": ThriftSchemaLayer,
    "thrift-handler": ThriftHandlerLayer,
}

SERVICE_LAYERS: Tuple[str, ...] = (
    "service",
    "service-logging",
    "service-instrumenting",
    "endpoints",
    "endpoint-middleware",
)

# What ``init service``/``update service`` add for the chosen transport.
SERVICE_TRANSPORT_LAYERS: Dict[str, Tuple[str, ...]] = {
    "http": ("http", "http-test"),
    "grpc": ("proto",),
    "thrift": ("thrift-idl",),
}

# What ``init <transport>`` generates once the schema has been compiled.
TRANSPORT_LAYERS: Dict[str, Tuple[str, ...]] = {
    "http": ("http", "http-test"),
    "grpc": ("grpc", "grpc-client"),
    "thrift": ("thrift-handler",),
}


def layers_for_service(transport: str) -> Tuple[str, ...]:
    return SERVICE_LAYERS + _transport_entry(SERVICE_TRANSPORT_LAYERS, transport)


def layers_for_transport(transport: str) -> Tuple[str, ...]:
    return _transport_entry(TRANSPORT_LAYERS, transport)


def _transport_entry(table: Dict[str, Tuple[str, ...]], transport: str) -> Tuple[str, ...]:
    try:
        return table[transport]
    except KeyError:
        supported = ", ".join(sorted(table))
        raise UnsupportedTransportError(
            f"Transport '{transport}' is not supported; choose one of {supported}"
        ) from None


def discover_layers(names: Sequence[str]) -> List[Layer]:
    """Instantiate layers by name, in the order given.

    Third-party layers registered under the ``kitgen.layers`` entry point group
    are available by their entry point name.
    """
    factories: Dict[str, Callable[[], Layer]] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        factories.setdefault(entry.name, entry.load)

    layers: List[Layer] = []
    for name in names:
        factory = factories.get(name)
        if factory is None:
            raise ValueError(f"Unknown layer requested: {name}")
        instance = factory()
        if isinstance(instance, type) and issubclass(instance, Layer):
            instance = instance()
        if not isinstance(instance, Layer):
            raise TypeError(f"Layer factory for '{name}' did not return a Layer instance")
        layers.append(instance)
    return layers


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "CREATED",
    "GoLayer",
    "Layer",
    "LayerContext",
    "LayerResult",
    "SERVICE_LAYERS",
    "SERVICE_TRANSPORT_LAYERS",
    "SchemaLayer",
    "TRANSPORT_LAYERS",
    "UNCHANGED",
    "UPDATED",
    "discover_layers",
    "layers_for_service",
    "layers_for_transport",
]
