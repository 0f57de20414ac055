"""Wire-schema support: Go type mapping and IDL documents."""

from .idl import IdlDocument, IdlItem, IdlParser
from .typemap import (
    PROTO_SCALARS,
    THRIFT_SCALARS,
    MessageRegistry,
    ThriftTypeMapper,
    TypeMapper,
    TypeMapping,
)

__all__ = [
    "IdlDocument",
    "IdlItem",
    "IdlParser",
    "MessageRegistry",
    "PROTO_SCALARS",
    "THRIFT_SCALARS",
    "ThriftTypeMapper",
    "TypeMapper",
    "TypeMapping",
]
