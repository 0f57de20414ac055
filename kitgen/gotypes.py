"""Textual helpers over Go type expressions and signatures."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Set

from .models import Method, NamedTypeValue
from .naming import unique_name

PREDECLARED_TYPES = frozenset(
    {
        "any", "bool", "byte", "complex64", "complex128", "error", "float32", "float64",
        "int", "int8", "int16", "int32", "int64", "rune", "string",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    }
)
_TYPE_KEYWORDS = frozenset({"chan", "func", "interface", "map", "struct"})

_NAME_RE = re.compile(r"(?<!\w)(?<!\w\.)([A-Za-z_]\w*)(\.[A-Za-z_]\w*)?")
_QUALIFIER_RE = re.compile(r"(?<!\w)(?<!\w\.)([A-Za-z_]\w*)\.[A-Za-z_]")


def is_error(type_expr: str) -> bool:
    return type_expr.strip() == "error"


def is_variadic(type_expr: str) -> bool:
    return type_expr.startswith("...")


def qualify(type_expr: str, package: str) -> str:
    """Prefix names declared in ``package`` so the type reads from another package."""

    def _replace(match: re.Match) -> str:
        name, selector = match.group(1), match.group(2)
        if selector or name in PREDECLARED_TYPES or name in _TYPE_KEYWORDS:
            return match.group(0)
        return f"{package}.{name}"

    return _NAME_RE.sub(_replace, type_expr)


def qualifiers(type_exprs: Iterable[str]) -> Set[str]:
    """Package names referenced as ``pkg.Name`` in the given types."""
    found: Set[str] = set()
    for expr in type_exprs:
        found.update(_QUALIFIER_RE.findall(expr))
    return found


def signature_params(params: Sequence[NamedTypeValue]) -> str:
    return ", ".join(f"{p.name} {p.type}".strip() for p in params)


def signature_results(results: Sequence[NamedTypeValue]) -> str:
    """Result list as it follows the parameter list, leading space included."""
    if not results:
        return ""
    if len(results) == 1 and not results[0].name:
        return f" {results[0].type}"
    return f" ({signature_params(results)})"


def call_args(params: Sequence[NamedTypeValue]) -> str:
    """Forward parameters to another call, spreading a variadic one."""
    parts: List[str] = []
    for param in params:
        parts.append(f"{param.name}..." if is_variadic(param.type) else param.name)
    return ", ".join(parts)


def local_names(method: Method, *bases: str) -> List[str]:
    """Receiver or local variable names that collide with none of the method's own names."""
    taken: Set[str] = {p.name for p in method.parameters + method.results if p.name}
    return [unique_name(base, taken) for base in bases]


def element_type(type_expr: str) -> str:
    """``...T`` as the slice the callee receives."""
    return f"[]{type_expr[3:]}" if is_variadic(type_expr) else type_expr


__all__ = [
    "PREDECLARED_TYPES",
    "call_args",
    "element_type",
    "is_error",
    "is_variadic",
    "local_names",
    "qualifiers",
    "qualify",
    "signature_params",
    "signature_results",
]
