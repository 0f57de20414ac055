"""Structural model of a Go source file that keeps every declaration's text.

A ``GoFile`` is an ordered list of top-level declarations. Each declaration
holds its exact source text (doc comments included) together with the parsed
models and the offsets needed to splice new content into it. Rendering joins
the texts, so anything the generator did not touch is written back verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ..models import Interface, Method, NamedTypeValue, Struct


@dataclass
class Decl:
    kind: str
    raw: str


@dataclass
class ImportDecl(Decl):
    imports: List[NamedTypeValue] = field(default_factory=list)
    close: Optional[int] = None  # offset of ')' when grouped


@dataclass
class ValueDecl(Decl):
    """A const or var declaration; ``kind`` says which."""

    values: List[NamedTypeValue] = field(default_factory=list)


@dataclass
class TypeSpec:
    name: str
    model: Union[Struct, Interface, NamedTypeValue]
    close: Optional[int] = None  # offset of the closing brace of a struct/interface body


@dataclass
class TypeDecl(Decl):
    specs: List[TypeSpec] = field(default_factory=list)


@dataclass
class FuncDecl(Decl):
    method: Method = field(default_factory=lambda: Method(name=""))
    body_open: Optional[int] = None  # offset just past '{'
    body_close: Optional[int] = None  # offset of the closing '}'

    @property
    def body(self) -> Optional[str]:
        if self.body_open is None or self.body_close is None:
            return None
        return self.raw[self.body_open : self.body_close]

    def with_body(self, body: str) -> str:
        """Return the declaration text with its body replaced."""
        if self.body_open is None or self.body_close is None:
            raise ValueError(f"function {self.method.name} has no body")
        return self.raw[: self.body_open] + body + self.raw[self.body_close :]


@dataclass
class GoFile:
    package: str
    header: str = ""
    decls: List[Decl] = field(default_factory=list)
    trailer: str = ""

    # -- views -------------------------------------------------------------

    @property
    def imports(self) -> List[NamedTypeValue]:
        return [item for decl in self._of(ImportDecl) for item in decl.imports]

    @property
    def constants(self) -> List[NamedTypeValue]:
        return [v for decl in self._of(ValueDecl) if decl.kind == "const" for v in decl.values]

    @property
    def vars(self) -> List[NamedTypeValue]:
        return [v for decl in self._of(ValueDecl) if decl.kind == "var" for v in decl.values]

    @property
    def structs(self) -> List[Struct]:
        return [spec.model for _, spec in self._type_specs() if isinstance(spec.model, Struct)]

    @property
    def interfaces(self) -> List[Interface]:
        return [spec.model for _, spec in self._type_specs() if isinstance(spec.model, Interface)]

    @property
    def aliases(self) -> List[NamedTypeValue]:
        return [
            spec.model for _, spec in self._type_specs() if isinstance(spec.model, NamedTypeValue)
        ]

    @property
    def methods(self) -> List[Method]:
        return [decl.method for decl in self._of(FuncDecl)]

    # -- lookups -----------------------------------------------------------

    def find_type(self, name: str) -> Optional[Tuple[TypeDecl, TypeSpec]]:
        for decl, spec in self._type_specs():
            if spec.name == name:
                return decl, spec
        return None

    def find_struct(self, name: str) -> Optional[Struct]:
        found = self.find_type(name)
        if found and isinstance(found[1].model, Struct):
            return found[1].model
        return None

    def find_interface(self, name: str) -> Optional[Interface]:
        found = self.find_type(name)
        if found and isinstance(found[1].model, Interface):
            return found[1].model
        return None

    def find_func(self, name: str, receiver_type: Optional[str] = None) -> Optional[FuncDecl]:
        for decl in self._of(FuncDecl):
            if decl.method.matches(name, receiver_type):
                return decl
        return None

    def has_import(self, path: str) -> bool:
        return any(item.type == path for item in self.imports)

    def has_value(self, name: str) -> bool:
        return any(item.name == name for item in self.constants + self.vars)

    # -- mutation ----------------------------------------------------------

    def insert(self, decls: Sequence[Decl]) -> None:
        """Add declarations: imports after the existing imports, the rest at the end."""
        for decl in decls:
            if isinstance(decl, ImportDecl):
                position = 0
                for index, existing in enumerate(self.decls):
                    if isinstance(existing, ImportDecl):
                        position = index + 1
                self.decls.insert(position, decl)
            else:
                self.decls.append(decl)

    def replace(self, old: Decl, new: Decl) -> None:
        for index, existing in enumerate(self.decls):
            if existing is old:
                self.decls[index] = new
                return
        raise ValueError("declaration is not part of this file")

    def render(self) -> str:
        parts = [f"{self.header}package {self.package}"]
        parts.extend(decl.raw for decl in self.decls)
        if self.trailer:
            parts.append(self.trailer)
        return "\n\n".join(parts) + "\n"

    # -- helpers -----------------------------------------------------------

    def _of(self, kind: type) -> Iterator:
        return (decl for decl in self.decls if isinstance(decl, kind))

    def _type_specs(self) -> Iterator[Tuple[TypeDecl, TypeSpec]]:
        for decl in self._of(TypeDecl):
            for spec in decl.specs:
                yield decl, spec


def insert_lines(raw: str, offset: int, lines: Sequence[str], indent: str = "\t") -> str:
    """Insert ``lines`` just before the closing delimiter found at ``offset``.

    A delimiter on its own line keeps its indentation; one that shares a line
    with other text (``struct{}``) is moved onto a fresh line.
    """
    before, after = raw[:offset], raw[offset:]
    block = "".join(f"{indent}{line}\n" if line else "\n" for line in lines)
    line_start = before.rfind("\n") + 1
    if not before[line_start:].strip():
        return before[:line_start] + block + before[line_start:] + after
    return before.rstrip() + "\n" + block + after


__all__ = [
    "Decl",
    "FuncDecl",
    "GoFile",
    "ImportDecl",
    "TypeDecl",
    "TypeSpec",
    "ValueDecl",
    "insert_lines",
]
