"""Adds missing declarations to a Go file without touching existing ones."""

from __future__ import annotations

from pathlib import PurePath
from typing import List, Optional, Pattern, Sequence, Tuple

from ..errors import MissingScaffoldError
from ..logging import artifact_extra, get_logger
from ..models import Interface, Method, NamedTypeValue, Struct
from ..rendering import go_comment, tabindent
from ..source import Binding, ConstructorBody, Decl, GoFile, GoParser, ImportDecl
from ..source.gofile import insert_lines
from ..gotypes import signature_params, signature_results

Import = Tuple[str, str]  # (alias, path); alias may be empty


class GoRenderer:
    """Spells models as Go declarations."""

    @staticmethod
    def field_line(item: NamedTypeValue) -> str:
        line = f"{item.name} {item.type}".strip()
        if item.tag:
            line += f" {item.tag}"
        if item.comment:
            line += f" // {item.comment}"
        return line

    def struct(self, struct: Struct) -> str:
        lines = self._comment(struct.comment)
        if not struct.fields:
            lines.append(f"type {struct.name} struct{{}}")
        else:
            lines.append(f"type {struct.name} struct {{")
            lines.extend(f"\t{self.field_line(item)}" for item in struct.fields)
            lines.append("}")
        return "\n".join(lines)

    def interface(self, interface: Interface) -> str:
        lines = self._comment(interface.comment)
        lines.append(f"type {interface.name} interface {{")
        for method in interface.methods:
            lines.extend(f"\t{line}" for line in self._comment(method.comment))
            lines.append(f"\t{self.signature(method)}")
        lines.append("}")
        return "\n".join(lines)

    def alias(self, name: str, type_expr: str, comment: Optional[str] = None) -> str:
        return "\n".join(self._comment(comment) + [f"type {name} {type_expr}"])

    def func(self, method: Method) -> str:
        receiver = ""
        if method.receiver is not None:
            receiver = f"({method.receiver.name} {method.receiver.type}) ".replace("( ", "(")
        lines = self._comment(method.comment)
        lines.append(f"func {receiver}{self.signature(method)} {{")
        if method.body and method.body.strip():
            lines.append(tabindent(method.body.strip("\n")))
        lines.append("}")
        return "\n".join(lines)

    def imports(self, items: Sequence[Import]) -> str:
        if len(items) == 1:
            return f"import {self.import_line(items[0])}"
        body = "\n".join(f"\t{self.import_line(item)}" for item in items)
        return f"import (\n{body}\n)"

    def values(self, keyword: str, items: Sequence[NamedTypeValue]) -> str:
        lines = [f"{keyword} ("]
        for item in items:
            line = f"{item.name} {item.type}".strip()
            if item.value is not None:
                line += f" = {item.value}"
            lines.append(f"\t{line}")
        lines.append(")")
        return "\n".join(lines)

    @staticmethod
    def import_line(item: Import) -> str:
        alias, path = item
        return f'{alias} "{path}"' if alias else f'"{path}"'

    @staticmethod
    def signature(method: Method) -> str:
        return f"{method.name}({signature_params(method.parameters)}){signature_results(method.results)}"

    @staticmethod
    def _comment(text: Optional[str]) -> List[str]:
        return [go_comment(text)] if text else []


class ArtifactMerger:
    """Presence-checked additions to a parsed ``GoFile``.

    Every ``ensure_*`` call is a no-op when the item already exists, so running
    the same sequence twice leaves the file unchanged. ``added`` records what
    this merger contributed.
    """

    def __init__(
        self,
        gofile: GoFile,
        *,
        artifact: PurePath | str | None = None,
        renderer: GoRenderer | None = None,
    ) -> None:
        self.gofile = gofile
        self.artifact = artifact
        self.renderer = renderer or GoRenderer()
        self.parser = GoParser(artifact=artifact)
        self.added: List[str] = []
        self.logger = get_logger("merge")

    # -- whole declarations -------------------------------------------------

    def ensure_imports(self, imports: Sequence[Import]) -> List[str]:
        missing: List[Import] = []
        for alias, path in imports:
            if not self.gofile.has_import(path) and path not in [p for _, p in missing]:
                missing.append((alias, path))
        if not missing:
            return []
        grouped = next(
            (decl for decl in self.gofile.decls if isinstance(decl, ImportDecl) and decl.close is not None),
            None,
        )
        if grouped is not None:
            lines = [self.renderer.import_line(item) for item in missing]
            self._replace(grouped, insert_lines(grouped.raw, grouped.close, lines))
        else:
            self.gofile.insert(self._parse(self.renderer.imports(missing)))
        paths = [path for _, path in missing]
        self._record(*(f"import {path}" for path in paths))
        return paths

    def ensure_alias(self, name: str, type_expr: str, comment: Optional[str] = None) -> bool:
        if self.gofile.find_type(name) is not None:
            return False
        self._add(self.renderer.alias(name, type_expr, comment), f"type {name}")
        return True

    def ensure_interface(self, interface: Interface) -> bool:
        if self.gofile.find_type(interface.name) is not None:
            return False
        self._add(self.renderer.interface(interface), f"interface {interface.name}")
        return True

    def ensure_struct(self, struct: Struct) -> bool:
        if self.gofile.find_type(struct.name) is not None:
            return False
        self._add(self.renderer.struct(struct), f"struct {struct.name}")
        return True

    def ensure_method(self, method: Method) -> bool:
        """Add ``method`` unless one with the same name and receiver type exists."""
        if self.gofile.find_func(method.name, method.receiver_type) is not None:
            return False
        label = method.name if method.receiver is None else f"({method.receiver_type}).{method.name}"
        self._add(self.renderer.func(method), f"func {label}")
        return True

    def ensure_values(self, keyword: str, items: Sequence[NamedTypeValue]) -> List[str]:
        missing = [item for item in items if not self.gofile.has_value(item.name)]
        if missing:
            self._add(self.renderer.values(keyword, missing), f"{keyword} {', '.join(i.name for i in missing)}")
        return [item.name for item in missing]

    # -- insertion points ---------------------------------------------------

    def ensure_fields(self, struct_name: str, fields: Sequence[NamedTypeValue]) -> List[str]:
        """Append fields missing (by name) from an existing struct."""
        found = self.gofile.find_type(struct_name)
        if found is None or not isinstance(found[1].model, Struct):
            raise MissingScaffoldError(f"Could not find struct {struct_name}", artifact=self.artifact)
        decl, spec = found
        present = set(spec.model.field_names())
        missing = [item for item in fields if item.name not in present]
        if not missing:
            return []
        lines = [self.renderer.field_line(item) for item in missing]
        self._replace(decl, insert_lines(decl.raw, spec.close, lines))
        names = [item.name for item in missing]
        self._record(*(f"field {struct_name}.{name}" for name in names))
        return names

    def ensure_bindings(
        self,
        constructor: str,
        bindings: Sequence[Binding],
        pattern: Pattern[str],
        *,
        receiver_type: Optional[str] = None,
    ) -> List[str]:
        """Append missing bindings to a constructor, keeping its trailing return last."""
        decl = self.gofile.find_func(constructor, receiver_type)
        if decl is None or decl.body is None:
            raise MissingScaffoldError(f"Could not find constructor {constructor}", artifact=self.artifact)
        body = ConstructorBody.parse(decl.body, pattern)
        added = body.extend(bindings)
        if added:
            self._replace(decl, decl.with_body(body.render()))
            self._record(*(f"binding {constructor}[{key}]" for key in added))
        return added

    # -- helpers ------------------------------------------------------------

    def _parse(self, source: str) -> List[Decl]:
        return self.parser.parse_declarations(source)

    def _add(self, source: str, label: str) -> None:
        self.gofile.insert(self._parse(source))
        self._record(label)

    def _replace(self, decl: Decl, raw: str) -> None:
        replacement = self._parse(raw)
        if len(replacement) != 1:
            raise ValueError("splice produced more than one declaration")
        self.gofile.replace(decl, replacement[0])

    def _record(self, *labels: str) -> None:
        for label in labels:
            self.added.append(label)
            self.logger.debug("Added %s", label, extra=artifact_extra(self.artifact))


__all__ = ["ArtifactMerger", "GoRenderer", "Import"]
