"""Jinja2 rendering of generated declarations, schemas and scripts."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import ConfigError
from .naming import camel_case, hyphen_case, lower_first, pascal_case, snake_case, upper_first
from .gotypes import call_args, qualify, signature_params, signature_results

_TEMPLATES_DIR = Path(__file__).with_name("templates")


def go_comment(text: Optional[str]) -> str:
    if not text:
        return ""
    return "\n".join(f"// {line}".rstrip() for line in text.splitlines())


def tabindent(text: str, count: int = 1) -> str:
    prefix = "\t" * count
    return "\n".join(f"{prefix}{line}" if line.strip() else "" for line in text.splitlines())


class TemplateEngine:
    """Renders templates from ``kitgen/templates`` (or an override directory first)."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        search: List[str] = []
        if templates_dir is not None:
            search.append(str(templates_dir))
        search.append(str(_TEMPLATES_DIR))
        self.env = Environment(
            loader=FileSystemLoader(search),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )
        self.env.filters.update(
            {
                "snake": snake_case,
                "camel": camel_case,
                "pascal": pascal_case,
                "hyphen": hyphen_case,
                "upper_first": upper_first,
                "lower_first": lower_first,
                "go_comment": go_comment,
                "tabindent": tabindent,
                "params": signature_params,
                "results": signature_results,
                "args": call_args,
                "qualify": qualify,
            }
        )

    def render(self, name: str, **context: Any) -> str:
        """Render a template file, trimmed of surrounding blank lines."""
        return self.env.get_template(name).render(**context).strip("\n")

    def macro(self, name: str, macro: str, *args: Any, **kwargs: Any) -> str:
        """Call a macro defined in a template file."""
        module = self.env.get_template(name).module
        return str(getattr(module, macro)(*args, **kwargs)).strip("\n")

    def render_string(self, source: str, **context: Any) -> str:
        """Render an inline template such as a configured path."""
        try:
            return self.env.from_string(source).render(**context)
        except TemplateError as exc:
            raise ConfigError(f"Invalid template '{source}': {exc}") from exc


__all__ = ["TemplateEngine", "go_comment", "tabindent"]
