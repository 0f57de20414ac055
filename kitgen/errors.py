"""Error taxonomy shared by the generation pipeline and the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence


class KitgenError(RuntimeError):
    """Base class for failures surfaced to the invoking command."""

    exit_code = 1

    def __init__(self, message: str, *, artifact: Path | str | None = None) -> None:
        super().__init__(message)
        self.artifact: Optional[Path] = Path(artifact) if artifact is not None else None


class ConfigError(KitgenError):
    """Raised when .kitgen.yml or one of its path templates cannot be used."""

    exit_code = 2


class UnsupportedTransportError(KitgenError):
    """Raised for a transport name outside the supported set."""

    exit_code = 2


class NotFoundError(KitgenError):
    """A required file, interface or compiled schema is absent."""

    exit_code = 3


class EmptyMethodSetError(KitgenError):
    """No interface method survived the policy filter."""

    exit_code = 4


class UnsupportedTypeError(KitgenError):
    """A Go type expression has no representation in the wire schema."""

    exit_code = 5

    def __init__(
        self,
        type_expr: str,
        reason: str,
        *,
        method: str | None = None,
        artifact: Path | str | None = None,
    ) -> None:
        where = f" in method {method}" if method else ""
        super().__init__(f"Unsupported type '{type_expr}'{where}: {reason}", artifact=artifact)
        self.type_expr = type_expr
        self.reason = reason
        self.method = method


class SchemaError(KitgenError):
    """Aggregates every unsupported type found while building one schema."""

    exit_code = UnsupportedTypeError.exit_code

    def __init__(
        self, issues: Sequence[UnsupportedTypeError], *, artifact: Path | str | None = None
    ) -> None:
        self.issues: List[UnsupportedTypeError] = list(issues)
        details = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"Schema not written: {details}", artifact=artifact)


class MissingScaffoldError(KitgenError):
    """An existing artifact lacks the constructor or struct the merge extends."""

    exit_code = 6


class SourceParseError(KitgenError):
    """Source text could not be parsed."""

    exit_code = 7

    def __init__(
        self, message: str, *, line: int | None = None, artifact: Path | str | None = None
    ) -> None:
        location = f" (line {line})" if line is not None else ""
        super().__init__(f"{message}{location}", artifact=artifact)
        self.line = line


class FormatError(KitgenError):
    """The external formatter rejected generated source."""

    exit_code = 7


class ArtifactExistsError(KitgenError):
    """A bootstrap command would overwrite an existing file."""

    exit_code = 8


class LockError(KitgenError):
    """Another kitgen invocation holds the project lock."""

    exit_code = 9


__all__ = [
    "ArtifactExistsError",
    "ConfigError",
    "EmptyMethodSetError",
    "FormatError",
    "KitgenError",
    "LockError",
    "MissingScaffoldError",
    "NotFoundError",
    "SchemaError",
    "SourceParseError",
    "UnsupportedTransportError",
    "UnsupportedTypeError",
]
