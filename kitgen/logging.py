"""Logging utilities for kitgen commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

_LOGGER_NAME = "kitgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the kitgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def artifact_extra(path: Path | str | None) -> Mapping[str, object]:
    """Return the ``extra`` mapping that tags a record with the artifact it concerns."""
    return {"artifact": str(path) if path is not None else None}


class _ArtifactFilter(logging.Filter):
    """Exposes ``%(artifact_prefix)s`` so records name the file they refer to."""

    def filter(self, record: logging.LogRecord) -> bool:
        artifact = getattr(record, "artifact", None)
        record.artifact_prefix = f"{artifact}: " if artifact else ""
        return True


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the kitgen logger with console output and an optional file sink."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The CLI may run several times in one process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(_ArtifactFilter())
    stream_handler.setFormatter(
        logging.Formatter("[kitgen] %(levelname)s %(artifact_prefix)s%(message)s")
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(_ArtifactFilter())
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(artifact_prefix)s%(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["artifact_extra", "configure_logging", "get_logger"]
