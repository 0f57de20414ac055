from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from kitgen.rendering import TemplateEngine
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ProjectBuilder:
    """Provide a Go module rooted at the pytest tmp_path."""
    monkeypatch.delenv("KITGEN_TRANSPORT", raising=False)
    return ProjectBuilder(tmp_path)


@pytest.fixture
def templates() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture(autouse=True)
def _reset_kitgen_logger() -> Iterator[None]:
    """CLI tests install handlers on the kitgen logger; keep records flowing to caplog."""
    yield
    logger = logging.getLogger("kitgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
