"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitgen.config import TRANSPORT_ENV, detect_module, load_config
from kitgen.errors import ConfigError


def _write(tmp_path: Path, text: str) -> None:
    (tmp_path / ".kitgen.yml").write_text(text, encoding="utf-8")


def test_defaults_without_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TRANSPORT_ENV, raising=False)
    config = load_config(tmp_path)
    assert config.root == tmp_path.resolve()
    assert config.default_transport == "http"
    assert config.module == tmp_path.name
    assert config.policy.context_type == "context.Context"
    assert config.policy.require_context is True
    assert config.service.path == "pkg/{{ service_name }}service"
    assert config.format.enabled is True
    assert config.templates_dir is None


def test_overrides_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TRANSPORT_ENV, raising=False)
    _write(
        tmp_path,
        """
module: example.com/acme
default_transport: GRPC
policy:
  require_context: "no"
service:
  path: "internal/{{ service_name }}"
  interface_name: API
grpc:
  file_name: server.go
format:
  enabled: false
templates_dir: kitgen-templates
""",
    )
    config = load_config(tmp_path / ".kitgen.yml")
    assert config.module == "example.com/acme"
    assert config.default_transport == "grpc"
    assert config.policy.require_context is False
    assert config.service.path == "internal/{{ service_name }}"
    assert config.service.interface_name == "API"
    assert config.service.file_name == "service.go"
    assert config.grpc.file_name == "server.go"
    assert config.format.enabled is False
    assert config.templates_dir == tmp_path.resolve() / "kitgen-templates"


def test_environment_selects_transport(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(tmp_path, "default_transport: http\n")
    monkeypatch.setenv(TRANSPORT_ENV, "thrift")
    assert load_config(tmp_path).default_transport == "thrift"


def test_invalid_transport(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TRANSPORT_ENV, raising=False)
    _write(tmp_path, "default_transport: soap\n")
    with pytest.raises(ConfigError, match="default_transport must be one of http, grpc, thrift"):
        load_config(tmp_path)


def test_unknown_setting(tmp_path: Path) -> None:
    _write(tmp_path, "endpoints:\n  folder: x\n")
    with pytest.raises(ConfigError, match="Unknown setting 'folder'"):
        load_config(tmp_path)


def test_malformed_yaml(tmp_path: Path) -> None:
    _write(tmp_path, "service: [unclosed\n")
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert excinfo.value.exit_code == 2


def test_root_must_be_a_mapping(tmp_path: Path) -> None:
    _write(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(tmp_path)


def test_empty_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TRANSPORT_ENV, raising=False)
    _write(tmp_path, "\n")
    assert load_config(tmp_path).default_transport == "http"


def test_detect_module_from_go_mod(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("// comment\nmodule github.com/acme/shop\n\ngo 1.21\n", encoding="utf-8")
    assert detect_module(tmp_path) == "github.com/acme/shop"
