"""Configuration loading for kitgen (.kitgen.yml)."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_FILE_NAME = ".kitgen.yml"
SUPPORTED_TRANSPORTS = ("http", "grpc", "thrift")
TRANSPORT_ENV = "KITGEN_TRANSPORT"

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)


@dataclass
class PolicyConfig:
    """Which interface methods are turned into endpoints."""

    context_type: str = "context.Context"
    require_context: bool = True


@dataclass
class ServiceConfig:
    path: str = "pkg/{{ service_name }}service"
    file_name: str = "service.go"
    interface_name: str = "Service"
    struct_name: str = "basicService"
    logging_file_name: str = "logging.go"
    instrumenting_file_name: str = "instrumenting.go"


@dataclass
class EndpointsConfig:
    path: str = "pkg/{{ service_name }}endpoint"
    file_name: str = "endpoints.go"
    middleware_file_name: str = "middleware.go"


@dataclass
class HTTPConfig:
    path: str = "pkg/{{ service_name }}transport"
    file_name: str = "http.go"
    test_file_name: str = "http_test.go"


@dataclass
class GRPCConfig:
    path: str = "pkg/{{ service_name }}transport"
    file_name: str = "grpc.go"
    client_file_name: str = "grpc_client.go"


@dataclass
class PBConfig:
    path: str = "pb/{{ service_name }}pb"


@dataclass
class ThriftConfig:
    path: str = "pkg/{{ service_name }}transport/thrift"
    file_name: str = "handler.go"


@dataclass
class FormatConfig:
    enabled: bool = True
    command: str = "gofmt"


@dataclass
class KitgenConfig:
    """Represents the settings defined in .kitgen.yml."""

    root: Path
    module: str = ""
    default_transport: str = "http"
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    endpoints: EndpointsConfig = field(default_factory=EndpointsConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    grpc: GRPCConfig = field(default_factory=GRPCConfig)
    pb: PBConfig = field(default_factory=PBConfig)
    thrift: ThriftConfig = field(default_factory=ThriftConfig)
    format: FormatConfig = field(default_factory=FormatConfig)
    templates_dir: Optional[Path] = None


def load_config(config_path: Path) -> KitgenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root", artifact=config_file)

    config = KitgenConfig(root=root)
    config.module = _as_str(data.get("module")) or detect_module(root)
    config.default_transport = (
        os.environ.get(TRANSPORT_ENV) or _as_str(data.get("default_transport")) or "http"
    ).lower()
    if config.default_transport not in SUPPORTED_TRANSPORTS:
        raise ConfigError(
            f"default_transport must be one of {', '.join(SUPPORTED_TRANSPORTS)}, "
            f"got '{config.default_transport}'",
            artifact=config_file,
        )

    policy = _as_dict(data.get("policy"))
    if policy:
        config.policy.context_type = _as_str(policy.get("context_type")) or config.policy.context_type
        require = _as_bool(policy.get("require_context"))
        if require is not None:
            config.policy.require_context = require

    _apply_strings(config.service, data.get("service"))
    _apply_strings(config.endpoints, data.get("endpoints"))
    _apply_strings(config.http, data.get("http"))
    _apply_strings(config.grpc, data.get("grpc"))
    _apply_strings(config.pb, data.get("pb"))
    _apply_strings(config.thrift, data.get("thrift"))

    format_data = _as_dict(data.get("format"))
    if format_data:
        enabled = _as_bool(format_data.get("enabled"))
        if enabled is not None:
            config.format.enabled = enabled
        config.format.command = _as_str(format_data.get("command")) or config.format.command

    templates_dir = _as_str(data.get("templates_dir"))
    if templates_dir:
        config.templates_dir = root / templates_dir

    return config


def detect_module(root: Path) -> str:
    """Return the Go module path from go.mod, or the directory name."""
    go_mod = root / "go.mod"
    if go_mod.exists():
        match = _MODULE_RE.search(go_mod.read_text(encoding="utf-8"))
        if match:
            return match.group(1)
    return root.name


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    if config_path.name != CONFIG_FILE_NAME:
        return (config_path.parent / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}", artifact=path) from exc
    return loaded if loaded is not None else {}


def _apply_strings(section: Any, value: Any) -> None:
    for key, item in _as_dict(value).items():
        if not hasattr(section, key):
            raise ConfigError(f"Unknown setting '{key}' in section {type(section).__name__}")
        text = _as_str(item)
        if text:
            setattr(section, key, text)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return None


__all__ = [
    "CONFIG_FILE_NAME",
    "EndpointsConfig",
    "FormatConfig",
    "GRPCConfig",
    "HTTPConfig",
    "KitgenConfig",
    "PBConfig",
    "PolicyConfig",
    "SUPPORTED_TRANSPORTS",
    "ServiceConfig",
    "ThriftConfig",
    "load_config",
]
