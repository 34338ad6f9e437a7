"""
Configuration helpers for the wallet client.

The loader starts from deterministic defaults, then merges a user provided
JSON file, environment overrides prefixed with ``SWAPRPC_`` and finally any
explicit overrides passed by the caller.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from .core.params import NETWORKS, NetworkParams, network_by_name
from .rpc.commands import ProtocolRevision

ENV_PREFIX = "SWAPRPC_"


class ConfigError(Exception):
    """Raised when configuration validation fails."""


def _expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value))).resolve()


@dataclass(slots=True)
class ClientConfig:
    host: str = "127.0.0.1"
    port: int = 7777
    username: str = "user"
    password: str = "pass"
    use_tls: bool = False  # Electrum does not serve TLS by default
    path: str = "/"
    timeout: float = 15.0
    max_workers: int = 4
    network: str = "mainnet"
    protocol: str = ProtocolRevision.CURRENT.value

    def validate(self) -> None:
        if not self.host:
            raise ConfigError("RPC host must be set")
        if not (1 <= self.port <= 65535):
            raise ConfigError(f"Invalid RPC port {self.port}")
        if not self.username or not self.password:
            raise ConfigError("RPC username/password must be set")
        if not self.path.startswith("/"):
            raise ConfigError("RPC path must start with '/'")
        if self.timeout <= 0:
            raise ConfigError("timeout must be > 0")
        if self.max_workers <= 0:
            raise ConfigError("max_workers must be positive")
        if self.network.lower() not in NETWORKS:
            raise ConfigError(f"Unknown network {self.network!r}")
        if self.protocol not in {revision.value for revision in ProtocolRevision}:
            raise ConfigError(f"Unknown protocol revision {self.protocol!r}")

    @property
    def network_params(self) -> NetworkParams:
        return network_by_name(self.network)

    @property
    def revision(self) -> ProtocolRevision:
        return ProtocolRevision(self.protocol)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["password"] = "***"
        return data


def load_config(path: Path | None = None, *, overrides: dict[str, Any] | None = None) -> ClientConfig:
    """Load configuration from disk and environment overrides."""

    base: dict[str, Any] = {}
    cfg_path = path or (Path(os.environ[ENV_PREFIX + "CONFIG"]) if os.getenv(ENV_PREFIX + "CONFIG") else None)
    if cfg_path is not None:
        cfg_path = _expand_path(str(cfg_path))
        if not cfg_path.exists():
            raise ConfigError(f"Config file {cfg_path} not found")
        try:
            with open(cfg_path, "rb") as fh:
                base = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file {cfg_path} is not valid JSON: {exc}") from exc
        if not isinstance(base, dict):
            raise ConfigError(f"Config file {cfg_path} must contain a JSON object")
        # Accept the nested {"rpc": {...}} layout used by wallet tool configs.
        if isinstance(base.get("rpc"), dict):
            nested = base.pop("rpc")
            base = {**base, **nested}

    known = {f.name for f in fields(ClientConfig)}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX) :].lower()
        if name in known:
            base[name] = value

    if overrides:
        base.update(overrides)

    config = ClientConfig()
    _apply_dict(config, base)
    config.validate()
    return config


def _apply_dict(obj: Any, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if not hasattr(obj, key):
            raise ConfigError(f"Unknown config field {key}")
        setattr(obj, key, _coerce_value(getattr(obj, key), value))


def _coerce_value(current: Any, value: Any) -> Any:
    target_type = type(current)
    if target_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {"1", "true", "yes"}:
                return True
            if normalized in {"0", "false", "no"}:
                return False
            raise ConfigError(f"Invalid boolean value {value}")
        raise ConfigError(f"Cannot coerce {value!r} to bool")
    if target_type in {int, float}:
        try:
            return target_type(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid numeric value {value!r}") from exc
    if target_type is str:
        return str(value)
    return value
