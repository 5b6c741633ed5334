"""Resolver configuration loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import tomllib

from pydantic import BaseModel

from .fleet import DEFAULT_API_ENDPOINT

CONFIG_FILE = Path.home() / ".config" / "hivepool" / "config.toml"

HIVE_PROTOCOL = "jdbc:hive2"
DEFAULT_INTERCEPTOR = "hivepool.credentials.ProxyAuthInterceptor"
DEFAULT_LOAD_METRIC = "yarn-memory-mb-available"

AuthMode = Literal["none", "token", "interceptor"]
AUTH_MODES: tuple[str, ...] = ("none", "token", "interceptor")


class ResolverConfig(BaseModel):
    """Knobs controlling how resolved targets are rendered and looked up."""

    wire_protocol: str = HIVE_PROTOCOL
    auth_mode: AuthMode = "none"
    interceptor: str = DEFAULT_INTERCEPTOR
    load_metric: str = DEFAULT_LOAD_METRIC
    api_endpoint: str = DEFAULT_API_ENDPOINT

    def with_auth_mode(self, mode: AuthMode) -> ResolverConfig:
        """Return a copy with the authentication mode updated."""

        return self.model_copy(update={"auth_mode": mode})


def load_config() -> ResolverConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return ResolverConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return ResolverConfig()
    return ResolverConfig(**data)


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    section = raw.get("resolver")
    if not isinstance(section, dict):
        return data
    for key in ("wire_protocol", "interceptor", "load_metric", "api_endpoint"):
        value = section.get(key)
        if isinstance(value, str) and value:
            data[key] = value
    auth_mode = section.get("auth_mode")
    if isinstance(auth_mode, str) and auth_mode in AUTH_MODES:
        data["auth_mode"] = auth_mode
    return data


__all__ = [
    "AUTH_MODES",
    "AuthMode",
    "CONFIG_FILE",
    "DEFAULT_INTERCEPTOR",
    "DEFAULT_LOAD_METRIC",
    "HIVE_PROTOCOL",
    "ResolverConfig",
    "load_config",
]
