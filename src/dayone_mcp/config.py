"""Environment configuration for the bridge and the gateway."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dayone_mcp.commands import DEFAULT_CLI_PATH

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_TRUTHY = {"1", "true", "yes"}


def configure_logging(environ: Mapping[str, str] | None = None) -> None:
    env = os.environ if environ is None else environ
    level = env.get("DAYONE_MCP_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
    )


def _int(env: Mapping[str, str], key: str, default: int, low: int, high: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value < low or value > high:
        raise ValueError(f"{key} must be between {low} and {high}")
    return value


def parse_api_keys(raw: str | None) -> frozenset[str]:
    """Split a comma-separated key list, dropping blanks."""
    if not raw:
        return frozenset()
    return frozenset(key.strip() for key in raw.split(",") if key.strip())


@dataclass(frozen=True)
class BridgeSettings:
    host: str = "127.0.0.1"
    port: int = 3000
    auth_token: str = ""
    cli_path: str = DEFAULT_CLI_PATH
    cli_timeout: int = 60
    strict: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BridgeSettings:
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("BRIDGE_HOST", "").strip() or "127.0.0.1",
            port=_int(env, "PORT", 3000, 1, 65535),
            auth_token=env.get("AUTH_TOKEN", "").strip(),
            cli_path=env.get("DAYONE_CLI_PATH", "").strip() or DEFAULT_CLI_PATH,
            cli_timeout=_int(env, "DAYONE_CLI_TIMEOUT", 60, 1, 3600),
            strict=env.get("DAYONE_BRIDGE_STRICT", "").strip().lower() in _TRUTHY,
        )


@dataclass(frozen=True)
class GatewaySettings:
    api_keys: frozenset[str] = frozenset()
    bridge_url: str = ""
    bridge_auth_token: str = ""
    rate_limit_max: int = 100
    rate_limit_window_ms: int = 60_000
    host: str = "127.0.0.1"
    port: int = 8787
    bridge_timeout: int = 90
    max_response_bytes: int = 5_000_000

    @property
    def is_complete(self) -> bool:
        """True when every setting required to serve requests is present."""
        return bool(self.api_keys and self.bridge_url and self.bridge_auth_token)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewaySettings:
        env = os.environ if environ is None else environ
        return cls(
            api_keys=parse_api_keys(env.get("MCP_API_KEYS")),
            bridge_url=env.get("BRIDGE_URL", "").strip().rstrip("/"),
            bridge_auth_token=env.get("BRIDGE_AUTH_TOKEN", "").strip(),
            rate_limit_max=_int(env, "RATE_LIMIT_MAX", 100, 1, 1_000_000),
            rate_limit_window_ms=_int(env, "RATE_LIMIT_WINDOW_MS", 60_000, 1, 86_400_000),
            host=env.get("GATEWAY_HOST", "").strip() or "127.0.0.1",
            port=_int(env, "GATEWAY_PORT", 8787, 1, 65535),
            bridge_timeout=_int(env, "BRIDGE_TIMEOUT", 90, 1, 3600),
            max_response_bytes=_int(
                env, "DAYONE_MCP_MAX_RESPONSE_BYTES", 5_000_000, 1_000, 50_000_000
            ),
        )
