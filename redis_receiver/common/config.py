from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

from dotenv import load_dotenv

from ..errors import ConfigError

TRANSPORTS = ("tcp", "unix")


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> FrozenSet[str]:
    raw = os.getenv(name, "")
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class TLSSettings:
    """TLS material for the Redis connection."""
    enabled: bool = False
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    insecure_skip_verify: bool = False

    def __post_init__(self):
        if bool(self.cert_file) != bool(self.key_file):
            raise ConfigError("TLS cert_file and key_file must be set together")


@dataclass(frozen=True)
class MetricsSettings:
    """Per-metric overrides on top of each metric's default."""
    enabled: FrozenSet[str] = field(default_factory=frozenset)
    disabled: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        both = self.enabled & self.disabled
        if both:
            raise ConfigError(f"metrics both enabled and disabled: {sorted(both)}")


@dataclass(frozen=True)
class Settings:
    endpoint: str = "localhost:6379"
    transport: str = "tcp"
    username: Optional[str] = None
    password: Optional[str] = None
    info_section: str = "all"
    socket_timeout: float = 5.0
    collection_interval: float = 10.0
    exporter_port: int = 9121

    tls: TLSSettings = field(default_factory=TLSSettings)
    metrics: MetricsSettings = field(default_factory=MetricsSettings)

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ConfigError(f"unsupported transport {self.transport!r}, expected one of {TRANSPORTS}")
        if not self.endpoint:
            raise ConfigError("endpoint is required")
        if self.transport == "tcp":
            # host:port, host may itself contain ':' (IPv6)
            host, sep, port = self.endpoint.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise ConfigError(f"invalid tcp endpoint {self.endpoint!r}, expected host:port")
        if self.collection_interval <= 0:
            raise ConfigError("collection_interval must be positive")
        if self.socket_timeout <= 0:
            raise ConfigError("socket_timeout must be positive")

    @property
    def host(self) -> str:
        return self.endpoint.rpartition(":")[0].strip("[]")

    @property
    def port(self) -> int:
        return int(self.endpoint.rpartition(":")[2])


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("REDIS_RECEIVER_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    try:
        socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0"))
        collection_interval = float(os.getenv("REDIS_COLLECTION_INTERVAL", "10.0"))
        exporter_port = int(os.getenv("REDIS_RECEIVER_METRICS_PORT", "9121"))
    except ValueError as e:
        raise ConfigError(f"invalid numeric setting: {e}") from e

    tls = TLSSettings(
        enabled=_env_bool("REDIS_TLS_ENABLED"),
        ca_file=os.getenv("REDIS_TLS_CA_FILE") or None,
        cert_file=os.getenv("REDIS_TLS_CERT_FILE") or None,
        key_file=os.getenv("REDIS_TLS_KEY_FILE") or None,
        insecure_skip_verify=_env_bool("REDIS_TLS_INSECURE_SKIP_VERIFY"),
    )

    return Settings(
        endpoint=os.getenv("REDIS_ENDPOINT", "localhost:6379"),
        transport=os.getenv("REDIS_TRANSPORT", "tcp").strip().lower(),
        username=os.getenv("REDIS_USERNAME") or None,
        password=os.getenv("REDIS_PASSWORD") or None,
        info_section=os.getenv("REDIS_INFO_SECTION", "all"),
        socket_timeout=socket_timeout,
        collection_interval=collection_interval,
        exporter_port=exporter_port,
        tls=tls,
        metrics=MetricsSettings(
            enabled=_env_list("REDIS_METRICS_ENABLED"),
            disabled=_env_list("REDIS_METRICS_DISABLED"),
        ),
    )
