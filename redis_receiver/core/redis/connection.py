"""Connection to Redis for INFO scraping."""

from __future__ import annotations

import logging
import ssl
from typing import Any, Dict, Optional

import redis

from ...common.config import Settings, TLSSettings
from ...errors import ConfigError, StatusFetchError
from ..domain.status_source import IStatusSource
from .info import StatusInfo, parse_info_text

logger = logging.getLogger(__name__)


def validate_tls_settings(tls: TLSSettings) -> Optional[ssl.SSLContext]:
    """Check that the TLS material in ``tls`` loads.

    redis-py builds its own context from the ``ssl_*`` client options, so
    the returned context is only a proof that the same files load. Returns
    None when TLS is disabled.

    Raises:
        ConfigError: CA bundle or client key pair cannot be loaded
    """
    if not tls.enabled:
        return None
    try:
        ctx = ssl.create_default_context(cafile=tls.ca_file)
        if tls.cert_file:
            ctx.load_cert_chain(tls.cert_file, tls.key_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"failed to load TLS config: {e}") from e
    if tls.insecure_skip_verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _client_kwargs(settings: Settings) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "username": settings.username,
        "password": settings.password,
        "socket_timeout": settings.socket_timeout,
        "socket_connect_timeout": settings.socket_timeout,
        "decode_responses": False,
    }
    if settings.transport == "unix":
        kwargs["unix_socket_path"] = settings.endpoint
        return kwargs

    kwargs["host"] = settings.host
    kwargs["port"] = settings.port
    if settings.tls.enabled:
        kwargs.update(
            ssl=True,
            ssl_ca_certs=settings.tls.ca_file,
            ssl_certfile=settings.tls.cert_file,
            ssl_keyfile=settings.tls.key_file,
            ssl_cert_reqs="none" if settings.tls.insecure_skip_verify else "required",
            ssl_check_hostname=not settings.tls.insecure_skip_verify,
        )
    return kwargs


class RedisStatusSource(IStatusSource):
    """Fetches INFO from Redis through redis-py.

    redis-py parses INFO into typed, nested values by default. The
    response callback is replaced so the raw reply reaches the tokenizer
    and every value stays a string.

    The client runs with ``decode_responses=False``: the reply arrives as
    bytes and is decoded here with ``errors="replace"``, so a non UTF-8
    value (a path, a client name) cannot fail the whole fetch.
    """

    def __init__(self, client: "redis.Redis", section: str = "all", endpoint: str = ""):
        self._client = client
        self._section = section
        self._endpoint = endpoint
        self._client.set_response_callback("INFO", lambda response, **options: response)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisStatusSource":
        """Build a source from settings.

        Raises:
            ConfigError: transport or TLS configuration is invalid
        """
        if settings.transport == "unix" and settings.tls.enabled:
            raise ConfigError("TLS is not supported over unix sockets")
        # Fails here, before any cycle runs, when TLS material is broken.
        validate_tls_settings(settings.tls)
        client = redis.Redis(**_client_kwargs(settings))
        logger.info(
            "[REDIS] Scraping %s via %s (tls=%s)",
            settings.endpoint, settings.transport, settings.tls.enabled,
        )
        return cls(client, section=settings.info_section, endpoint=settings.endpoint)

    def fetch_status(self) -> StatusInfo:
        try:
            raw = self._client.execute_command("INFO", self._section)
        except (redis.RedisError, OSError) as e:
            raise StatusFetchError(f"INFO {self._section} failed on {self._endpoint}: {e}") from e
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        return parse_info_text(raw)

    def close(self) -> None:
        self._client.close()
