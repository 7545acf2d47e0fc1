"""Error taxonomy for the Redis receiver.

CATEGORIES:
- ConfigError: settings or TLS material cannot be materialized (construction time)
- StatusFetchError: INFO round trip failed (fatal to the cycle)
- InfoParseError: a value in the INFO reply could not be parsed
  (fatal for uptime, recoverable for every other field)
"""

from __future__ import annotations

from typing import Optional


class ReceiverError(Exception):
    """Base class for all receiver errors."""


class ConfigError(ReceiverError):
    """Invalid receiver configuration."""


class StatusFetchError(ReceiverError):
    """Fetching the status report from the server failed."""


class InfoParseError(ReceiverError, ValueError):
    """A field of the status report could not be parsed."""

    def __init__(self, key: str, value: Optional[str], reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"cannot parse {key}={value!r}: {reason}")
