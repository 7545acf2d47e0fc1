"""Snapshot of a Redis INFO reply.

The reply is plain text: ``# Section`` headers followed by ``field:value``
lines. Structured values (``db0:keys=1,expires=0,avg_ttl=0``) are kept as
raw strings here and parsed by the scraper passes.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Dict, Iterator

from ...errors import InfoParseError

UPTIME_KEY = "uptime_in_seconds"

# INFO numbers are plain ASCII. Python's int()/float() would also take
# "1_000", surrounding whitespace and non-ASCII digits.
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def parse_int(key: str, raw: str) -> int:
    """Parse an INFO integer value.

    Raises:
        InfoParseError: ``raw`` is not an optionally signed run of ASCII digits
    """
    if not _INT_RE.fullmatch(raw):
        raise InfoParseError(key, raw, "expected int")
    return int(raw)


def parse_float(key: str, raw: str) -> float:
    """Parse an INFO float value (decimal, exponent, ``inf`` or ``nan``).

    Raises:
        InfoParseError: ``raw`` is not a plain ASCII float literal
    """
    if not _FLOAT_RE.fullmatch(raw):
        raise InfoParseError(key, raw, "expected float")
    return float(raw)


class StatusInfo(Mapping):
    """Read-only mapping of INFO field name to raw value."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Dict[str, str]):
        self._fields = dict(fields)

    def __getitem__(self, key: str) -> str:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"StatusInfo({len(self._fields)} fields)"

    def uptime_seconds(self) -> int:
        """Server uptime in whole seconds.

        Raises:
            InfoParseError: field missing or not an integer
        """
        raw = self._fields.get(UPTIME_KEY)
        if raw is None:
            raise InfoParseError(UPTIME_KEY, None, "field not present in INFO reply")
        return parse_int(UPTIME_KEY, raw)


def parse_info_text(text: str) -> StatusInfo:
    """Tokenize a raw INFO reply into a StatusInfo.

    Blank lines and ``#`` headers are skipped. Each remaining line is split
    on its first ``:`` so values that contain colons (paths, IPv6
    addresses) are kept whole. Lines without a colon are ignored.
    """
    fields: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields[key] = value
    return StatusInfo(fields)
