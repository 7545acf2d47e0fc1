"""Keyspace lines of the INFO reply, e.g. ``db0:keys=1,expires=2,avg_ttl=3``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping

from ..core.redis.info import parse_int
from ..errors import InfoParseError
from ..metrics.builder import MetricsBuilder

logger = logging.getLogger(__name__)

REDIS_MAX_DBS = 16  # Maximum possible number of redis databases

_REQUIRED = ("keys", "expires", "avg_ttl")


@dataclass(frozen=True)
class KeyspaceRecord:
    db: int
    keys: int
    expires: int
    avg_ttl: int  # milliseconds


def parse_keyspace_string(db: int, text: str) -> KeyspaceRecord:
    """Parse ``keys=<n>,expires=<n>,avg_ttl=<n>``.

    Extra pairs reported by newer servers (``subexpiry=<n>``) are ignored.

    Raises:
        InfoParseError: malformed pair, non-integer value or missing field
    """
    key = f"db{db}"
    values: Dict[str, int] = {}
    for pair in text.strip().split(","):
        name, sep, raw = pair.partition("=")
        if not sep:
            raise InfoParseError(key, text, f"expected name=value, got {pair!r}")
        name = name.strip()
        try:
            values[name] = parse_int(key, raw)
        except InfoParseError as e:
            raise InfoParseError(key, text, f"{name} is not an integer") from e

    missing = [name for name in _REQUIRED if name not in values]
    if missing:
        raise InfoParseError(key, text, f"missing {', '.join(missing)}")

    return KeyspaceRecord(db=db, keys=values["keys"], expires=values["expires"], avg_ttl=values["avg_ttl"])


def record_keyspace_metrics(ts: float, info: Mapping[str, str], mb: MetricsBuilder) -> int:
    """Record keys/expires/avg_ttl for each configured database.

    Scans db0..db15 and stops at the first absent slot: databases are
    assumed dense from 0, so db5 is never reached when db1 is missing.

    Returns:
        Number of databases recorded
    """
    recorded = 0
    for db in range(REDIS_MAX_DBS):
        key = f"db{db}"
        text = info.get(key)
        if text is None:
            break
        try:
            keyspace = parse_keyspace_string(db, text)
        except InfoParseError as e:
            logger.warning("[SCRAPER] failed to parse keyspace string key=%s val=%r err=%s", key, text, e.reason)
            continue
        db_attr = str(keyspace.db)
        mb.record_redis_db_keys_data_point(ts, keyspace.keys, db_attr)
        mb.record_redis_db_expires_data_point(ts, keyspace.expires, db_attr)
        mb.record_redis_db_avg_ttl_data_point(ts, keyspace.avg_ttl, db_attr)
        recorded += 1
    return recorded
