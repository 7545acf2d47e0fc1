"""Per-command latency percentiles reported by INFO latencystats.

Each line looks like::

    latency_percentiles_usec_get:p50=1.003,p99=3.007,p99.9=8.031

The command name is the field suffix; values are microseconds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Mapping, Tuple

from ..core.redis.info import parse_float
from ..errors import InfoParseError
from ..metrics.builder import MetricsBuilder

logger = logging.getLogger(__name__)

LATENCY_KEY_PREFIX = "latency_percentiles_usec_"

# Closed set of exported percentiles
PERCENTILES = ("50", "90", "99", "99.9", "100")


@dataclass(frozen=True)
class LatencyStatsRecord:
    command: str
    stats: Dict[str, float] = field(default_factory=dict)


def parse_latency_stats_string(command: str, text: str) -> LatencyStatsRecord:
    """Parse ``p50=<f>,p99=<f>,...`` into percentile label -> latency.

    Labels outside PERCENTILES (``p75``) are dropped. A value that is not a
    float fails the whole line.

    Raises:
        InfoParseError: malformed pair or non-float value
    """
    key = LATENCY_KEY_PREFIX + command
    stats: Dict[str, float] = {}
    for pair in text.strip().split(","):
        label, sep, raw = pair.partition("=")
        label = label.strip()
        if not sep or not label.startswith("p") or len(label) < 2:
            raise InfoParseError(key, text, f"expected p<percentile>=<value>, got {pair!r}")
        try:
            value = parse_float(key, raw)
        except InfoParseError as e:
            raise InfoParseError(key, text, f"{label} is not a float") from e
        percentile = label[1:]
        if percentile in PERCENTILES:
            stats[percentile] = value
    return LatencyStatsRecord(command=command, stats=stats)


def latency_fields(info: Mapping[str, str]) -> Iterator[Tuple[str, str]]:
    """Yield (command, raw value) for every latency field.

    A field named exactly the prefix has no command and is skipped.
    """
    for key, value in info.items():
        if not key.startswith(LATENCY_KEY_PREFIX) or len(key) <= len(LATENCY_KEY_PREFIX):
            continue
        yield key[len(LATENCY_KEY_PREFIX):], value


def _percentile_recorders(mb: MetricsBuilder) -> Dict[str, Callable[[float, float, str], None]]:
    return {
        "50": mb.record_redis_latencystat_p50_data_point,
        "90": mb.record_redis_latencystat_p90_data_point,
        "99": mb.record_redis_latencystat_p99_data_point,
        "99.9": mb.record_redis_latencystat_p999_data_point,
        "100": mb.record_redis_latencystat_p100_data_point,
    }


def record_latency_stats_metrics(ts: float, info: Mapping[str, str], mb: MetricsBuilder) -> int:
    """Record one data point per parsed percentile, tagged with the command.

    Returns:
        Number of data points recorded
    """
    recorders = _percentile_recorders(mb)
    recorded = 0
    for command, text in latency_fields(info):
        try:
            stats = parse_latency_stats_string(command, text)
        except InfoParseError as e:
            logger.warning(
                "[SCRAPER] failed to parse latency stats string command=%s latencystats=%r err=%s",
                command, text, e.reason,
            )
            continue
        for percentile, latency in stats.stats.items():
            recorders[percentile](ts, latency, command)
            recorded += 1
    return recorded
