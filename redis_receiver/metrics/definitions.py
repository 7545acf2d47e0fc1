"""Static definitions of every metric the receiver can emit."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class MetricKind(str, Enum):
    SUM = "sum"
    GAUGE = "gauge"


class ValueType(str, Enum):
    INT = "int"
    DOUBLE = "double"


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    description: str
    unit: str
    kind: MetricKind
    value_type: ValueType
    monotonic: bool = False
    attributes: Tuple[str, ...] = ()
    enabled: bool = True

    @property
    def cumulative(self) -> bool:
        return self.kind is MetricKind.SUM


def _sum(name, description, unit, value_type=ValueType.INT, attributes=(), enabled=True):
    return MetricDefinition(name, description, unit, MetricKind.SUM, value_type, True, attributes, enabled)


def _gauge(name, description, unit, value_type=ValueType.INT, attributes=(), enabled=True):
    return MetricDefinition(name, description, unit, MetricKind.GAUGE, value_type, False, attributes, enabled)


SCOPE_NAME = "otelcol/redisreceiver"

_DEFINITIONS = (
    _sum("redis.uptime", "Number of seconds since Redis server start", "s"),
    _sum("redis.cpu.time", "System CPU consumed by the Redis server in seconds since server start", "s",
         ValueType.DOUBLE, attributes=("state",)),
    _gauge("redis.clients.connected", "Number of client connections (excluding connections from replicas)", "{client}"),
    _gauge("redis.clients.max_input_buffer", "Biggest input buffer among current client connections", "By"),
    _gauge("redis.clients.max_output_buffer", "Longest output list among current client connections", "By"),
    _gauge("redis.clients.blocked", "Number of clients pending on a blocking call", "{client}"),
    _sum("redis.keys.expired", "Total number of key expiration events", "{event}"),
    _sum("redis.keys.evicted", "Number of evicted keys due to maxmemory limit", "{key}"),
    _sum("redis.connections.received", "Total number of connections accepted by the server", "{connection}"),
    _sum("redis.connections.rejected", "Number of connections rejected because of maxclients limit", "{connection}"),
    _gauge("redis.memory.used", "Total number of bytes allocated by Redis using its allocator", "By"),
    _gauge("redis.memory.peak", "Peak memory consumed by Redis (in bytes)", "By"),
    _gauge("redis.memory.rss", "Number of bytes that Redis allocated as seen by the operating system", "By"),
    _gauge("redis.memory.lua", "Number of bytes used by the Lua engine", "By"),
    _gauge("redis.memory.fragmentation_ratio", "Ratio between used_memory_rss and used_memory", "1", ValueType.DOUBLE),
    _gauge("redis.maxmemory", "The value of the maxmemory configuration directive", "By", enabled=False),
    _gauge("redis.rdb.changes_since_last_save", "Number of changes since the last dump", "{change}"),
    _gauge("redis.commands", "Number of commands processed per second", "{ops}/s"),
    _sum("redis.commands.processed", "Total number of commands processed by the server", "{command}"),
    _sum("redis.net.input", "The total number of bytes read from the network", "By"),
    _sum("redis.net.output", "The total number of bytes written to the network", "By"),
    _sum("redis.keyspace.hits", "Number of successful lookup of keys in the main dictionary", "{hit}"),
    _sum("redis.keyspace.misses", "Number of failed lookup of keys in the main dictionary", "{miss}"),
    _gauge("redis.latest_fork", "Duration of the latest fork operation in microseconds", "us"),
    _gauge("redis.slaves.connected", "Number of connected replicas", "{replica}"),
    _gauge("redis.replication.offset", "The server's current replication offset", "By"),
    _gauge("redis.replication.backlog_first_byte_offset",
           "The master offset of the replication backlog buffer", "By"),
    _gauge("redis.db.keys", "Number of keyspace keys", "{key}", attributes=("db",)),
    _gauge("redis.db.expires", "Number of keyspace keys with an expiration", "{key}", attributes=("db",)),
    _gauge("redis.db.avg_ttl", "Average keyspace keys TTL", "ms", attributes=("db",)),
    _gauge("redis.latencystat.p50", "Latency percentile 50 of commands", "us", ValueType.DOUBLE,
           attributes=("command",)),
    _gauge("redis.latencystat.p90", "Latency percentile 90 of commands", "us", ValueType.DOUBLE,
           attributes=("command",)),
    _gauge("redis.latencystat.p99", "Latency percentile 99 of commands", "us", ValueType.DOUBLE,
           attributes=("command",)),
    _gauge("redis.latencystat.p99_9", "Latency percentile 99.9 of commands", "us", ValueType.DOUBLE,
           attributes=("command",)),
    _gauge("redis.latencystat.p100", "Latency percentile 100 of commands", "us", ValueType.DOUBLE,
           attributes=("command",)),
)

METRIC_DEFINITIONS: Dict[str, MetricDefinition] = {d.name: d for d in _DEFINITIONS}
