"""Metrics builder.

Accumulates typed data points between emits and owns the start time
stamped on cumulative metrics. Not thread-safe: one builder belongs to
one scraper and is driven by one cycle at a time.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from ..common.config import MetricsSettings
from ..errors import ConfigError
from .definitions import METRIC_DEFINITIONS, SCOPE_NAME, MetricDefinition, ValueType
from .models import DataPoint, MetricData, MetricsBatch, Number

logger = logging.getLogger(__name__)


def resolve_enabled(settings: Optional[MetricsSettings] = None) -> Dict[str, bool]:
    """Apply settings overrides on top of each metric's default."""
    settings = settings or MetricsSettings()
    unknown = (settings.enabled | settings.disabled) - set(METRIC_DEFINITIONS)
    if unknown:
        raise ConfigError(f"unknown metrics in settings: {sorted(unknown)}")
    enabled = {name: d.enabled for name, d in METRIC_DEFINITIONS.items()}
    for name in settings.enabled:
        enabled[name] = True
    for name in settings.disabled:
        enabled[name] = False
    return enabled


class MetricsBuilder:

    def __init__(
        self,
        settings: Optional[MetricsSettings] = None,
        start_time: Optional[float] = None,
        resource: Optional[Dict[str, str]] = None,
    ):
        self._enabled = resolve_enabled(settings)
        self._start_time = time.time() if start_time is None else start_time
        self._resource = dict(resource or {})
        self._buffers: Dict[str, List[DataPoint]] = {}

    @property
    def start_time(self) -> float:
        return self._start_time

    def is_enabled(self, name: str) -> bool:
        return self._enabled.get(name, False)

    def reset_start_time(self, start_time: float) -> None:
        """Re-baseline cumulative metrics, e.g. after a server restart."""
        logger.debug("[METRICS] start time reset %.3f -> %.3f", self._start_time, start_time)
        self._start_time = start_time

    def _record(self, name: str, ts: float, value: Number, **attributes: str) -> None:
        if not self._enabled.get(name, False):
            return
        definition: MetricDefinition = METRIC_DEFINITIONS[name]
        value = float(value) if definition.value_type is ValueType.DOUBLE else int(value)
        self._buffers.setdefault(name, []).append(
            DataPoint(
                metric=name,
                timestamp=ts,
                value=value,
                start_timestamp=self._start_time if definition.cumulative else None,
                attributes=attributes,
            )
        )

    def emit(self) -> MetricsBatch:
        """Drain buffered points into a batch. Start time is kept."""
        batch = MetricsBatch(scope=SCOPE_NAME, resource=dict(self._resource))
        for name, points in self._buffers.items():
            if points:
                batch.metrics[name] = MetricData(METRIC_DEFINITIONS[name], points)
        self._buffers = {}
        return batch

    # -- generic server metrics ---------------------------------------------

    def record_redis_uptime_data_point(self, ts: float, val: int) -> None:
        self._record("redis.uptime", ts, val)

    def record_redis_cpu_time_data_point(self, ts: float, val: float, state: str) -> None:
        self._record("redis.cpu.time", ts, val, state=state)

    def record_redis_clients_connected_data_point(self, ts: float, val: int) -> None:
        self._record("redis.clients.connected", ts, val)

    def record_redis_clients_max_input_buffer_data_point(self, ts: float, val: int) -> None:
        self._record("redis.clients.max_input_buffer", ts, val)

    def record_redis_clients_max_output_buffer_data_point(self, ts: float, val: int) -> None:
        self._record("redis.clients.max_output_buffer", ts, val)

    def record_redis_clients_blocked_data_point(self, ts: float, val: int) -> None:
        self._record("redis.clients.blocked", ts, val)

    def record_redis_keys_expired_data_point(self, ts: float, val: int) -> None:
        self._record("redis.keys.expired", ts, val)

    def record_redis_keys_evicted_data_point(self, ts: float, val: int) -> None:
        self._record("redis.keys.evicted", ts, val)

    def record_redis_connections_received_data_point(self, ts: float, val: int) -> None:
        self._record("redis.connections.received", ts, val)

    def record_redis_connections_rejected_data_point(self, ts: float, val: int) -> None:
        self._record("redis.connections.rejected", ts, val)

    def record_redis_memory_used_data_point(self, ts: float, val: int) -> None:
        self._record("redis.memory.used", ts, val)

    def record_redis_memory_peak_data_point(self, ts: float, val: int) -> None:
        self._record("redis.memory.peak", ts, val)

    def record_redis_memory_rss_data_point(self, ts: float, val: int) -> None:
        self._record("redis.memory.rss", ts, val)

    def record_redis_memory_lua_data_point(self, ts: float, val: int) -> None:
        self._record("redis.memory.lua", ts, val)

    def record_redis_memory_fragmentation_ratio_data_point(self, ts: float, val: float) -> None:
        self._record("redis.memory.fragmentation_ratio", ts, val)

    def record_redis_maxmemory_data_point(self, ts: float, val: int) -> None:
        self._record("redis.maxmemory", ts, val)

    def record_redis_rdb_changes_since_last_save_data_point(self, ts: float, val: int) -> None:
        self._record("redis.rdb.changes_since_last_save", ts, val)

    def record_redis_commands_data_point(self, ts: float, val: int) -> None:
        self._record("redis.commands", ts, val)

    def record_redis_commands_processed_data_point(self, ts: float, val: int) -> None:
        self._record("redis.commands.processed", ts, val)

    def record_redis_net_input_data_point(self, ts: float, val: int) -> None:
        self._record("redis.net.input", ts, val)

    def record_redis_net_output_data_point(self, ts: float, val: int) -> None:
        self._record("redis.net.output", ts, val)

    def record_redis_keyspace_hits_data_point(self, ts: float, val: int) -> None:
        self._record("redis.keyspace.hits", ts, val)

    def record_redis_keyspace_misses_data_point(self, ts: float, val: int) -> None:
        self._record("redis.keyspace.misses", ts, val)

    def record_redis_latest_fork_data_point(self, ts: float, val: int) -> None:
        self._record("redis.latest_fork", ts, val)

    def record_redis_slaves_connected_data_point(self, ts: float, val: int) -> None:
        self._record("redis.slaves.connected", ts, val)

    def record_redis_replication_offset_data_point(self, ts: float, val: int) -> None:
        self._record("redis.replication.offset", ts, val)

    def record_redis_replication_backlog_first_byte_offset_data_point(self, ts: float, val: int) -> None:
        self._record("redis.replication.backlog_first_byte_offset", ts, val)

    # -- keyspace (per database) --------------------------------------------

    def record_redis_db_keys_data_point(self, ts: float, val: int, db: str) -> None:
        self._record("redis.db.keys", ts, val, db=db)

    def record_redis_db_expires_data_point(self, ts: float, val: int, db: str) -> None:
        self._record("redis.db.expires", ts, val, db=db)

    def record_redis_db_avg_ttl_data_point(self, ts: float, val: int, db: str) -> None:
        self._record("redis.db.avg_ttl", ts, val, db=db)

    # -- latency percentiles (per command) ----------------------------------

    def record_redis_latencystat_p50_data_point(self, ts: float, val: float, command: str) -> None:
        self._record("redis.latencystat.p50", ts, val, command=command)

    def record_redis_latencystat_p90_data_point(self, ts: float, val: float, command: str) -> None:
        self._record("redis.latencystat.p90", ts, val, command=command)

    def record_redis_latencystat_p99_data_point(self, ts: float, val: float, command: str) -> None:
        self._record("redis.latencystat.p99", ts, val, command=command)

    def record_redis_latencystat_p999_data_point(self, ts: float, val: float, command: str) -> None:
        self._record("redis.latencystat.p99_9", ts, val, command=command)

    def record_redis_latencystat_p100_data_point(self, ts: float, val: float, command: str) -> None:
        self._record("redis.latencystat.p100", ts, val, command=command)
