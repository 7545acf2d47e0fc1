"""Recorder table for fixed INFO fields.

Maps each INFO field the receiver understands to a typed recorder. INFO
carries only text, so the numeric kind comes from the recorder, not from
the value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Dict, Mapping, Union

from ..core.redis.info import parse_float, parse_int
from ..errors import InfoParseError
from ..metrics.builder import MetricsBuilder

logger = logging.getLogger(__name__)


class ValueKind(str, Enum):
    INT = "int"
    FLOAT = "float"


@dataclass(frozen=True)
class Recorder:
    """Typed recording function: ``record(ts, value)``."""

    kind: ValueKind
    record: Callable[[float, Union[int, float]], None]

    @classmethod
    def of_int(cls, record: Callable[[float, int], None]) -> "Recorder":
        return cls(ValueKind.INT, record)

    @classmethod
    def of_float(cls, record: Callable[[float, float], None]) -> "Recorder":
        return cls(ValueKind.FLOAT, record)

    def parse(self, key: str, raw: str) -> Union[int, float]:
        if self.kind is ValueKind.INT:
            return parse_int(key, raw)
        return parse_float(key, raw)


def build_recorder_table(mb: MetricsBuilder) -> Dict[str, Recorder]:
    """Build the field -> recorder table bound to one builder."""
    return {
        "uptime_in_seconds": Recorder.of_int(mb.record_redis_uptime_data_point),

        "used_cpu_sys": Recorder.of_float(partial(mb.record_redis_cpu_time_data_point, state="sys")),
        "used_cpu_sys_children": Recorder.of_float(
            partial(mb.record_redis_cpu_time_data_point, state="sys_children")),
        "used_cpu_sys_main_thread": Recorder.of_float(
            partial(mb.record_redis_cpu_time_data_point, state="sys_main_thread")),
        "used_cpu_user": Recorder.of_float(partial(mb.record_redis_cpu_time_data_point, state="user")),
        "used_cpu_user_children": Recorder.of_float(
            partial(mb.record_redis_cpu_time_data_point, state="user_children")),
        "used_cpu_user_main_thread": Recorder.of_float(
            partial(mb.record_redis_cpu_time_data_point, state="user_main_thread")),

        "connected_clients": Recorder.of_int(mb.record_redis_clients_connected_data_point),
        "client_recent_max_input_buffer": Recorder.of_int(mb.record_redis_clients_max_input_buffer_data_point),
        "client_recent_max_output_buffer": Recorder.of_int(mb.record_redis_clients_max_output_buffer_data_point),
        "blocked_clients": Recorder.of_int(mb.record_redis_clients_blocked_data_point),

        "expired_keys": Recorder.of_int(mb.record_redis_keys_expired_data_point),
        "evicted_keys": Recorder.of_int(mb.record_redis_keys_evicted_data_point),
        "total_connections_received": Recorder.of_int(mb.record_redis_connections_received_data_point),
        "rejected_connections": Recorder.of_int(mb.record_redis_connections_rejected_data_point),

        "used_memory": Recorder.of_int(mb.record_redis_memory_used_data_point),
        "used_memory_peak": Recorder.of_int(mb.record_redis_memory_peak_data_point),
        "used_memory_rss": Recorder.of_int(mb.record_redis_memory_rss_data_point),
        "used_memory_lua": Recorder.of_int(mb.record_redis_memory_lua_data_point),
        "mem_fragmentation_ratio": Recorder.of_float(mb.record_redis_memory_fragmentation_ratio_data_point),
        "maxmemory": Recorder.of_int(mb.record_redis_maxmemory_data_point),

        "rdb_changes_since_last_save": Recorder.of_int(mb.record_redis_rdb_changes_since_last_save_data_point),
        "instantaneous_ops_per_sec": Recorder.of_int(mb.record_redis_commands_data_point),
        "total_commands_processed": Recorder.of_int(mb.record_redis_commands_processed_data_point),
        "total_net_input_bytes": Recorder.of_int(mb.record_redis_net_input_data_point),
        "total_net_output_bytes": Recorder.of_int(mb.record_redis_net_output_data_point),
        "keyspace_hits": Recorder.of_int(mb.record_redis_keyspace_hits_data_point),
        "keyspace_misses": Recorder.of_int(mb.record_redis_keyspace_misses_data_point),
        "latest_fork_usec": Recorder.of_int(mb.record_redis_latest_fork_data_point),

        "connected_slaves": Recorder.of_int(mb.record_redis_slaves_connected_data_point),
        "master_repl_offset": Recorder.of_int(mb.record_redis_replication_offset_data_point),
        "repl_backlog_first_byte_offset": Recorder.of_int(
            mb.record_redis_replication_backlog_first_byte_offset_data_point),
    }


def record_common_metrics(ts: float, info: Mapping[str, str], recorders: Mapping[str, Recorder]) -> int:
    """Record every table field present in ``info``.

    Fields without a recorder are skipped. A value that does not parse as
    the recorder's kind is logged and skipped.

    Returns:
        Number of recorders invoked
    """
    recorded = 0
    for key, recorder in recorders.items():
        raw = info.get(key)
        if raw is None:
            continue
        try:
            value = recorder.parse(key, raw)
        except InfoParseError as e:
            logger.warning(
                "[SCRAPER] failed to parse info %s val key=%s val=%r err=%s",
                recorder.kind.value, key, raw, e.reason,
            )
            continue
        recorder.record(ts, value)
        recorded += 1
    return recorded
