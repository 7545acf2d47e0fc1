"""Redis scraper.

Runs once per collection interval: fetches INFO, detects server restarts,
records the fixed, keyspace and latency metrics and emits the batch.

Flujo:
  scheduler -> RedisScraper.scrape()
  -> IStatusSource.fetch_status()     (fatal on failure)
  -> StatusInfo.uptime_seconds()      (fatal on failure)
  -> restart detection / start time re-baseline
  -> common, keyspace, latency passes (per-field failures logged, skipped)
  -> MetricsBuilder.emit()
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from ..common.config import Settings
from ..core.domain.status_source import IStatusSource
from ..core.redis.connection import RedisStatusSource
from ..metrics.builder import MetricsBuilder
from ..metrics.models import MetricsBatch
from .keyspace import record_keyspace_metrics
from .latency_stats import record_latency_stats_metrics
from .recorders import Recorder, build_recorder_table, record_common_metrics

logger = logging.getLogger(__name__)


class RedisScraper:
    """Builds one MetricsBatch per call to ``scrape()``.

    Owns ``_last_uptime`` and its MetricsBuilder; callers must not run two
    scrapes on the same instance at once.
    """

    def __init__(
        self,
        source: IStatusSource,
        builder: Optional[MetricsBuilder] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self._mb = builder or MetricsBuilder()
        self._clock = clock
        self._recorders: Dict[str, Recorder] = build_recorder_table(self._mb)
        self._last_uptime: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], float] = time.time) -> "RedisScraper":
        """Create a scraper backed by a live Redis connection.

        Raises:
            ConfigError: transport, TLS or metrics settings are invalid
        """
        builder = MetricsBuilder(settings.metrics, resource={"redis.endpoint": settings.endpoint})
        source = RedisStatusSource.from_settings(settings)
        return cls(source, builder=builder, clock=clock)

    @property
    def builder(self) -> MetricsBuilder:
        return self._mb

    @property
    def recorders(self) -> Dict[str, Recorder]:
        return dict(self._recorders)

    @property
    def last_uptime(self) -> Optional[int]:
        return self._last_uptime

    def scrape(self) -> MetricsBatch:
        """Run one cycle.

        Raises:
            StatusFetchError: INFO could not be fetched
            InfoParseError: uptime missing or not an integer
        """
        info = self._source.fetch_status()

        now = self._clock()
        current_uptime = info.uptime_seconds()

        if self._last_uptime is None or current_uptime < self._last_uptime:
            if self._last_uptime is not None:
                logger.info(
                    "[SCRAPER] restart detected uptime=%ds previous=%ds",
                    current_uptime, self._last_uptime,
                )
            self._mb.reset_start_time(now - current_uptime)

        common = record_common_metrics(now, info, self._recorders)
        databases = record_keyspace_metrics(now, info, self._mb)
        latencies = record_latency_stats_metrics(now, info, self._mb)

        self._last_uptime = current_uptime

        batch = self._mb.emit()
        logger.debug(
            "[SCRAPER] cycle done common=%d dbs=%d latency_points=%d total_points=%d",
            common, databases, latencies, batch.data_point_count(),
        )
        return batch

    def close(self) -> None:
        self._source.close()
