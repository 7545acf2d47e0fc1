"""Prometheus exposition of the latest emitted batch.

The scrape loop pushes each finished batch with ``update()``; the
prometheus_client HTTP thread reads it back through ``collect()``.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterator, Optional

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from .models import MetricData, MetricsBatch

logger = logging.getLogger(__name__)


def prometheus_name(name: str) -> str:
    """``redis.latencystat.p99_9`` -> ``redis_latencystat_p99_9``."""
    return name.replace(".", "_")


def _family(data: MetricData) -> Metric:
    definition = data.definition
    name = prometheus_name(definition.name)
    doc = f"{definition.description} ({definition.unit})"
    labels = list(definition.attributes)

    if definition.cumulative and definition.monotonic:
        family = CounterMetricFamily(name, doc, labels=labels)
        for point in data.data_points:
            family.add_metric(
                [point.attributes.get(label, "") for label in labels],
                point.value,
                created=point.start_timestamp,
            )
        return family

    family = GaugeMetricFamily(name, doc, labels=labels)
    for point in data.data_points:
        family.add_metric([point.attributes.get(label, "") for label in labels], point.value)
    return family


class BatchCollector(Collector):
    """Republishes the most recent MetricsBatch."""

    def __init__(self):
        self._batch: Optional[MetricsBatch] = None
        self._lock = threading.Lock()

    def update(self, batch: MetricsBatch) -> None:
        with self._lock:
            self._batch = batch
        logger.debug("[EXPORTER] batch updated points=%d", batch.data_point_count())

    def clear(self) -> None:
        """Drop the last batch so a failed cycle does not serve stale values."""
        with self._lock:
            self._batch = None

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            batch = self._batch
        if batch is None:
            return
        for data in batch.metrics.values():
            yield _family(data)
