"""Metrics module: definitions, builder and Prometheus exposition."""

from .definitions import METRIC_DEFINITIONS, MetricDefinition, MetricKind, ValueType
from .models import DataPoint, MetricData, MetricsBatch
from .builder import MetricsBuilder
from .exporter import BatchCollector

__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricKind",
    "ValueType",
    "DataPoint",
    "MetricData",
    "MetricsBatch",
    "MetricsBuilder",
    "BatchCollector",
]
