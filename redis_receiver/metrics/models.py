"""Data models for emitted metric batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .definitions import MetricDefinition

Number = Union[int, float]


@dataclass(frozen=True)
class DataPoint:
    """One recorded value."""

    metric: str
    timestamp: float
    value: Number
    # Only cumulative metrics carry a start time
    start_timestamp: Optional[float] = None
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class MetricData:
    definition: MetricDefinition
    data_points: List[DataPoint] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass
class MetricsBatch:
    """Finished batch produced by one scrape cycle."""

    scope: str
    metrics: Dict[str, MetricData] = field(default_factory=dict)
    resource: Dict[str, str] = field(default_factory=dict)

    def data_point_count(self) -> int:
        return sum(len(m.data_points) for m in self.metrics.values())

    def metric(self, name: str) -> Optional[MetricData]:
        return self.metrics.get(name)

    def points(self, name: str) -> List[DataPoint]:
        """Data points of one metric, empty when it was not recorded."""
        data = self.metrics.get(name)
        return list(data.data_points) if data else []

    def to_dict(self) -> dict:
        return {
            "scope": self.scope,
            "resource": dict(self.resource),
            "data_point_count": self.data_point_count(),
            "metrics": {
                name: [
                    {
                        "timestamp": p.timestamp,
                        "start_timestamp": p.start_timestamp,
                        "value": p.value,
                        "attributes": dict(p.attributes),
                    }
                    for p in data.data_points
                ]
                for name, data in self.metrics.items()
            },
        }
