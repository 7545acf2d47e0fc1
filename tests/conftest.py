from pathlib import Path
from typing import List, Optional

import pytest

from redis_receiver.common.config import MetricsSettings
from redis_receiver.core.domain.status_source import IStatusSource
from redis_receiver.core.redis.info import StatusInfo, parse_info_text
from redis_receiver.errors import StatusFetchError
from redis_receiver.metrics.builder import MetricsBuilder
from redis_receiver.metrics.definitions import METRIC_DEFINITIONS

DATA_DIR = Path(__file__).parent / "data"


class FakeStatusSource(IStatusSource):
    """Serves queued snapshots; ``None`` in the queue simulates a failed INFO."""

    def __init__(self, snapshots: List[Optional[StatusInfo]]):
        self._snapshots = list(snapshots)
        self.calls = 0
        self.closed = False

    def fetch_status(self) -> StatusInfo:
        self.calls += 1
        snapshot = self._snapshots.pop(0) if len(self._snapshots) > 1 else self._snapshots[0]
        if snapshot is None:
            raise StatusFetchError("connection refused")
        return snapshot

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def info_text() -> str:
    return (DATA_DIR / "info.txt").read_text()


@pytest.fixture
def status_info(info_text) -> StatusInfo:
    return parse_info_text(info_text)


@pytest.fixture
def all_enabled_builder() -> MetricsBuilder:
    """Builder with every metric enabled, including default-off ones."""
    return MetricsBuilder(MetricsSettings(enabled=frozenset(METRIC_DEFINITIONS)), start_time=0.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_source():
    """Factory for FakeStatusSource instances."""
    return FakeStatusSource
