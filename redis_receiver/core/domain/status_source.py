"""Abstract interface for status sources.

This decouples the scraper from the transport used to reach the server.
Any source (redis-py client, canned reply, test fake) can implement it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..redis.info import StatusInfo


class IStatusSource(ABC):
    """Abstract interface for status sources.

    Implementations:
    - RedisStatusSource: issues INFO over a redis-py connection
    - StaticStatusSource: serves a fixed reply (tests, dry runs)
    """

    @abstractmethod
    def fetch_status(self) -> StatusInfo:
        """Fetch one status snapshot.

        Returns:
            Fresh StatusInfo for this cycle

        Raises:
            StatusFetchError: the server could not be queried
        """
        pass

    def close(self) -> None:
        """Release transport resources, if any."""


class StaticStatusSource(IStatusSource):
    """Serves a fixed INFO snapshot."""

    def __init__(self, info: StatusInfo):
        self._info = info

    def fetch_status(self) -> StatusInfo:
        return self._info
