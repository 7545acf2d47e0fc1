"""Tests for the scrape loop."""

import logging
from unittest.mock import MagicMock

import pytest

from redis_receiver.common.config import Settings
from redis_receiver.core.redis.info import StatusInfo
from redis_receiver.errors import StatusFetchError
from redis_receiver.jobs import cli
from redis_receiver.metrics.exporter import BatchCollector
from redis_receiver.scraper.scraper import RedisScraper


class _Stop(Exception):
    pass


def _sleeper(max_calls: int):
    calls = []

    def sleep(seconds):
        calls.append(seconds)
        if len(calls) >= max_calls:
            raise _Stop()

    return sleep, calls


class TestRunLoop:

    def test_once_updates_collector(self, make_source, clock):
        scraper = RedisScraper(make_source([StatusInfo({"uptime_in_seconds": "5"})]), clock=clock)
        collector = BatchCollector()

        cli.run_loop(scraper, collector, interval=10.0, once=True, sleep=MagicMock())

        assert [f.name for f in collector.collect()] == ["redis_uptime"]

    def test_once_raises_on_failure(self, make_source, clock):
        scraper = RedisScraper(make_source([None]), clock=clock)

        with pytest.raises(StatusFetchError):
            cli.run_loop(scraper, BatchCollector(), interval=10.0, once=True, sleep=MagicMock())

    def test_failed_cycle_clears_and_continues(self, make_source, clock):
        source = make_source([StatusInfo({"uptime_in_seconds": "5"}), None, StatusInfo({"uptime_in_seconds": "25"})])
        scraper = RedisScraper(source, clock=clock)
        collector = BatchCollector()
        sleep, calls = _sleeper(max_calls=3)

        with pytest.raises(_Stop):
            cli.run_loop(scraper, collector, interval=10.0, sleep=sleep)

        # one scrape per interval, no retry in between
        assert source.calls == 3
        assert len(calls) == 3
        assert all(0.0 <= s <= 10.0 for s in calls)
        assert scraper.last_uptime == 25
        assert list(collector.collect())

    def test_once_returns_batch(self, make_source, clock):
        scraper = RedisScraper(make_source([StatusInfo({"uptime_in_seconds": "5"})]), clock=clock)

        batch = cli.run_loop(scraper, BatchCollector(), interval=10.0, once=True, sleep=MagicMock())

        assert batch.data_point_count() == 1

    def test_unexpected_error_clears_and_continues(self, clock, caplog):
        source = MagicMock()
        source.fetch_status.side_effect = [
            StatusInfo({"uptime_in_seconds": "5"}),
            RuntimeError("boom"),
            StatusInfo({"uptime_in_seconds": "15"}),
        ]
        scraper = RedisScraper(source, clock=clock)
        collector = MagicMock()
        sleep, calls = _sleeper(max_calls=3)

        with caplog.at_level(logging.ERROR), pytest.raises(_Stop):
            cli.run_loop(scraper, collector, interval=10.0, sleep=sleep)

        assert source.fetch_status.call_count == 3
        assert collector.update.call_count == 2
        collector.clear.assert_called_once()
        assert scraper.last_uptime == 15
        assert "boom" in caplog.text

    def test_once_raises_unexpected_error(self, clock):
        source = MagicMock()
        source.fetch_status.side_effect = RuntimeError("boom")
        collector = MagicMock()

        with pytest.raises(RuntimeError):
            cli.run_loop(RedisScraper(source, clock=clock), collector, interval=10.0, once=True, sleep=MagicMock())
        collector.clear.assert_called_once()


class TestMain:

    def test_once_prints_batch(self, monkeypatch, make_source, clock, capsys):
        scraper = RedisScraper(make_source([StatusInfo({"uptime_in_seconds": "5"})]), clock=clock)
        monkeypatch.setattr(cli.RedisScraper, "from_settings", classmethod(lambda cls, settings: scraper))
        monkeypatch.setattr(cli, "get_settings", lambda: Settings())

        cli.main(["--once"])

        out = capsys.readouterr().out
        assert '"redis.uptime"' in out
        assert '"data_point_count": 1' in out

    def test_once_goes_through_run_loop(self, monkeypatch, make_source, clock, capsys):
        scraper = RedisScraper(make_source([StatusInfo({"uptime_in_seconds": "5"})]), clock=clock)
        monkeypatch.setattr(cli.RedisScraper, "from_settings", classmethod(lambda cls, settings: scraper))
        monkeypatch.setattr(cli, "get_settings", lambda: Settings())
        run_loop = MagicMock(wraps=cli.run_loop)
        monkeypatch.setattr(cli, "run_loop", run_loop)

        cli.main(["--once", "--interval", "3"])

        run_loop.assert_called_once()
        assert run_loop.call_args.args[2] == 3.0
        assert run_loop.call_args.kwargs["once"] is True
        assert '"data_point_count": 1' in capsys.readouterr().out

    def test_once_failure_closes_scraper(self, monkeypatch, make_source, clock):
        source = make_source([None])
        scraper = RedisScraper(source, clock=clock)
        monkeypatch.setattr(cli.RedisScraper, "from_settings", classmethod(lambda cls, settings: scraper))
        monkeypatch.setattr(cli, "get_settings", lambda: Settings())

        with pytest.raises(StatusFetchError):
            cli.main(["--once"])
        assert source.closed
