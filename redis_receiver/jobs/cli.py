"""CLI entry point for the scrape loop."""

from __future__ import annotations

import argparse
import json
import logging
import time
from typing import Optional, Sequence

from prometheus_client import REGISTRY, start_http_server

from ..common.config import get_settings
from ..errors import ReceiverError
from ..metrics.exporter import BatchCollector
from ..metrics.models import MetricsBatch
from ..scraper.scraper import RedisScraper

logger = logging.getLogger(__name__)


def run_loop(
    scraper: RedisScraper,
    collector: BatchCollector,
    interval: float,
    once: bool = False,
    sleep=time.sleep,
) -> Optional[MetricsBatch]:
    """Scrape every ``interval`` seconds, one cycle at a time.

    A failed cycle is logged, the collector is cleared and the loop waits
    for the next interval. With ``once`` a single cycle runs: its batch is
    returned and any error is raised.
    """
    while True:
        started = time.monotonic()
        try:
            batch = scraper.scrape()
            collector.update(batch)
            logger.info("Scrape completed points=%d", batch.data_point_count())
            if once:
                return batch
        except ReceiverError as e:
            collector.clear()
            logger.error("Scrape failed: %s", e)
            if once:
                raise
        except Exception as e:
            collector.clear()
            logger.exception("Scrape failed unexpectedly: %s", e)
            if once:
                raise
        elapsed = time.monotonic() - started
        sleep(max(0.0, interval - elapsed))


def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="Redis INFO scraper (Prometheus exporter)")
    p.add_argument("--interval", type=float, default=None, help="seconds between scrapes")
    p.add_argument("--port", type=int, default=None, help="Prometheus HTTP port")
    p.add_argument("--once", action="store_true", help="run a single scrape, print it and exit")
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    settings = get_settings()
    interval = args.interval if args.interval is not None else settings.collection_interval
    port = args.port if args.port is not None else settings.exporter_port

    scraper = RedisScraper.from_settings(settings)
    collector = BatchCollector()
    logger.info("Redis receiver started endpoint=%s interval=%.1fs", settings.endpoint, interval)

    try:
        if args.once:
            batch = run_loop(scraper, collector, interval, once=True)
            print(json.dumps(batch.to_dict(), indent=2, sort_keys=True))
            return
        REGISTRY.register(collector)
        start_http_server(port)
        logger.info("Serving metrics on :%d/metrics", port)
        run_loop(scraper, collector, interval)
    finally:
        scraper.close()


if __name__ == "__main__":
    main()
