"""Scraper package.

Modules:
- recorders: fixed INFO field -> typed recorder table
- keyspace: per-database keyspace lines
- latency_stats: per-command latency percentiles
- scraper: RedisScraper (one cycle per scrape())
"""

from .scraper import RedisScraper

__all__ = ["RedisScraper"]
