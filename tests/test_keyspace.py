"""Tests for keyspace parsing and the bounded database scan."""

import logging

import pytest

from redis_receiver.errors import InfoParseError
from redis_receiver.scraper.keyspace import (
    REDIS_MAX_DBS,
    KeyspaceRecord,
    parse_keyspace_string,
    record_keyspace_metrics,
)


# =============================================================================
# PARSER
# =============================================================================

class TestParseKeyspaceString:

    def test_well_formed(self):
        assert parse_keyspace_string(0, "keys=1,expires=2,avg_ttl=3") == KeyspaceRecord(
            db=0, keys=1, expires=2, avg_ttl=3
        )

    def test_extra_pairs_ignored(self):
        record = parse_keyspace_string(3, "keys=5,expires=1,avg_ttl=10,subexpiry=0")

        assert (record.db, record.keys, record.expires, record.avg_ttl) == (3, 5, 1, 10)

    @pytest.mark.parametrize("text", [
        "",
        "keys=1,expires=2",
        "keys=1,expires=two,avg_ttl=3",
        "keys:1,expires:2,avg_ttl:3",
        "keys=1.5,expires=2,avg_ttl=3",
        "keys=1_000,expires=2,avg_ttl=3",
        "keys= 1,expires=2,avg_ttl=3",
        "keys=١,expires=2,avg_ttl=3",
    ])
    def test_malformed(self, text):
        with pytest.raises(InfoParseError) as exc:
            parse_keyspace_string(4, text)
        assert exc.value.key == "db4"


# =============================================================================
# SCAN
# =============================================================================

class TestRecordKeyspaceMetrics:

    def test_three_points_per_database(self, all_enabled_builder):
        info = {
            "db0": "keys=1,expires=2,avg_ttl=3",
            "db1": "keys=4,expires=0,avg_ttl=0",
        }

        recorded = record_keyspace_metrics(50.0, info, all_enabled_builder)
        batch = all_enabled_builder.emit()

        assert recorded == 2
        assert batch.data_point_count() == 6
        keys = {p.attributes["db"]: p.value for p in batch.points("redis.db.keys")}
        assert keys == {"0": 1, "1": 4}
        ttl = {p.attributes["db"]: p.value for p in batch.points("redis.db.avg_ttl")}
        assert ttl == {"0": 3, "1": 0}

    def test_points_share_timestamp(self, all_enabled_builder):
        record_keyspace_metrics(50.0, {"db0": "keys=1,expires=2,avg_ttl=3"}, all_enabled_builder)
        batch = all_enabled_builder.emit()

        assert {p.timestamp for m in batch.metrics.values() for p in m.data_points} == {50.0}

    def test_scan_stops_at_first_gap(self, all_enabled_builder):
        """Non-contiguous databases after a gap are not reported (db7 is never reached)."""
        info = {
            "db0": "keys=1,expires=0,avg_ttl=0",
            "db1": "keys=1,expires=0,avg_ttl=0",
            "db7": "keys=9,expires=9,avg_ttl=9",
        }

        recorded = record_keyspace_metrics(50.0, info, all_enabled_builder)
        batch = all_enabled_builder.emit()

        assert recorded == 2
        assert batch.data_point_count() == 6
        assert "7" not in {p.attributes["db"] for p in batch.points("redis.db.keys")}

    def test_no_db0_records_nothing(self, all_enabled_builder):
        assert record_keyspace_metrics(50.0, {"db5": "keys=1,expires=0,avg_ttl=0"}, all_enabled_builder) == 0
        assert all_enabled_builder.emit().data_point_count() == 0

    def test_malformed_slot_skipped_scan_continues(self, all_enabled_builder, caplog):
        info = {
            "db0": "keys=1,expires=0,avg_ttl=0",
            "db1": "broken",
            "db2": "keys=3,expires=0,avg_ttl=0",
        }

        with caplog.at_level(logging.WARNING):
            recorded = record_keyspace_metrics(50.0, info, all_enabled_builder)

        batch = all_enabled_builder.emit()
        assert recorded == 2
        assert {p.attributes["db"] for p in batch.points("redis.db.keys")} == {"0", "2"}
        assert "db1" in caplog.text

    def test_scan_is_bounded(self, all_enabled_builder):
        info = {f"db{i}": "keys=1,expires=0,avg_ttl=0" for i in range(REDIS_MAX_DBS + 4)}

        assert record_keyspace_metrics(50.0, info, all_enabled_builder) == REDIS_MAX_DBS
