"""Tests for the in-memory aggregator and Snapshot."""

import threading

import pytest

from sagittarius.agent.stats import Snapshot, StatsAggregator
from sagittarius.classifier import event_type


def _category_sum(events, category):
    return sum(count for name, count in events.items() if event_type(name) == category)


class TestStatsAggregator:

    def test_record_updates_identifier_and_total(self):
        stats = StatsAggregator()
        stats.record("KEY_A")
        stats.record("KEY_A")
        stats.record("CLICK_LEFT")
        stats.record("WHEEL_VERTICAL", 4)

        snap = stats.snapshot()
        assert snap.total_keys == 2
        assert snap.total_clicks == 1
        assert snap.total_wheels == 4
        assert dict(snap.events) == {"KEY_A": 2, "CLICK_LEFT": 1, "WHEEL_VERTICAL": 4}

    def test_other_category_counts_only_per_identifier(self):
        stats = StatsAggregator()
        stats.record("UNKNOWN_233")
        snap = stats.snapshot()
        assert snap.events["UNKNOWN_233"] == 1
        assert (snap.total_keys, snap.total_clicks, snap.total_wheels) == (0, 0, 0)
        assert not snap.is_empty

    def test_totals_match_identifier_sums(self):
        stats = StatsAggregator()
        for name, delta in [("KEY_A", 1), ("KEY_B", 3), ("CLICK_RIGHT", 2),
                            ("WHEEL_HORIZONTAL", 5), ("WHEEL_VERTICAL", 1), ("BTN_SIDE", 7)]:
            stats.record(name, delta)
        snap = stats.snapshot()
        assert snap.total_keys == _category_sum(snap.events, "KEY")
        assert snap.total_clicks == _category_sum(snap.events, "CLICK")
        assert snap.total_wheels == _category_sum(snap.events, "WHEEL")

    def test_zero_delta_is_ignored(self):
        stats = StatsAggregator()
        stats.record("WHEEL_VERTICAL", 0)
        assert stats.snapshot().is_empty

    def test_negative_delta_rejected(self):
        with pytest.raises(ValueError):
            StatsAggregator().record("KEY_A", -1)

    def test_snapshot_is_detached_and_read_only(self):
        stats = StatsAggregator()
        stats.record("KEY_A")
        snap = stats.snapshot()
        stats.record("KEY_A")

        assert snap.events["KEY_A"] == 1
        with pytest.raises(TypeError):
            snap.events["KEY_A"] = 5

    def test_reset(self):
        stats = StatsAggregator()
        stats.record("KEY_A", 3)
        stats.reset()
        assert stats.snapshot() == Snapshot()

    def test_restore_rederives_totals(self):
        spooled = Snapshot(total_keys=99, events={"KEY_A": 3, "CLICK_LEFT": 2})
        stats = StatsAggregator()
        stats.record("KEY_A")
        stats.restore(spooled)

        snap = stats.snapshot()
        assert dict(snap.events) == {"KEY_A": 4, "CLICK_LEFT": 2}
        assert snap.total_keys == 4
        assert snap.total_clicks == 2

    def test_concurrent_records_are_not_lost(self):
        stats = StatsAggregator()

        def worker():
            for _ in range(1000):
                stats.record("KEY_A")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snap = stats.snapshot()
        assert snap.events["KEY_A"] == 4000
        assert snap.total_keys == 4000


class TestSnapshot:

    def test_to_dict_wire_shape(self):
        snap = Snapshot(total_keys=3, total_clicks=2, events={"KEY_A": 3, "CLICK_LEFT": 2})
        assert snap.to_dict() == {
            "total_keys": 3,
            "total_clicks": 2,
            "total_wheels": 0,
            "events": {"KEY_A": 3, "CLICK_LEFT": 2},
        }

    def test_from_dict(self):
        data = {"total_keys": 1, "total_clicks": 0, "total_wheels": 2,
                "events": {"KEY_Q": 1, "WHEEL_VERTICAL": 2}}
        assert Snapshot.from_dict(data).to_dict() == data

    @pytest.mark.parametrize("data", [
        [],
        {"total_keys": 1, "total_clicks": 0, "total_wheels": 0},
        {"total_keys": -1, "total_clicks": 0, "total_wheels": 0, "events": {}},
        {"total_keys": "1", "total_clicks": 0, "total_wheels": 0, "events": {}},
        {"total_keys": True, "total_clicks": 0, "total_wheels": 0, "events": {}},
        {"total_keys": 0, "total_clicks": 0, "total_wheels": 0, "events": {"KEY_A": 1.5}},
        {"total_keys": 0, "total_clicks": 0, "total_wheels": 0, "events": {"": 1}},
    ])
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            Snapshot.from_dict(data)

    def test_empty(self):
        assert Snapshot().is_empty
        assert not Snapshot(events={"KEY_A": 1}).is_empty
