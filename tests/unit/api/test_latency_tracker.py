"""
Tests for the request latency tracker.
"""

from haystackfi.api.middleware.timing import LatencyTracker


def test_empty_tracker_reports_zeros():
    stats = LatencyTracker().get_stats()

    assert stats == {
        "count": 0,
        "p50": 0.0,
        "p95": 0.0,
        "p99": 0.0,
        "mean": 0.0,
        "min": 0.0,
        "max": 0.0,
    }


def test_nearest_rank_percentiles():
    tracker = LatencyTracker()
    for ms in range(1, 101):
        tracker.record(float(ms))

    stats = tracker.get_stats()

    assert stats["p50"] == 50.0
    assert stats["p95"] == 95.0
    assert stats["p99"] == 99.0
    assert stats["mean"] == 50.5
    assert (stats["min"], stats["max"]) == (1.0, 100.0)


def test_window_drops_oldest_but_counters_keep_everything():
    tracker = LatencyTracker(window_size=2)
    tracker.record(500.0, 200, "/vendor/search")
    tracker.record(10.0, 404, "/vendor/9")
    tracker.record(20.0, 401, "/auth/profile")

    assert tracker.get_stats()["max"] == 20.0
    assert tracker.get_status_counts() == {"2xx": 1, "4xx": 2}
    assert tracker.get_area_counts() == {"vendor": 2, "auth": 1}


def test_root_path_and_reset():
    tracker = LatencyTracker()
    tracker.record(1.0, 200, "/")

    assert tracker.get_area_counts() == {"root": 1}

    tracker.reset()
    assert tracker.get_stats()["count"] == 0
    assert tracker.get_area_counts() == {}
