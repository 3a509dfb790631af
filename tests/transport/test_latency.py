"""Latency tracker tests."""

from __future__ import annotations

import threading

from DataLakeStore.transport.latency import (
    LatencyTracker,
    NullTelemetrySink,
    TelemetrySink,
)


def test_latency_record_layout():
    tracker = LatencyTracker()

    tracker.add_latency("abc.0", 0, 12, "OPEN", 4096, "client-1")

    assert tracker.get() == "abc.0,0,12,,,OPEN,4096,client-1"


def test_error_record_layout():
    tracker = LatencyTracker()

    tracker.add_error("abc.1", 1, 30, "HTTP503(None)", "APPEND", 10, "client-1")

    assert tracker.get() == "abc.1,1,30,HTTP503(None),,APPEND,10,client-1"


def test_get_returns_none_when_empty():
    assert LatencyTracker().get() is None


def test_get_batches_at_most_three_records_in_order():
    tracker = LatencyTracker()
    for attempt in range(5):
        tracker.add_latency(f"c.{attempt}", attempt, 1, "OPEN", 0, "x")

    first = tracker.get()
    second = tracker.get()

    assert [r.split(",")[0] for r in first.split(";")] == ["c.0", "c.1", "c.2"]
    assert [r.split(",")[0] for r in second.split(";")] == ["c.3", "c.4"]
    assert tracker.get() is None


def test_full_queue_drops_newest():
    tracker = LatencyTracker(max_queue_size=2)
    tracker.add_latency("a.0", 0, 1, "OPEN", 0, "x")
    tracker.add_latency("b.0", 0, 1, "OPEN", 0, "x")
    tracker.add_latency("c.0", 0, 1, "OPEN", 0, "x")

    assert len(tracker) == 2
    assert "c.0" not in tracker.get()


def test_disable_clears_and_stops_recording():
    tracker = LatencyTracker()
    tracker.add_latency("a.0", 0, 1, "OPEN", 0, "x")

    tracker.disable()
    tracker.add_latency("b.0", 0, 1, "OPEN", 0, "x")

    assert not tracker.enabled
    assert len(tracker) == 0
    assert tracker.get() is None

    tracker.enable()
    tracker.add_latency("c.0", 0, 1, "OPEN", 0, "x")
    assert tracker.get().startswith("c.0,")


def test_disabled_from_construction():
    tracker = LatencyTracker(enabled=False)
    tracker.add_error("a.0", 0, 1, "ConnectError", "OPEN", 0, "x")

    assert tracker.get() is None


def test_concurrent_producers_lose_nothing_under_capacity():
    tracker = LatencyTracker(max_queue_size=1000)

    def produce(prefix: str) -> None:
        for attempt in range(100):
            tracker.add_latency(f"{prefix}.{attempt}", attempt, 1, "OPEN", 0, "x")

    threads = [threading.Thread(target=produce, args=(f"t{i}",)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(tracker) == 400


def test_sinks_satisfy_protocol():
    assert isinstance(LatencyTracker(), TelemetrySink)
    assert isinstance(NullTelemetrySink(), TelemetrySink)
    assert NullTelemetrySink().get() is None
