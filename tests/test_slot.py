"""Tests for the latest-value handoff slot."""

import threading

from pico_cam.utils.slot import LatestSlot


class TestLatestSlot:
    def test_empty(self):
        slot = LatestSlot()
        assert slot.take() is None
        assert slot.counters() == (0, 0)

    def test_put_take(self):
        slot = LatestSlot()
        slot.put("a")
        assert slot.take() == "a"
        assert slot.take() is None

    def test_last_writer_wins(self):
        slot = LatestSlot()
        slot.put(1)
        slot.put(2)
        slot.put(3)
        assert slot.take() == 3
        assert slot.counters() == (3, 2)

    def test_taken_values_are_not_dropped(self):
        slot = LatestSlot()
        slot.put("x")
        assert slot.take() == "x"
        slot.put("y")
        assert slot.counters() == (2, 0)

    def test_producer_thread(self):
        slot = LatestSlot()

        def produce():
            for i in range(1000):
                slot.put(i)

        thread = threading.Thread(target=produce)
        thread.start()
        thread.join()
        assert slot.take() == 999
        assert slot.counters()[0] == 1000

    def test_counters_consistent_while_producing(self):
        slot = LatestSlot()
        stop = threading.Event()
        snapshots = []

        def produce():
            i = 0
            while not stop.is_set():
                slot.put(i)
                i += 1

        thread = threading.Thread(target=produce)
        thread.start()
        try:
            for _ in range(500):
                slot.take()
                snapshots.append(slot.counters())
        finally:
            stop.set()
            thread.join()
        for published, dropped in snapshots:
            assert 0 <= dropped <= published
        assert [p for p, _ in snapshots] == sorted(p for p, _ in snapshots)
