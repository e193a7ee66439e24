import threading

import pytest

from greplay.ring import RingEmpty, RingFull, SpscRing


def test_push_pop_is_fifo():
    ring = SpscRing(8)
    for item in ["a", "b", "c"]:
        ring.push(item)
    assert len(ring) == 3
    assert [ring.pop(), ring.pop(), ring.pop()] == ["a", "b", "c"]
    assert len(ring) == 0


def test_pop_empty_raises():
    ring = SpscRing(4)
    with pytest.raises(RingEmpty):
        ring.pop()


def test_capacity_is_size_minus_two():
    ring = SpscRing(6)
    pushed = 0
    with pytest.raises(RingFull):
        while True:
            ring.push(pushed)
            pushed += 1
    assert pushed == 6 - 2
    assert len(ring) == pushed


def test_invalid_size():
    with pytest.raises(ValueError):
        SpscRing(0)


def test_push_burst_returns_remaining():
    ring = SpscRing(5)
    items = list(range(10))
    remaining = ring.push_burst(items)
    assert remaining + len(ring) == len(items)
    popped = ring.pop_burst(100)
    assert popped == items[: len(popped)]
    assert len(popped) == len(items) - remaining


def test_push_burst_on_full_ring_raises():
    ring = SpscRing(4)
    ring.push(1)
    ring.push(2)
    with pytest.raises(RingFull):
        ring.push_burst([3])


def test_pop_burst_limit():
    ring = SpscRing(10)
    ring.push_burst(["x", "y", "z", "w"])
    first = ring.pop_burst(2)
    assert first == ["x", "y"]
    assert ring.pop_burst(10) == ["z", "w"]
    assert ring.pop_burst(10) == []


def test_pop_burst_stops_at_wrap():
    ring = SpscRing(5)
    for item in range(3):
        ring.push(item)
    for _ in range(3):
        ring.pop()
    ring.push("p")
    ring.push("q")
    ring.push("r")
    first = ring.pop_burst(10)
    second = ring.pop_burst(10)
    assert first == ["p", "q"]
    assert first + second == ["p", "q", "r"]
    assert len(ring) == 0


def test_producer_consumer_threads():
    ring = SpscRing(16)
    total = 2000
    received = []

    def producer():
        for item in range(total):
            while True:
                try:
                    ring.push(item)
                    break
                except RingFull:
                    ring.wait_for_popping()

    def consumer():
        while len(received) < total:
            batch = ring.pop_burst(8)
            if batch:
                received.extend(batch)
            else:
                ring.wait_for_pushing()

    threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    assert received == list(range(total))
    assert len(ring) == 0
    assert ring.pop_burst(8) == []