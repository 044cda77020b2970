import threading

import pytest

from sensorfusion.tsqueue import QueueShutdown, ThreadSafeQueue


def test_fifo_order():
    q = ThreadSafeQueue()
    for item in ("a", "b", "c"):
        q.push(item)
    assert [q.pop(), q.pop(), q.pop()] == ["a", "b", "c"]


def test_len_and_empty():
    q = ThreadSafeQueue()
    assert q.empty()
    assert len(q) == 0
    q.push(1)
    q.push(2)
    assert not q.empty()
    assert len(q) == 2
    q.pop()
    assert len(q) == 1


def test_try_pop_empty_returns_none():
    q = ThreadSafeQueue()
    assert q.try_pop() is None


def test_try_pop_returns_front():
    q = ThreadSafeQueue()
    q.push(10)
    q.push(20)
    assert q.try_pop() == 10
    assert len(q) == 1


def test_pop_after_shutdown_on_empty_raises():
    q = ThreadSafeQueue()
    q.shutdown()
    with pytest.raises(QueueShutdown):
        q.pop()


def test_shutdown_drains_remaining_items_first():
    q = ThreadSafeQueue()
    q.push("x")
    q.push("y")
    q.shutdown()
    assert q.pop() == "x"
    assert q.pop() == "y"
    with pytest.raises(QueueShutdown):
        q.pop()


def test_blocked_pop_woken_by_push():
    q = ThreadSafeQueue()
    results = []
    consumer = threading.Thread(target=lambda: results.append(q.pop()))
    consumer.start()
    q.push("item")
    consumer.join(timeout=5)
    assert not consumer.is_alive()
    assert results == ["item"]


def test_blocked_pop_woken_by_shutdown():
    q = ThreadSafeQueue()
    q.push("item")
    outcome = []
    lock = threading.Lock()

    def consume():
        try:
            value = q.pop()
        except QueueShutdown:
            value = "shutdown"
        with lock:
            outcome.append(value)

    consumers = [threading.Thread(target=consume) for _ in range(3)]
    for t in consumers:
        t.start()
    q.shutdown()
    for t in consumers:
        t.join(timeout=5)
    assert all(not t.is_alive() for t in consumers)
    assert sorted(outcome) == ["item", "shutdown", "shutdown"]
    assert q.try_pop() is None


def test_concurrent_producers_lose_nothing():
    q = ThreadSafeQueue()

    def produce(base):
        for i in range(100):
            q.push(base + i)

    producers = [threading.Thread(target=produce, args=(k * 1000,)) for k in range(4)]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    assert len(q) == 400
    drained = [q.try_pop() for _ in range(400)]
    assert sorted(drained) == sorted(k * 1000 + i for k in range(4) for i in range(100))
    assert q.empty()