import pytest

from src.time_tracker.time_tracker.hr.queue import RateLimitedQueue


def test_items_handled_in_order_with_pause_after_each():
    calls = []
    sleeps = []
    queue = RateLimitedQueue(lambda x: calls.append(x) or x * 2, delay_seconds=2.0, sleep=sleeps.append)
    for i in (1, 2, 3):
        queue.put(i)

    assert len(queue) == 3
    assert queue.drain() == [2, 4, 6]
    assert calls == [1, 2, 3]
    assert sleeps == [2.0, 2.0, 2.0]
    assert len(queue) == 0


def test_zero_delay_never_sleeps():
    sleeps = []
    queue = RateLimitedQueue(lambda x: x, delay_seconds=0, sleep=sleeps.append)
    queue.put("a")
    queue.drain()
    assert sleeps == []


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        RateLimitedQueue(lambda x: x, delay_seconds=-1)
