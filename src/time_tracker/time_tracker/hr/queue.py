from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Generic, List, TypeVar

from ..core.constants import DEFAULT_EMAIL_SEND_DELAY_SECONDS

T = TypeVar("T")
R = TypeVar("R")


class RateLimitedQueue(Generic[T, R]):
    """FIFO with a single worker and a fixed pause after every task.

    ``sleep`` is injectable so the throttling can be observed in tests.
    """

    def __init__(
        self,
        handler: Callable[[T], R],
        *,
        delay_seconds: float = DEFAULT_EMAIL_SEND_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._handler = handler
        self._delay = float(delay_seconds)
        self._sleep = sleep
        self._items: Deque[T] = deque()

    def put(self, item: T) -> None:
        self._items.append(item)

    def __len__(self) -> int:
        return len(self._items)

    def drain(self) -> List[R]:
        results: List[R] = []
        while self._items:
            item = self._items.popleft()
            results.append(self._handler(item))
            if self._delay:
                self._sleep(self._delay)
        return results
