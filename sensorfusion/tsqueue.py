"""A blocking FIFO queue that can be shut down to release waiting consumers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, Optional, TypeVar

T = TypeVar("T")


class QueueShutdown(Exception):
    """Raised by :meth:`ThreadSafeQueue.pop` once the queue is shut down and drained."""


class ThreadSafeQueue(Generic[T]):
    """FIFO queue safe for use from several threads."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._cond = threading.Condition()
        self._shutdown = False

    def push(self, item: T) -> None:
        with self._cond:
            self._items.append(item)
            self._cond.notify()

    def pop(self) -> T:
        """Block until an item is available and return it.

        Raises QueueShutdown when the queue has been shut down and is empty.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._items or self._shutdown)
            if not self._items:
                raise QueueShutdown("queue is shut down")
            return self._items.popleft()

    def try_pop(self) -> Optional[T]:
        """Return the next item without blocking, or None if the queue is empty."""
        with self._cond:
            if not self._items:
                return None
            return self._items.popleft()

    def empty(self) -> bool:
        with self._cond:
            return not self._items

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def shutdown(self) -> None:
        """Wake every waiting consumer; later pops on an empty queue raise."""
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()