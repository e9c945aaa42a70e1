"""Thread-safe integer counter shared between worker threads."""

import threading


class AtomicCounter:
    """
    Integer counter with atomic increment-and-fetch.

    Chunk identifiers are allocated from one instance shared by every
    worker of a run; identifiers are therefore unique and strictly
    increasing in allocation order.
    """

    def __init__(self, initial: int = 0):
        """
        Initialize counter.

        Args:
            initial: Value held before the first increment
        """
        self._value = initial
        self._lock = threading.Lock()

    def increment_and_fetch(self, delta: int = 1) -> int:
        """
        Add delta and return the new value as one atomic step.

        Args:
            delta: Amount to add

        Returns:
            Value after the increment
        """
        with self._lock:
            self._value += delta
            return self._value

    def load(self) -> int:
        with self._lock:
            return self._value

    def store(self, value: int) -> None:
        with self._lock:
            self._value = value
