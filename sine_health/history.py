"""Bounded rolling history of heart rate readings."""

from collections import deque
from collections.abc import Iterator

DEFAULT_CAPACITY = 30


class HeartRateHistory:
    """Fixed-capacity FIFO of BPM values, oldest first.

    Not safe for concurrent use from multiple threads; callers feed it from a
    single event loop.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._values: deque[int] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of values kept."""
        return self._capacity

    @property
    def latest(self) -> int | None:
        """Newest value, or None when empty."""
        return self._values[-1] if self._values else None

    def append(self, value: int) -> None:
        """Add a value, evicting the oldest once capacity is reached."""
        self._values.append(value)

    def reset(self) -> None:
        """Remove all values."""
        self._values.clear()

    def snapshot(self) -> tuple[int, ...]:
        """Return an immutable oldest-first copy of the history."""
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"HeartRateHistory(capacity={self.capacity}, values={list(self._values)})"
