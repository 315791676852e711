"""Fixed-capacity ring buffer of 16-bit samples with a running sum."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

_INT16_MIN = -32768
_INT16_MAX = 32767


class CircularBuffer:
    """Keeps the most recent ``capacity`` samples and their integer average."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._values: deque[int] = deque(maxlen=capacity)
        self._sum = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, value: int) -> None:
        """Append a sample, dropping the oldest one when full."""
        if not _INT16_MIN <= value <= _INT16_MAX:
            raise ValueError(f"sample {value} is outside the 16-bit signed range")
        if len(self._values) == self._capacity:
            self._sum -= self._values[0]
        self._values.append(value)
        self._sum += value

    def average(self) -> int:
        """Integer mean of the stored samples, truncated toward zero; 0 when empty."""
        count = len(self._values)
        if count == 0:
            return 0
        quotient = abs(self._sum) // count
        return quotient if self._sum >= 0 else -quotient

    def get(self, index: int) -> int:
        """Sample at ``index`` counting from the oldest; 0 when out of range."""
        if 0 <= index < len(self._values):
            return self._values[index]
        return 0

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._values))

    def clear(self) -> None:
        self._values.clear()
        self._sum = 0