"""Small thread-safe value cells for per-scope counters."""

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar('T')


class AtomicValue(Generic[T]):
    """A value whose reads and read-modify-write updates are atomic."""

    def __init__(self, value: T):
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def exchange(self, value: T) -> T:
        """Store value and return the previous one."""
        with self._lock:
            previous, self._value = self._value, value
            return previous

    def compare_exchange(self, expected: T, value: T) -> bool:
        """Store value only if the current value equals expected."""
        with self._lock:
            if self._value != expected:
                return False
            self._value = value
            return True

    def update(self, func: Callable[[T], T]) -> T:
        """Apply func to the current value and return the result."""
        with self._lock:
            self._value = func(self._value)
            return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class AtomicCounter(AtomicValue[int]):
    """Integer counter with atomic increment and reset."""

    def __init__(self, value: int = 0):
        super().__init__(value)

    def increment(self, amount: int = 1) -> int:
        """Add amount and return the new value."""
        return self.update(lambda current: current + amount)

    def reset(self) -> int:
        """Set to zero and return the previous value."""
        return self.exchange(0)
