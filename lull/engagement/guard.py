"""At-most-one in-flight engagement per scope."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Set

logger = logging.getLogger(__name__)


class ScopeGuard:
    """Non-blocking per-scope try-acquire."""

    def __init__(self):
        self._busy: Set[str] = set()
        self._lock = threading.Lock()

    def try_acquire(self, scope_id: str) -> bool:
        with self._lock:
            if scope_id in self._busy:
                return False
            self._busy.add(scope_id)
            return True

    def release(self, scope_id: str) -> None:
        with self._lock:
            self._busy.discard(scope_id)

    def is_busy(self, scope_id: str) -> bool:
        with self._lock:
            return scope_id in self._busy

    @contextmanager
    def hold(self, scope_id: str) -> Iterator[bool]:
        """Yield True if acquired, False if the scope is already busy."""
        acquired = self.try_acquire(scope_id)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(scope_id)
