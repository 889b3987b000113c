"""Per-scope scheduler state shared by the activity tracker and sleep controller."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, Optional, Tuple

from lull.core.atomic import AtomicCounter, AtomicValue

logger = logging.getLogger(__name__)


@dataclass
class ScopeActivityState:
    """Everything the scheduler knows about one scope.

    Fields are read and written independently; counters are atomic cells so
    concurrent ticks and message handlers never lose an update.
    """
    scope_id: str
    last_activity: Optional[datetime] = None
    last_initiative_action: Optional[datetime] = None
    is_in_deep_sleep: bool = False
    deep_sleep_started: Optional[datetime] = None
    wake_up_started: Optional[datetime] = None
    consecutive_initiatives: AtomicCounter = field(default_factory=AtomicCounter)
    messages_since_wake_up: AtomicCounter = field(default_factory=AtomicCounter)
    engagement_multiplier: AtomicValue = field(default_factory=lambda: AtomicValue(1.0))


class ScopeStateRegistry:
    """Get-or-create map of scope id -> ScopeActivityState.

    The map lock only guards insertion; records are mutated outside it.
    """

    def __init__(self):
        self._states: Dict[str, ScopeActivityState] = {}
        self._lock = threading.Lock()

    def get_or_create(self, scope_id: str) -> ScopeActivityState:
        state = self._states.get(scope_id)
        if state is not None:
            return state

        with self._lock:
            state = self._states.get(scope_id)
            if state is None:
                state = ScopeActivityState(scope_id=scope_id)
                self._states[scope_id] = state
                logger.debug(f"Created activity state for scope {scope_id}")
            return state

    def get(self, scope_id: str) -> Optional[ScopeActivityState]:
        return self._states.get(scope_id)

    def items(self) -> Iterator[Tuple[str, ScopeActivityState]]:
        return iter(list(self._states.items()))

    def __contains__(self, scope_id: str) -> bool:
        return scope_id in self._states

    def __len__(self) -> int:
        return len(self._states)
