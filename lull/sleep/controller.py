"""Sleep controller: manual sleep, deep sleep and gradual wake-up per scope."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from lull.core.config import InitiativeConfig
from lull.core.events import EventBus, SleepStateChanged
from lull.core.state import ScopeActivityState, ScopeStateRegistry
from lull.sleep.decay import clamp_unit, consecutive_decay, is_within_active_hours
from lull.utils.clock import Clock, utc_now
from lull.utils.validation import validate_sleep_minutes

logger = logging.getLogger(__name__)


class SleepState(Enum):
    AWAKE = "awake"
    MANUAL_SLEEP = "manual_sleep"
    DEEP_SLEEP = "deep_sleep"
    WAKING_UP = "waking_up"


@dataclass
class SleepStatus:
    """Snapshot of a scope's sleep state for status reporting."""
    state: SleepState
    sleeping_until: Optional[datetime] = None
    deep_sleep_started: Optional[datetime] = None
    wake_up_started: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    last_initiative_action: Optional[datetime] = None
    consecutive_initiatives: int = 0
    messages_since_wake_up: int = 0
    probability_multiplier: float = 0.0


class SleepController:
    """Owns per-scope sleep state and the combined initiative multiplier."""

    def __init__(
        self,
        config: InitiativeConfig,
        registry: ScopeStateRegistry,
        event_bus: Optional[EventBus] = None,
        clock: Clock = utc_now
    ):
        self.config = config
        self.registry = registry
        self.event_bus = event_bus
        self.clock = clock

        self._manual_sleep: Dict[str, datetime] = {}
        self._manual_lock = threading.Lock()
        self._active_hours_tz = self._resolve_timezone(config.timing.active_hours.timezone)

        logger.info(
            f"Sleep controller initialized (deep_sleep={config.deep_sleep.enabled}, "
            f"threshold={config.deep_sleep.inactivity_hours_threshold}h)"
        )

    @staticmethod
    def _resolve_timezone(name: str) -> tzinfo:
        if not name or name.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(name)

    def _publish(self, scope_id: str, old: SleepState, new: SleepState, reason: str) -> None:
        logger.info(f"Scope {scope_id}: {old.value} -> {new.value} ({reason})")
        if self.event_bus:
            self.event_bus.publish_nowait(SleepStateChanged(
                scope_id=scope_id,
                old_state=old.value,
                new_state=new.value,
                reason=reason
            ))

    # === MANUAL SLEEP ===

    def put_to_sleep(self, scope_id: str, minutes: int) -> datetime:
        """
        Suppress initiatives for `minutes` (1..1440).

        Raises:
            InvalidSleepDuration: if minutes is out of range
        """
        validate_sleep_minutes(minutes)

        wake_up_time = self.clock() + timedelta(minutes=minutes)
        with self._manual_lock:
            self._manual_sleep[scope_id] = wake_up_time

        self._publish(
            scope_id, SleepState.AWAKE, SleepState.MANUAL_SLEEP,
            f"manual sleep for {minutes}min until {wake_up_time.isoformat()}"
        )
        return wake_up_time

    def _manual_wake_time(self, scope_id: str) -> Optional[datetime]:
        """Live wake-up time, evicting the entry once it has expired."""
        with self._manual_lock:
            wake_up_time = self._manual_sleep.get(scope_id)
            if wake_up_time is None:
                return None
            if self.clock() < wake_up_time:
                return wake_up_time
            del self._manual_sleep[scope_id]

        logger.debug(f"Sleep expired for scope {scope_id}, automatically woke up")
        return None

    def is_sleeping(self, scope_id: str) -> bool:
        return self._manual_wake_time(scope_id) is not None

    def get_remaining_sleep_time(self, scope_id: str) -> Optional[timedelta]:
        wake_up_time = self._manual_wake_time(scope_id)
        if wake_up_time is None:
            return None
        return wake_up_time - self.clock()

    def get_sleeping_scopes(self) -> Dict[str, datetime]:
        with self._manual_lock:
            scope_ids = list(self._manual_sleep)
        sleeping = {}
        for scope_id in scope_ids:
            wake_up_time = self._manual_wake_time(scope_id)
            if wake_up_time is not None:
                sleeping[scope_id] = wake_up_time
        return sleeping

    def wake_up(self, scope_id: str) -> bool:
        """Clear manual and deep sleep. Returns True if anything changed."""
        with self._manual_lock:
            was_manual = self._manual_sleep.pop(scope_id, None) is not None

        state = self.registry.get_or_create(scope_id)
        was_deep = self.is_in_deep_sleep(scope_id)
        state.is_in_deep_sleep = False
        state.deep_sleep_started = None
        state.messages_since_wake_up.reset()

        if was_deep:
            # Restart the inactivity clock or the next read re-enters deep sleep
            state.last_activity = self.clock()
            state.wake_up_started = None

        if was_manual or was_deep:
            old = SleepState.MANUAL_SLEEP if was_manual else SleepState.DEEP_SLEEP
            self._publish(scope_id, old, SleepState.AWAKE, "woken up manually")
            return True
        return False

    # === DEEP SLEEP ===

    def is_in_deep_sleep(self, scope_id: str) -> bool:
        """Evaluate (and lazily enter) inactivity-triggered deep sleep."""
        deep_sleep = self.config.deep_sleep
        if not deep_sleep.enabled:
            return False

        state = self.registry.get_or_create(scope_id)
        if state.is_in_deep_sleep:
            return True

        # Never auto-sleep a scope we know nothing about
        if state.last_activity is None:
            return False

        now = self.clock()
        threshold = timedelta(hours=deep_sleep.inactivity_hours_threshold)
        if now - state.last_activity < threshold:
            return False

        state.messages_since_wake_up.reset()
        state.deep_sleep_started = now
        state.wake_up_started = None
        state.is_in_deep_sleep = True

        hours = (now - state.last_activity).total_seconds() / 3600
        self._publish(
            scope_id, SleepState.AWAKE, SleepState.DEEP_SLEEP,
            f"{hours:.1f}h without activity"
        )
        return True

    def _in_gradual_wake_up(self, state: ScopeActivityState, now: datetime) -> bool:
        if state.wake_up_started is None:
            return False
        window = timedelta(hours=self.config.deep_sleep.gradual_wake_up_hours)
        return now - state.wake_up_started < window

    # === ACTIVITY BOOKKEEPING ===

    def record_activity(self, scope_id: str) -> None:
        """Register a user-driven event; drives the deep sleep wake transition."""
        # Evaluate before touching last_activity so a long silence is noticed
        in_deep_sleep = self.is_in_deep_sleep(scope_id)

        state = self.registry.get_or_create(scope_id)
        now = self.clock()
        state.last_activity = now
        state.consecutive_initiatives.reset()

        if not in_deep_sleep:
            return

        count = state.messages_since_wake_up.increment()
        threshold = self.config.deep_sleep.wake_up_message_threshold
        logger.debug(f"Scope {scope_id} wake-up progress: {count}/{threshold}")

        if count >= threshold and state.is_in_deep_sleep:
            state.is_in_deep_sleep = False
            state.deep_sleep_started = None
            state.wake_up_started = now
            self._publish(
                scope_id, SleepState.DEEP_SLEEP, SleepState.WAKING_UP,
                f"{count} messages since deep sleep"
            )

    def record_initiative_action(self, scope_id: str) -> None:
        """Register a successful proactive action."""
        state = self.registry.get_or_create(scope_id)
        state.last_initiative_action = self.clock()
        count = state.consecutive_initiatives.increment()
        logger.debug(f"Scope {scope_id} consecutive initiatives: {count}")

    def get_consecutive_initiatives(self, scope_id: str) -> int:
        return self.registry.get_or_create(scope_id).consecutive_initiatives.value

    # === PROBABILITY ===

    def get_initiative_probability_multiplier(self, scope_id: str) -> float:
        """Combined gate factor in [0, 1]; 0 means stay quiet."""
        if self.is_sleeping(scope_id):
            return 0.0

        if self.is_in_deep_sleep(scope_id):
            return 0.0

        state = self.registry.get_or_create(scope_id)
        now = self.clock()
        factor = 1.0

        if self._in_gradual_wake_up(state, now):
            factor *= self.config.deep_sleep.wake_up_probability_multiplier

        engagement = self.config.engagement
        factor *= consecutive_decay(
            state.consecutive_initiatives.value,
            engagement.consecutive_reduction_factor,
            engagement.max_consecutive_initiatives
        )

        last_action = state.last_initiative_action
        min_spacing = timedelta(minutes=self.config.timing.min_minutes_between_initiatives)
        if last_action is not None and now - last_action < min_spacing:
            return 0.0

        active_hours = self.config.timing.active_hours
        if active_hours.enabled:
            hour = now.astimezone(self._active_hours_tz).hour
            if not is_within_active_hours(hour, active_hours.start_hour, active_hours.end_hour):
                factor *= active_hours.inactive_hours_multiplier

        return clamp_unit(factor)

    def get_sleep_state(self, scope_id: str) -> SleepState:
        if self.is_sleeping(scope_id):
            return SleepState.MANUAL_SLEEP
        if self.is_in_deep_sleep(scope_id):
            return SleepState.DEEP_SLEEP
        state = self.registry.get_or_create(scope_id)
        if self._in_gradual_wake_up(state, self.clock()):
            return SleepState.WAKING_UP
        return SleepState.AWAKE

    def get_sleep_status(self, scope_id: str) -> SleepStatus:
        state = self.registry.get_or_create(scope_id)
        return SleepStatus(
            state=self.get_sleep_state(scope_id),
            sleeping_until=self._manual_wake_time(scope_id),
            deep_sleep_started=state.deep_sleep_started,
            wake_up_started=state.wake_up_started,
            last_activity=state.last_activity,
            last_initiative_action=state.last_initiative_action,
            consecutive_initiatives=state.consecutive_initiatives.value,
            messages_since_wake_up=state.messages_since_wake_up.value,
            probability_multiplier=self.get_initiative_probability_multiplier(scope_id),
        )
