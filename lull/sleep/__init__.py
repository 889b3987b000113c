"""Sleep and wake management for proactive engagement.

Each scope moves between four states:
- AWAKE: initiatives allowed, shaped by decay, spacing and active hours
- MANUAL_SLEEP: operator asked for quiet (1 minute to 24 hours, self-expiring)
- DEEP_SLEEP: entered lazily after prolonged inactivity
- WAKING_UP: after enough messages end a deep sleep, initiatives are damped
  for a few hours before full behaviour returns

Concept:
Like someone who dozes off when the room goes quiet, the bot stops talking
to an empty server and needs a little conversation before it joins in again.

Usage:
    from lull.sleep import SleepController
    from lull.core.config import InitiativeConfig
    from lull.core.state import ScopeStateRegistry

    controller = SleepController(InitiativeConfig(), ScopeStateRegistry())
    controller.put_to_sleep("1234", minutes=30)
    controller.get_initiative_probability_multiplier("1234")  # 0.0
"""

from lull.sleep.controller import SleepController, SleepState, SleepStatus
from lull.sleep.decay import (
    OVER_LIMIT_PENALTY,
    clamp_unit,
    consecutive_decay,
    is_within_active_hours,
)

__all__ = [
    "SleepController",
    "SleepState",
    "SleepStatus",
    "OVER_LIMIT_PENALTY",
    "clamp_unit",
    "consecutive_decay",
    "is_within_active_hours",
]


def create_sleep_controller(
    config,
    registry,
    event_bus=None
) -> SleepController:
    """Factory function to create a configured sleep controller.

    Args:
        config: InitiativeConfig with deep sleep and timing settings
        registry: ScopeStateRegistry shared with the activity tracker
        event_bus: Optional EventBus for SleepStateChanged notifications

    Returns:
        Configured SleepController
    """
    return SleepController(config, registry, event_bus)
