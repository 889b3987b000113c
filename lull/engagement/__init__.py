"""Engagement module for proactive, activity-aware participation.

This module decides when the bot speaks up on its own in a scope:
- Mention detection forces an immediate answer
- Ambient engagement is drawn from activity, mention boost and sleep gates
- Generation and delivery are retried a fixed number of times
- Each scope runs its own loop whose interval follows conversation tempo

Usage:
    from lull.engagement import create_engagement_engine

    scheduler, engine = create_engagement_engine(
        config, toggles, tracker, sleep_controller,
        generation, platform, event_bus
    )

    await engine.start()  # Loops register themselves on first message
    ...
    await engine.stop()
"""

from lull.engagement.actions import select_action
from lull.engagement.engine import (
    EngagementEngine,
    ScopeEngagementJob,
    interval_for_activity,
)
from lull.engagement.guard import ScopeGuard
from lull.engagement.mentions import MentionDetector
from lull.engagement.scheduler import EngagementScheduler
from lull.engagement.targeting import select_target_channel

__all__ = [
    "EngagementEngine",
    "EngagementScheduler",
    "MentionDetector",
    "ScopeEngagementJob",
    "ScopeGuard",
    "interval_for_activity",
    "select_action",
    "select_target_channel",
]


def create_engagement_engine(
    config,
    toggles,
    context,
    sleep_controller,
    generation,
    platform,
    event_bus=None
):
    """Factory function to wire a scheduler and its per-scope engine.

    Args:
        config: SystemConfig (uses initiative, activity, scheduler, persona)
        toggles: IFeatureToggles implementation
        context: IContextProvider (normally the ActivityTracker)
        sleep_controller: SleepController
        generation: IGenerationProvider
        platform: IPlatformResolver
        event_bus: Optional EventBus for outcome events and scope registration

    Returns:
        (EngagementScheduler, EngagementEngine) with the engine not started
    """
    mentions = MentionDetector(config.persona.name, lookback=config.activity.mention_lookback)
    scheduler = EngagementScheduler(
        config.initiative,
        toggles,
        context,
        sleep_controller,
        generation,
        platform,
        mentions,
        feature_name=config.scheduler.feature_toggle,
        event_bus=event_bus
    )
    engine = EngagementEngine(config.scheduler, scheduler, event_bus)
    return scheduler, engine
