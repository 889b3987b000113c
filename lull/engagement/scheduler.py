"""Engagement scheduler: decides whether to act for a scope and executes the action."""

import asyncio
import logging
import random
from typing import Callable, Optional, Tuple

from lull.core.config import InitiativeConfig
from lull.core.events import EventBus, InitiativeExecuted, InitiativeFailed
from lull.core.interfaces import (
    EngagementAction,
    IChannel,
    IContextProvider,
    IFeatureToggles,
    IGenerationProvider,
    IPlatformResolver,
)
from lull.engagement.actions import select_action
from lull.engagement.guard import ScopeGuard
from lull.engagement.mentions import MentionDetector
from lull.engagement.targeting import select_target_channel
from lull.sleep.controller import SleepController

logger = logging.getLogger(__name__)

FrequencyCallback = Callable[[float], None]


class EngagementScheduler:
    """Runs one engagement decision for a scope per invocation."""

    MAX_ATTEMPTS = 3
    NO_CONTEXT_SIGNAL = 0.1

    def __init__(
        self,
        config: InitiativeConfig,
        toggles: IFeatureToggles,
        context: IContextProvider,
        sleep: SleepController,
        generation: IGenerationProvider,
        platform: IPlatformResolver,
        mentions: MentionDetector,
        feature_name: str = "EnableLiveJob",
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config
        self.toggles = toggles
        self.context = context
        self.sleep = sleep
        self.generation = generation
        self.platform = platform
        self.mentions = mentions
        self.feature_name = feature_name
        self.event_bus = event_bus
        self.rng = rng or random.Random()
        self.guard = ScopeGuard()

        logger.info(f"Engagement scheduler initialized (toggle={feature_name})")

    async def execute_engagement(
        self,
        scope_id: str,
        adjust_frequency: Optional[FrequencyCallback] = None
    ) -> bool:
        """
        Decide whether to engage the scope and, if so, do it.

        Returns:
            True if a proactive message was delivered

        Raises:
            asyncio.CancelledError: propagated from any suspension point
        """
        with self.guard.hold(scope_id) as acquired:
            if not acquired:
                logger.debug(f"Engagement already in flight for scope {scope_id}, skipping")
                return False
            return await self._execute(scope_id, adjust_frequency)

    async def _execute(
        self,
        scope_id: str,
        adjust_frequency: Optional[FrequencyCallback]
    ) -> bool:
        if not self.config.enabled:
            return False

        if not await self.toggles.is_enabled(scope_id, self.feature_name):
            logger.debug(f"{self.feature_name} disabled for scope {scope_id}, skipping")
            return False

        messages = self.context.get_context_messages(scope_id)
        if not messages:
            logger.debug(f"No context messages for scope {scope_id}")
            if adjust_frequency:
                adjust_frequency(self.NO_CONTEXT_SIGNAL)
            return False

        activity = self.context.get_activity_level(scope_id)
        if adjust_frequency:
            adjust_frequency(activity)

        forced = self.mentions.is_forced(messages, self.platform.bot_user_id)

        if forced:
            logger.info(f"Bot mentioned in recent context for scope {scope_id}, forcing engagement")
        elif not self._draw_ambient(scope_id, activity):
            return False

        community = await self.platform.resolve_community(scope_id)
        if community is None:
            logger.warning(f"Could not resolve community for scope {scope_id}")
            return False

        channel = select_target_channel(community)
        if channel is None:
            return False

        action = select_action(activity, self.config.action_weights, forced=forced, rng=self.rng)
        outcome = await self._deliver(scope_id, action, channel)

        if outcome is None:
            logger.warning(
                f"Engagement for scope {scope_id} failed after {self.MAX_ATTEMPTS} attempts "
                f"(action={action.value})"
            )
            await self._emit(InitiativeFailed(
                scope_id=scope_id,
                action=action.value,
                attempts=self.MAX_ATTEMPTS,
                reason="no content delivered"
            ))
            return False

        attempts, content = outcome
        self.sleep.record_initiative_action(scope_id)
        self.context.clear_context_messages(scope_id)

        logger.info(
            f"Executed {action.value} in {community.name} #{channel.name} "
            f"(attempt {attempts}, forced={forced}): {content[:100]}"
        )
        await self._emit(InitiativeExecuted(
            scope_id=scope_id,
            action=action.value,
            channel_id=channel.id,
            attempts=attempts,
            forced=forced,
            content_length=len(content)
        ))
        return True

    def _draw_ambient(self, scope_id: str, activity: float) -> bool:
        engagement_multiplier = self.context.get_engagement_multiplier(scope_id)
        sleep_multiplier = self.sleep.get_initiative_probability_multiplier(scope_id)

        chance = activity * engagement_multiplier * sleep_multiplier
        chance = min(max(chance, 0.0), self.config.engagement.ambient_probability_cap)
        engage = self.rng.random() < chance

        logger.debug(
            f"Scope {scope_id}: activity={activity:.1f}, engagement={engagement_multiplier:.2f}, "
            f"sleep={sleep_multiplier:.2f}, chance={chance * 100:.0f}%, engage={engage}"
        )
        return engage

    async def _deliver(
        self,
        scope_id: str,
        action: EngagementAction,
        channel: IChannel
    ) -> Optional[Tuple[int, str]]:
        """Generate and send with a fixed number of attempts; (attempt, content) on success."""
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                content = await self.generation.generate(action, scope_id, channel)
                if content and content.strip():
                    await channel.send(content)
                    return attempt, content
                logger.warning(
                    f"{action.value} produced no content for scope {scope_id} "
                    f"(attempt {attempt}/{self.MAX_ATTEMPTS})"
                )
            except Exception as e:
                logger.warning(
                    f"{action.value} failed for scope {scope_id} "
                    f"(attempt {attempt}/{self.MAX_ATTEMPTS}): {e}"
                )

            if attempt < self.MAX_ATTEMPTS:
                await self._backoff()

        return None

    async def _backoff(self) -> None:
        engagement = self.config.engagement
        delay = engagement.retry_backoff_seconds
        if engagement.retry_jitter_seconds > 0:
            delay += self.rng.uniform(0, engagement.retry_jitter_seconds)
        if delay > 0:
            await asyncio.sleep(delay)

    async def _emit(self, event) -> None:
        if self.event_bus:
            await self.event_bus.publish(event)
