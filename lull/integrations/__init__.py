"""External service integrations.

This module binds the scheduler's platform interfaces to Discord:
- Guild messages become MessageReceived events (scope = guild id)
- Owner and guild managers can issue sleep/wake/status commands
- Guilds and text channels are resolved for proactive messages

Key Features:
- Per-guild primary channels with a global fallback
- Send-permission checks before choosing a channel
- Engagement engine started once the gateway is ready

Usage:
    from lull.integrations import DiscordAdapter, DiscordPlatformResolver

    resolver = DiscordPlatformResolver(config.discord)
    adapter = DiscordAdapter(config.discord, orchestrator, engine, resolver)

    # Start bot (blocking)
    await adapter.start(config.discord.token)
"""

from lull.integrations.discord_adapter import (
    DiscordAdapter,
    DiscordChannel,
    DiscordCommunity,
    DiscordPlatformResolver,
)

__all__ = [
    "DiscordAdapter",
    "DiscordChannel",
    "DiscordCommunity",
    "DiscordPlatformResolver",
]


def create_discord_adapter(
    config,
    orchestrator,
    engine=None,
    resolver=None
) -> DiscordAdapter:
    """Factory function to create a configured Discord adapter.

    Args:
        config: DiscordConfig with bot token and settings
        orchestrator: Orchestrator for handling messages and commands
        engine: EngagementEngine started when the bot is ready
        resolver: DiscordPlatformResolver shared with the scheduler

    Returns:
        Configured DiscordAdapter (not started)
    """
    return DiscordAdapter(config, orchestrator, engine, resolver)
