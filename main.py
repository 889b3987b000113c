"""Main entry point for Lull."""

import asyncio
import logging
import sys

from lull import get_version, print_banner
from lull.activity.tracker import ActivityTracker
from lull.core.config import load_config, validate_config
from lull.core.events import EventBus
from lull.core.events_listener import register_event_listeners
from lull.core.orchestrator import Orchestrator
from lull.core.state import ScopeStateRegistry
from lull.engagement import create_engagement_engine
from lull.inference import create_generation_service
from lull.integrations.discord_adapter import DiscordAdapter, DiscordPlatformResolver
from lull.sleep.controller import SleepController
from lull.toggles.service import ToggleService
from lull.utils.logging_config import setup_logging
from lull.utils.validation import validate_discord_id

logger = logging.getLogger(__name__)


async def main():
    """Main application entry point."""
    print_banner()

    # Load configuration
    config = load_config()

    # Setup logging
    setup_logging(config.debug_mode, config.log_level, config.log_dir)

    # Validate configuration
    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        sys.exit(1)

    if config.discord.owner_id and not validate_discord_id(config.discord.owner_id):
        logger.warning(f"DISCORD_OWNER_ID '{config.discord.owner_id}' does not look like a Discord ID")

    logger.info("=" * 60)
    logger.info(f"Lull v{get_version()} Initializing")
    logger.info("=" * 60)

    # Service references for cleanup
    event_bus = None
    engine = None
    discord_adapter = None

    try:
        # Initialize event bus
        event_bus = EventBus(max_queue_size=1000)
        register_event_listeners(event_bus, config.log_dir)
        await event_bus.start()

        # Shared per-scope state
        registry = ScopeStateRegistry()
        tracker = ActivityTracker(config.activity, registry)
        sleep_controller = SleepController(config.initiative, registry, event_bus)
        toggles = ToggleService(config.toggles)

        # Platform resolver is bound to the client once it exists
        resolver = DiscordPlatformResolver(config.discord)
        generation = create_generation_service(
            config.ollama,
            config.persona,
            tracker,
            platform=resolver,
            mention_lookback=config.activity.mention_lookback
        )

        _, engine = create_engagement_engine(
            config,
            toggles,
            tracker,
            sleep_controller,
            generation,
            resolver,
            event_bus
        )

        orchestrator = Orchestrator(
            config=config,
            event_bus=event_bus,
            tracker=tracker,
            sleep=sleep_controller,
            toggles=toggles,
            engine=engine,
            health_checks=[generation]
        )

        discord_adapter = DiscordAdapter(
            config.discord,
            orchestrator,
            engine,
            resolver
        )

        # Health check
        logger.info("Performing health check...")
        health = await orchestrator.health_check()
        logger.info(f"Health check: {health}")

        if health["services"].get("GenerationService", {}).get("ollama") != "healthy":
            logger.warning("Ollama not available! Proactive messages will fail until it is.")
            logger.warning("Make sure Ollama is running: ollama serve")

        # Start Discord bot (engagement engine starts on ready)
        logger.info("=" * 60)
        logger.info("System Ready - Starting Discord Bot")
        logger.info("=" * 60)

        await discord_adapter.start(config.discord.token)

    except KeyboardInterrupt:
        logger.info("Shutdown signal received")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("Shutting down...")

        # Graceful shutdown in reverse order
        if engine:
            await engine.stop()

        if discord_adapter and not discord_adapter.is_closed():
            await discord_adapter.close()

        if event_bus:
            await event_bus.stop()

        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown complete.")
