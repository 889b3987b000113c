"""LLM-backed content generation for proactive messages.

This module handles all LLM-related operations:
- Connection to the Ollama chat API
- Action-specific prompt construction
- Sanitizing output to Discord's message limits

Key Features:
- Retry logic with exponential backoff (tenacity)
- Context-aware prompt variants for quiet and active chats
- Optional prompt overrides from config/prompts.yaml

Usage:
    from lull.inference import create_generation_service

    generation = create_generation_service(config.ollama, config.persona, tracker)

    text = await generation.generate(EngagementAction.START_TOPIC, guild_id, channel)
"""

from lull.inference.generation_service import GenerationService
from lull.inference.ollama_client import OllamaClient, OllamaConnectionError
from lull.inference.prompt_builder import PromptBuilder

__all__ = [
    "GenerationService",
    "OllamaClient",
    "OllamaConnectionError",
    "PromptBuilder",
]


def create_generation_service(
    ollama_config,
    persona_config,
    tracker,
    platform=None,
    mention_lookback: int = 5
) -> GenerationService:
    """Factory function to create a configured generation service.

    Args:
        ollama_config: OllamaConfig with API settings
        persona_config: PersonaConfig with model parameters
        tracker: ActivityTracker supplying conversation context
        platform: Optional IPlatformResolver for the bot's own user id
        mention_lookback: How many recent messages count for mentions

    Returns:
        Configured GenerationService
    """
    from lull.engagement.mentions import MentionDetector

    mentions = MentionDetector(persona_config.name, lookback=mention_lookback)
    return GenerationService(
        ollama_config, persona_config, tracker, mentions=mentions, platform=platform
    )

