"""Generation provider backed by Ollama."""

from typing import Any, Dict, Optional
import logging

from lull.activity.tracker import ActivityTracker
from lull.core.config import OllamaConfig, PersonaConfig
from lull.core.interfaces import (
    EngagementAction,
    IChannel,
    IGenerationProvider,
    IHealthCheck,
    IPlatformResolver,
)
from lull.engagement.mentions import MentionDetector
from lull.inference.ollama_client import OllamaClient
from lull.inference.prompt_builder import PromptBuilder
from lull.utils.validation import sanitize_message

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000


class GenerationService(IGenerationProvider, IHealthCheck):
    """Turns an engagement action plus scope context into message text."""

    def __init__(
        self,
        ollama_config: OllamaConfig,
        persona_config: PersonaConfig,
        tracker: ActivityTracker,
        mentions: Optional[MentionDetector] = None,
        platform: Optional[IPlatformResolver] = None,
        client: Optional[OllamaClient] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        context_limit: int = 10
    ):
        self.persona_config = persona_config
        self.tracker = tracker
        self.mentions = mentions or MentionDetector(persona_config.name)
        # The engagement scheduler owns the attempt budget
        self.client = client or OllamaClient(ollama_config, retry_attempts=1)
        self.prompt_builder = prompt_builder or PromptBuilder(persona_config)
        self.context_limit = context_limit
        self.platform = platform

        logger.info(f"Generation service initialized (model={ollama_config.model})")

    def _mention_line(self, scope_id: str) -> str:
        """Most recent context entry that addressed the bot."""
        bot_user_id = self.platform.bot_user_id if self.platform else None
        for entry in reversed(self.tracker.get_context_entries(scope_id)):
            if self.mentions.mentions_bot(entry.content, bot_user_id):
                return f"[{entry.author or 'unknown'}:{entry.author_id or '?'}] {entry.content}"
        return ""

    async def generate(
        self,
        action: EngagementAction,
        scope_id: str,
        channel: IChannel
    ) -> Optional[str]:
        context = self.tracker.format_context_for_prompt(scope_id, limit=self.context_limit)
        mention_line = self._mention_line(scope_id) if action == EngagementAction.ANSWER_MENTION else ""
        messages = self.prompt_builder.build_action_prompt(action, context, mention_line)

        try:
            response = await self.client.chat(
                messages,
                temperature=self.persona_config.temperature,
                max_tokens=self.persona_config.max_output_tokens
            )
        except Exception as e:
            logger.error(f"Generation failed for {action.value} in scope {scope_id}: {e}")
            return None

        text = sanitize_message(response, max_length=DISCORD_MESSAGE_LIMIT)
        if not text:
            logger.warning(f"Generation for {action.value} in scope {scope_id} was empty after sanitizing")
            return None

        logger.debug(f"Generated {action.value} for #{channel.name}: {text[:80]}")
        return text

    async def check_health(self) -> Dict[str, Any]:
        available = await self.client.health_check()
        return {
            "ollama": "healthy" if available else "unavailable",
            "model": self.client.model,
        }
