"""Action-specific prompt building for proactive messages."""

from typing import Dict, List, Optional
import logging
from pathlib import Path
import yaml

from lull.core.interfaces import EngagementAction, Message
from lull.core.config import PersonaConfig

logger = logging.getLogger(__name__)

# Cache templates at module level
_TEMPLATES_CACHE = None

NO_QUOTES = "Don't use quotation marks. Just provide the message directly."

MENTION_GUIDANCE = (
    "Note: You can mention specific users using <@userId> syntax "
    "when responding to or asking questions to specific people."
)

# action -> (quiet chat instruction, active chat instruction or None)
DEFAULT_TEMPLATES: Dict[str, tuple] = {
    EngagementAction.START_TOPIC.value: (
        "Provide a fun, interesting, or thought-provoking conversation starter. "
        "Keep it casual, something that would naturally start a discussion in a Discord server.",
        None,
    ),
    EngagementAction.ASK_QUESTION.value: (
        "Ask an engaging question that would spark discussion. "
        "Make it fun or thought-provoking, something the community would enjoy discussing.",
        "Based on the ongoing conversation, ask a relevant follow-up question "
        "or ask for others' opinions on what's being discussed. Sound genuinely curious.",
    ),
    EngagementAction.SHARE_INTERESTING.value: (
        "Share something interesting or educational: a fun fact or an observation "
        "about technology, gaming or life that would spark curiosity.",
        None,
    ),
    EngagementAction.SHARE_FUNNY.value: (
        "Provide a funny message, joke, or humorous observation. "
        "Keep it light-hearted and appropriate for Discord.",
        None,
    ),
    EngagementAction.SHARE_USEFUL.value: (
        "Share a useful tip or piece of advice about productivity, gaming, tech "
        "or Discord itself. Make it practical.",
        None,
    ),
    EngagementAction.INCREASE_ENGAGEMENT.value: (
        "Create an engaging message to spark activity: ask for opinions, "
        "suggest a mini-game or a poll idea. Make it fun and inviting.",
        "Join the ongoing conversation naturally. Give your opinion, ask a follow-up "
        "or add something relevant. Don't announce you're joining, just participate.",
    ),
    EngagementAction.SHARE_OPINION.value: (
        "Share an interesting opinion on a topic that might spark discussion, "
        "such as gaming, technology or current trends.",
        "Based on the ongoing conversation, share your honest opinion on the topic. "
        "Have a stance, but be respectful.",
    ),
    EngagementAction.ADAPTIVE_RESPONSE.value: (
        "The chat is quiet. Decide the best way to get people talking: start a topic, "
        "ask a question, share something interesting or tell a joke.",
        "Analyze the current conversation and respond in the most appropriate way, "
        "matching its tone and content.",
    ),
    EngagementAction.ANSWER_MENTION.value: (
        "Someone mentioned you. Reply to them directly and naturally.",
        "Someone mentioned you in the conversation below. Reply to them directly and naturally.",
    ),
}


def _load_templates() -> dict:
    """Load prompt overrides from YAML (cached)."""
    global _TEMPLATES_CACHE
    if _TEMPLATES_CACHE is not None:
        return _TEMPLATES_CACHE

    template_path = Path("config/prompts.yaml")
    if template_path.exists():
        with open(template_path) as f:
            _TEMPLATES_CACHE = yaml.safe_load(f) or {}
            return _TEMPLATES_CACHE
    return {}


class PromptBuilder:
    """Builds chat prompts for each engagement action."""

    def __init__(self, persona_config: PersonaConfig, templates: Optional[dict] = None):
        self.persona_config = persona_config
        self.templates = templates if templates is not None else _load_templates()

    def _instruction(self, action: EngagementAction, has_context: bool) -> str:
        override = self.templates.get(action.value)
        if isinstance(override, dict):
            key = "active" if has_context and "active" in override else "quiet"
            if key in override:
                return override[key]

        quiet, active = DEFAULT_TEMPLATES[action.value]
        if has_context and active:
            return active
        return quiet

    def build_system_prompt(self) -> str:
        return (
            f"{self.persona_config.system_prompt}\n\n"
            f"Your name is {self.persona_config.name}. "
            f"Write a single chat message of at most a few sentences."
        )

    def build_action_prompt(
        self,
        action: EngagementAction,
        context: str = "",
        mention_line: str = ""
    ) -> List[Message]:
        """
        Build the message list for one proactive action.

        Args:
            action: Engagement action to perform
            context: Recent conversation as '[author:id] text' lines
            mention_line: The message that addressed the bot (ANSWER_MENTION only)
        """
        has_context = bool(context.strip())
        instruction = self._instruction(action, has_context)

        parts = [f"[System]: {instruction} {NO_QUOTES}"]
        if action == EngagementAction.ANSWER_MENTION and mention_line:
            parts.append(f"Message to answer:\n{mention_line}")
        if has_context:
            parts.append(f"Here's the current conversation:\n{context}")
            parts.append(MENTION_GUIDANCE)

        logger.debug(f"Built {action.value} prompt (context={'yes' if has_context else 'no'})")

        return [
            Message(role="system", content=self.build_system_prompt(), metadata={}),
            Message(role="user", content="\n".join(parts), metadata={"action": action.value}),
        ]
