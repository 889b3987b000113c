"""Interface definitions for the scheduler's collaborators."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Dict, Optional, Any
from dataclasses import dataclass


@dataclass
class Message:
    """Standard message format for LLM prompts."""
    role: str  # 'user', 'assistant', 'system'
    content: str
    metadata: Dict[str, Any]


class EngagementAction(Enum):
    """Kinds of proactive action the generation provider can produce."""
    START_TOPIC = "start_topic"
    ASK_QUESTION = "ask_question"
    SHARE_INTERESTING = "share_interesting"
    SHARE_FUNNY = "share_funny"
    SHARE_USEFUL = "share_useful"
    INCREASE_ENGAGEMENT = "increase_engagement"
    SHARE_OPINION = "share_opinion"
    ADAPTIVE_RESPONSE = "adaptive_response"
    ANSWER_MENTION = "answer_mention"


class IFeatureToggles(ABC):
    """Per-scope feature switches."""

    @abstractmethod
    async def is_enabled(self, scope_id: str, feature_name: str) -> bool:
        """Check whether a feature is enabled for a scope."""
        pass


class IContextProvider(ABC):
    """Conversation context and activity signals for a scope."""

    @abstractmethod
    def get_context_messages(self, scope_id: str) -> List[str]:
        """Recent message texts, oldest first."""
        pass

    @abstractmethod
    def clear_context_messages(self, scope_id: str) -> None:
        """Drop consumed context after a successful engagement."""
        pass

    @abstractmethod
    def get_activity_level(self, scope_id: str) -> float:
        """Current conversational tempo in [0.1, 2.0]."""
        pass

    @abstractmethod
    def get_engagement_multiplier(self, scope_id: str) -> float:
        """Mention boost in [1.0, 3.0]."""
        pass


class IChannel(ABC):
    """A text channel the bot may post into."""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def position(self) -> int:
        pass

    @abstractmethod
    def can_send(self) -> bool:
        """Whether the bot has send permission here."""
        pass

    @abstractmethod
    async def send(self, content: str) -> None:
        """Deliver a message."""
        pass


class ICommunityHandle(ABC):
    """A resolved community (guild) on the chat platform."""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def primary_channel_id(self) -> Optional[str]:
        """Operator-configured preferred channel, if any."""
        pass

    @abstractmethod
    def text_channels(self) -> List[IChannel]:
        """All text channels in the community."""
        pass


class IPlatformResolver(ABC):
    """Resolves scope ids to platform communities."""

    @property
    @abstractmethod
    def bot_user_id(self) -> Optional[str]:
        """The bot's own platform user id, once connected."""
        pass

    @abstractmethod
    async def resolve_community(self, scope_id: str) -> Optional[ICommunityHandle]:
        """Look up the community for a scope, or None if unavailable."""
        pass


class IGenerationProvider(ABC):
    """Produces proactive message content."""

    @abstractmethod
    async def generate(
        self,
        action: EngagementAction,
        scope_id: str,
        channel: IChannel
    ) -> Optional[str]:
        """Generate content for an action, or None if nothing was produced."""
        pass


class IHealthCheck(ABC):
    """Health monitoring interface."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """Run health checks."""
        pass
