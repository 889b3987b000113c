"""Per-scope conversation tracking: tempo, mention boost and recent context."""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Deque, Dict, List

from lull.core.config import ActivityConfig
from lull.core.interfaces import IContextProvider
from lull.core.state import ScopeStateRegistry
from lull.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

MIN_ACTIVITY_LEVEL = 0.1
MAX_ACTIVITY_LEVEL = 2.0

# Messages in the level window -> activity level
ACTIVITY_LEVELS = (0.1, 0.3, 0.5, 0.7, 1.0, 1.3, 1.5)


def activity_level_for_count(count: int) -> float:
    """Map a recent message count onto the [0.1, 2.0] activity scale."""
    if count <= 0:
        return MIN_ACTIVITY_LEVEL
    if count >= len(ACTIVITY_LEVELS):
        return MAX_ACTIVITY_LEVEL
    return ACTIVITY_LEVELS[count]


@dataclass
class ContextEntry:
    """One remembered message."""
    author: str
    author_id: str
    content: str
    timestamp: datetime


class _ScopeConversation:
    """Rolling timestamps and context buffer for one scope."""

    def __init__(self, context_size: int):
        self.timestamps: Deque[datetime] = deque()
        self.context: Deque[ContextEntry] = deque(maxlen=context_size)
        self.lock = threading.Lock()


class ActivityTracker(IContextProvider):
    """Records conversational events and derives activity signals per scope."""

    def __init__(
        self,
        config: ActivityConfig,
        registry: ScopeStateRegistry,
        clock: Clock = utc_now
    ):
        self.config = config
        self.registry = registry
        self.clock = clock
        self._conversations: Dict[str, _ScopeConversation] = {}
        self._lock = threading.Lock()
        logger.info(
            f"Activity tracker initialized (window={config.window_seconds}s, "
            f"context={config.context_buffer_size})"
        )

    def _conversation(self, scope_id: str) -> _ScopeConversation:
        conversation = self._conversations.get(scope_id)
        if conversation is None:
            with self._lock:
                conversation = self._conversations.setdefault(
                    scope_id, _ScopeConversation(self.config.context_buffer_size)
                )
        return conversation

    def record_message(
        self,
        scope_id: str,
        content: str,
        is_addressed_to_bot: bool = False,
        *,
        author: str = "",
        author_id: str = "",
        is_self: bool = False
    ) -> bool:
        """
        Record a user message.

        Returns:
            False if the message was ignored (self-authored or empty)
        """
        text = (content or "").strip()
        if is_self or not text:
            logger.debug(f"Ignoring self-authored or empty message in scope {scope_id}")
            return False

        now = self.clock()
        conversation = self._conversation(scope_id)

        with conversation.lock:
            conversation.timestamps.append(now)
            self._prune(conversation, now)
            conversation.context.append(ContextEntry(
                author=author, author_id=author_id, content=text, timestamp=now
            ))

        state = self.registry.get_or_create(scope_id)
        if is_addressed_to_bot:
            multiplier = state.engagement_multiplier.update(
                lambda current: min(current + self.config.engagement_boost, self.config.engagement_cap)
            )
            logger.info(f"Bot addressed in scope {scope_id}, engagement multiplier now {multiplier:.2f}")
        else:
            state.engagement_multiplier.update(
                lambda current: max(current * self.config.engagement_decay, 1.0)
            )

        logger.debug(
            f"Recorded message in scope {scope_id} "
            f"(activity={self.get_activity_level(scope_id):.1f})"
        )
        return True

    def _prune(self, conversation: _ScopeConversation, now: datetime) -> None:
        cutoff = now - timedelta(seconds=self.config.window_seconds)
        while conversation.timestamps and conversation.timestamps[0] < cutoff:
            conversation.timestamps.popleft()

    def get_activity_level(self, scope_id: str) -> float:
        conversation = self._conversations.get(scope_id)
        if conversation is None:
            return MIN_ACTIVITY_LEVEL

        now = self.clock()
        cutoff = now - timedelta(seconds=self.config.level_window_seconds)
        with conversation.lock:
            self._prune(conversation, now)
            recent = sum(1 for ts in conversation.timestamps if ts > cutoff)

        return min(max(activity_level_for_count(recent), MIN_ACTIVITY_LEVEL), MAX_ACTIVITY_LEVEL)

    def get_engagement_multiplier(self, scope_id: str) -> float:
        state = self.registry.get(scope_id)
        return state.engagement_multiplier.value if state else 1.0

    def get_context_messages(self, scope_id: str) -> List[str]:
        conversation = self._conversations.get(scope_id)
        if conversation is None:
            return []
        with conversation.lock:
            return [entry.content for entry in conversation.context]

    def get_context_entries(self, scope_id: str) -> List[ContextEntry]:
        conversation = self._conversations.get(scope_id)
        if conversation is None:
            return []
        with conversation.lock:
            return list(conversation.context)

    def clear_context_messages(self, scope_id: str) -> None:
        conversation = self._conversations.get(scope_id)
        if conversation is None:
            return
        with conversation.lock:
            conversation.context.clear()
        logger.info(f"Cleared context messages for scope {scope_id}")

    def format_context_for_prompt(self, scope_id: str, limit: int = 10) -> str:
        """Format recent context as '[author:id] text' lines."""
        entries = self.get_context_entries(scope_id)[-limit:]
        return "\n".join(
            f"[{entry.author or 'unknown'}:{entry.author_id or '?'}] {entry.content}"
            for entry in entries
        )
