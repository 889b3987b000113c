"""Detection of messages that address the bot directly."""

import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class MentionDetector:
    """Finds forced-engagement triggers in recent context."""

    def __init__(self, bot_name: str, lookback: int = 5):
        self.bot_name = bot_name.strip().lower()
        self.lookback = lookback

    def mentions_bot(self, text: str, bot_user_id: Optional[str] = None) -> bool:
        """
        True if the text names the bot ("hey lull", "@Lull") or
        carries a platform mention (<@id> / <@!id>).
        """
        lowered = text.lower()

        # "@name" is covered by the plain substring check
        if self.bot_name and self.bot_name in lowered:
            return True

        if bot_user_id and re.search(rf'<@!?{re.escape(str(bot_user_id))}>', text):
            return True

        return False

    def is_forced(self, messages: Iterable[str], bot_user_id: Optional[str] = None) -> bool:
        """Check the last `lookback` messages for a mention."""
        recent = list(messages)[-self.lookback:] if self.lookback > 0 else []
        for text in recent:
            if self.mentions_bot(text, bot_user_id):
                logger.debug(f"Forced engagement trigger found: {text[:60]!r}")
                return True
        return False
