"""Conversation activity tracking.

Tracks, per scope (one Discord guild):
- Message tempo over a rolling window, mapped to an activity level in [0.1, 2.0]
- An engagement multiplier boosted when the bot is addressed
- A bounded buffer of recent messages used as engagement context

Usage:
    from lull.activity import ActivityTracker
    from lull.core.config import ActivityConfig
    from lull.core.state import ScopeStateRegistry

    tracker = ActivityTracker(ActivityConfig(), ScopeStateRegistry())
    tracker.record_message("1234", "anyone up for a game?", author="sam")
    tracker.get_activity_level("1234")  # 0.3
"""

from lull.activity.tracker import (
    ActivityTracker,
    ContextEntry,
    activity_level_for_count,
    MIN_ACTIVITY_LEVEL,
    MAX_ACTIVITY_LEVEL,
)

__all__ = [
    "ActivityTracker",
    "ContextEntry",
    "activity_level_for_count",
    "MIN_ACTIVITY_LEVEL",
    "MAX_ACTIVITY_LEVEL",
]
