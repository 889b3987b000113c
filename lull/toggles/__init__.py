"""Feature toggles gating proactive behaviour per scope.

Usage:
    from lull.toggles import ToggleService, ToggleNames

    toggles = ToggleService(config.toggles)
    toggles.set_toggle(guild_id, ToggleNames.ENABLE_LIVE_JOB, False)
    await toggles.is_enabled(guild_id, ToggleNames.ENABLE_LIVE_JOB)  # False
"""

from lull.toggles.service import ToggleNames, ToggleService

__all__ = [
    "ToggleNames",
    "ToggleService",
]
