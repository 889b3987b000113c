"""In-memory feature toggles with per-scope overrides."""

import logging
import threading
from typing import Dict, Optional

from lull.core.config import TogglesConfig
from lull.core.interfaces import IFeatureToggles

logger = logging.getLogger(__name__)


class ToggleNames:
    """Well-known toggle names."""
    ENABLE_LIVE_JOB = "EnableLiveJob"


class ToggleService(IFeatureToggles):
    """Config defaults, overridden per scope at runtime.

    Unknown toggles are disabled unless a default or override says otherwise.
    """

    def __init__(self, config: Optional[TogglesConfig] = None):
        self.config = config or TogglesConfig()
        self._overrides: Dict[str, Dict[str, bool]] = {}
        self._lock = threading.Lock()

        logger.info(f"Toggle service initialized with defaults: {self.config.defaults}")

    async def is_enabled(self, scope_id: str, feature_name: str) -> bool:
        with self._lock:
            scope_overrides = self._overrides.get(scope_id, {})
            if feature_name in scope_overrides:
                return scope_overrides[feature_name]
        return bool(self.config.defaults.get(feature_name, False))

    def set_toggle(self, scope_id: str, feature_name: str, enabled: bool) -> None:
        with self._lock:
            self._overrides.setdefault(scope_id, {})[feature_name] = enabled
        logger.info(f"Toggle {feature_name} set to {enabled} for scope {scope_id}")

    def clear_toggle(self, scope_id: str, feature_name: str) -> None:
        """Drop a scope override so the default applies again."""
        with self._lock:
            self._overrides.get(scope_id, {}).pop(feature_name, None)

    def get_toggles(self, scope_id: str) -> Dict[str, bool]:
        """Effective toggle values for a scope."""
        toggles = {name: bool(value) for name, value in self.config.defaults.items()}
        with self._lock:
            toggles.update(self._overrides.get(scope_id, {}))
        return toggles
