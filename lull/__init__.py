"""
Lull - Proactive engagement scheduler for Discord communities.

Decides whether, when and how often a community assistant speaks up on its
own in each server, and keeps it quiet during operator-requested or inferred
quiet periods.

Key Features:
    - Tempo: Tracks message activity and adapts how often it checks in
    - Courtesy: Answers mentions promptly, backs off after talking to itself
    - Rest: Manual sleep, deep sleep after long silence, gradual wake-up

Usage:
    from lull import SystemConfig, load_config

    config = load_config()
    # See main.py for full initialization
"""

__version__ = "1.0.0"
__author__ = "Lull Team"
__license__ = "MIT"

# Core exports
from lull.core import (
    SystemConfig,
    load_config,
    validate_config,
    EventBus,
    ScopeStateRegistry,
)

# Service exports
from lull.activity import ActivityTracker
from lull.sleep import SleepController
from lull.toggles import ToggleService
from lull.engagement import EngagementEngine, EngagementScheduler
from lull.inference import GenerationService
from lull.core.orchestrator import Orchestrator
from lull.integrations import DiscordAdapter

# Utility exports
from lull.utils import setup_logging

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Core
    "SystemConfig",
    "load_config",
    "validate_config",
    "EventBus",
    "ScopeStateRegistry",
    "Orchestrator",

    # Services
    "ActivityTracker",
    "SleepController",
    "ToggleService",
    "EngagementEngine",
    "EngagementScheduler",
    "GenerationService",
    "DiscordAdapter",

    # Utilities
    "setup_logging",
]


def get_version() -> str:
    """Get the current version of Lull."""
    return __version__


# ASCII art banner for terminal
BANNER = r"""
╔═══════════════════════════════════════════════════════════╗
║                          LULL                             ║
║                                                           ║
║  "Speaks up when the room is alive,                       ║
║   rests when it is not"                                   ║
║                                                           ║
║  Version: 1.0.0                                           ║
╚═══════════════════════════════════════════════════════════╝
"""


def print_banner():
    """Print the Lull banner."""
    print(BANNER)
