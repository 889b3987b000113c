"""Core system components - Central orchestration layer.

This module contains the foundational components the rest of Lull builds on:
- Configuration loading and validation
- Event bus for inter-service communication
- Core interfaces and data models
- Per-scope state registry and atomic cells
- Event logging and metrics

The orchestrator lives in lull.core.orchestrator and is imported directly,
since it depends on the service packages built on top of this one.

Usage:
    from lull.core import SystemConfig, EventBus, load_config
    from lull.core.orchestrator import Orchestrator
"""

from lull.core.config import (
    SystemConfig,
    InitiativeConfig,
    DeepSleepConfig,
    TimingConfig,
    ActiveHoursConfig,
    EngagementConfig,
    ActionWeightsConfig,
    ActivityConfig,
    SchedulerConfig,
    OllamaConfig,
    PersonaConfig,
    DiscordConfig,
    TogglesConfig,
    load_config,
    validate_config,
)
from lull.core.events import (
    EventBus,
    Event,
    EventPriority,
    MessageReceived,
    SleepStateChanged,
    InitiativeExecuted,
    InitiativeFailed,
)
from lull.core.interfaces import (
    Message,
    EngagementAction,
    IFeatureToggles,
    IContextProvider,
    IChannel,
    ICommunityHandle,
    IPlatformResolver,
    IGenerationProvider,
    IHealthCheck,
)
from lull.core.atomic import AtomicCounter, AtomicValue
from lull.core.state import ScopeActivityState, ScopeStateRegistry
from lull.core.events_listener import (
    SystemEventLogger,
    register_event_listeners
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",

    # Configuration
    "SystemConfig",
    "InitiativeConfig",
    "DeepSleepConfig",
    "TimingConfig",
    "ActiveHoursConfig",
    "EngagementConfig",
    "ActionWeightsConfig",
    "ActivityConfig",
    "SchedulerConfig",
    "OllamaConfig",
    "PersonaConfig",
    "DiscordConfig",
    "TogglesConfig",
    "load_config",
    "validate_config",

    # Event System
    "EventBus",
    "Event",
    "EventPriority",
    "MessageReceived",
    "SleepStateChanged",
    "InitiativeExecuted",
    "InitiativeFailed",

    # Interfaces & Models
    "Message",
    "EngagementAction",
    "IFeatureToggles",
    "IContextProvider",
    "IChannel",
    "ICommunityHandle",
    "IPlatformResolver",
    "IGenerationProvider",
    "IHealthCheck",

    # State
    "AtomicCounter",
    "AtomicValue",
    "ScopeActivityState",
    "ScopeStateRegistry",

    # Logging & Listeners
    "SystemEventLogger",
    "register_event_listeners",
]
