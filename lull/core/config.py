"""Configuration models and loading."""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Mapping
from pathlib import Path
import logging
import re
import yaml
import os
from dotenv import load_dotenv

from lull.utils.validation import validate_hour, validate_probability

logger = logging.getLogger(__name__)


@dataclass
class DeepSleepConfig:
    """Inactivity-triggered dormancy."""
    enabled: bool = True
    inactivity_hours_threshold: float = 24
    wake_up_message_threshold: int = 3
    gradual_wake_up_hours: float = 2
    wake_up_probability_multiplier: float = 0.3


@dataclass
class ActiveHoursConfig:
    """Hours during which the bot is more likely to initiate."""
    enabled: bool = False
    start_hour: int = 9
    end_hour: int = 23
    inactive_hours_multiplier: float = 0.2
    timezone: str = "UTC"


@dataclass
class TimingConfig:
    """Spacing between initiatives."""
    min_minutes_between_initiatives: float = 15
    active_hours: ActiveHoursConfig = field(default_factory=ActiveHoursConfig)


@dataclass
class EngagementConfig:
    """Engagement probability shaping and retry behaviour."""
    max_consecutive_initiatives: int = 2
    consecutive_reduction_factor: float = 0.5
    ambient_probability_cap: float = 0.9

    # Generation/delivery retries (no delay between attempts by default)
    retry_backoff_seconds: float = 0.0
    retry_jitter_seconds: float = 0.0


@dataclass
class ActionWeightsConfig:
    """Relative weights for proactive actions (higher = more likely)."""
    start_topic: float = 1.0
    ask_question: float = 1.5
    share_interesting: float = 0.8
    share_funny: float = 1.2
    share_useful: float = 0.6
    increase_engagement: float = 1.0
    share_opinion: float = 0.9
    adaptive_response: float = 2.0


@dataclass
class InitiativeConfig:
    """Proactive engagement configuration."""
    enabled: bool = True
    deep_sleep: DeepSleepConfig = field(default_factory=DeepSleepConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    engagement: EngagementConfig = field(default_factory=EngagementConfig)
    action_weights: ActionWeightsConfig = field(default_factory=ActionWeightsConfig)


@dataclass
class ActivityConfig:
    """Conversation activity tracking."""
    window_seconds: int = 120
    level_window_seconds: int = 60
    context_buffer_size: int = 50
    mention_lookback: int = 5
    engagement_boost: float = 0.5
    engagement_decay: float = 0.98
    engagement_cap: float = 3.0


@dataclass
class SchedulerConfig:
    """Per-scope engagement loop."""
    enabled: bool = True
    feature_toggle: str = "EnableLiveJob"
    initial_interval_seconds: float = 8
    interval_scale: float = 1.0


@dataclass
class OllamaConfig:
    """Ollama configuration."""
    url: str = "http://localhost:11434"
    model: str = "mistral-nemo"
    timeout_seconds: int = 60
    retry_attempts: int = 3


@dataclass
class PersonaConfig:
    """Persona configuration."""
    name: str = "Lull"
    system_prompt: str = (
        "You are a friendly, curious member of a Discord community. "
        "Keep messages short, casual and natural."
    )
    temperature: float = 0.8
    max_output_tokens: int = 200


@dataclass
class DiscordConfig:
    """Discord integration configuration."""
    token: str = ""
    owner_id: str = ""
    primary_channel_id: str = ""
    primary_channels: Dict[str, str] = field(default_factory=dict)  # guild id -> channel id
    allowed_guilds: List[str] = field(default_factory=list)
    command_prefix: str = "!"


@dataclass
class TogglesConfig:
    """Feature toggle defaults applied to every scope."""
    defaults: Dict[str, bool] = field(default_factory=lambda: {"EnableLiveJob": True})


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: str = "data/logs"

    persona: PersonaConfig = field(default_factory=PersonaConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    initiative: InitiativeConfig = field(default_factory=InitiativeConfig)
    activity: ActivityConfig = field(default_factory=ActivityConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    toggles: TogglesConfig = field(default_factory=TogglesConfig)


def _to_snake(name: str) -> str:
    """'InactivityHoursThreshold' -> 'inactivity_hours_threshold'."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def apply_overrides(target: Any, data: Mapping[str, Any]) -> None:
    """Recursively copy a (possibly PascalCase) mapping onto a config dataclass."""
    known = {f.name for f in fields(target)}

    for key, value in data.items():
        attr = _to_snake(str(key))
        if attr not in known:
            logger.warning(f"Unknown config key '{key}' for {type(target).__name__}")
            continue

        current = getattr(target, attr)
        if is_dataclass(current) and isinstance(value, Mapping):
            apply_overrides(current, value)
        else:
            setattr(target, attr, value)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def load_config(config_path: str = "config/initiative.yaml") -> SystemConfig:
    """Load configuration from environment and files."""
    load_dotenv()

    config = SystemConfig()

    # YAML overlay first, environment wins
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        # Accept both a top-level "Initiative" section and full system layout
        if "Initiative" in data:
            apply_overrides(config.initiative, data.pop("Initiative"))
        apply_overrides(config, data)
        logger.debug(f"Loaded config overlay from {path}")

    config.debug_mode = _env_bool("DEBUG_MODE", config.debug_mode)
    config.log_level = os.getenv("LOG_LEVEL", config.log_level)

    # Persona / Ollama
    config.persona.name = os.getenv("BOT_NAME", config.persona.name)
    config.ollama.url = os.getenv("OLLAMA_URL", config.ollama.url)
    config.ollama.model = os.getenv("OLLAMA_MODEL", config.ollama.model)

    # Discord
    config.discord.token = os.getenv("DISCORD_TOKEN", config.discord.token)
    config.discord.owner_id = os.getenv("DISCORD_OWNER_ID", config.discord.owner_id)
    config.discord.primary_channel_id = os.getenv(
        "DISCORD_PRIMARY_CHANNEL", config.discord.primary_channel_id
    )

    # Initiative
    initiative = config.initiative
    initiative.enabled = _env_bool("INITIATIVE_ENABLED", initiative.enabled)
    initiative.deep_sleep.enabled = _env_bool("DEEP_SLEEP_ENABLED", initiative.deep_sleep.enabled)
    initiative.deep_sleep.inactivity_hours_threshold = float(
        os.getenv("INACTIVITY_HOURS_THRESHOLD", str(initiative.deep_sleep.inactivity_hours_threshold))
    )
    initiative.deep_sleep.wake_up_message_threshold = int(
        os.getenv("WAKE_UP_MESSAGE_THRESHOLD", str(initiative.deep_sleep.wake_up_message_threshold))
    )
    initiative.timing.min_minutes_between_initiatives = float(
        os.getenv(
            "MIN_MINUTES_BETWEEN_INITIATIVES",
            str(initiative.timing.min_minutes_between_initiatives)
        )
    )
    initiative.timing.active_hours.enabled = _env_bool(
        "ACTIVE_HOURS_ENABLED", initiative.timing.active_hours.enabled
    )

    return config


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = []

    if not config.discord.token:
        errors.append("DISCORD_TOKEN not set in environment")

    if not config.persona.name.strip():
        errors.append("persona name must not be empty (used for mention detection)")

    deep_sleep = config.initiative.deep_sleep
    if deep_sleep.inactivity_hours_threshold <= 0:
        errors.append("DeepSleep.InactivityHoursThreshold must be positive")

    if deep_sleep.wake_up_message_threshold < 1:
        errors.append("DeepSleep.WakeUpMessageThreshold must be at least 1")

    if deep_sleep.gradual_wake_up_hours < 0:
        errors.append("DeepSleep.GradualWakeUpHours must not be negative")

    if not validate_probability(deep_sleep.wake_up_probability_multiplier):
        errors.append("DeepSleep.WakeUpProbabilityMultiplier must be between 0 and 1")

    engagement = config.initiative.engagement
    if engagement.max_consecutive_initiatives < 0:
        errors.append("Engagement.MaxConsecutiveInitiatives must not be negative")

    if not 0.0 < engagement.consecutive_reduction_factor <= 1.0:
        errors.append("Engagement.ConsecutiveReductionFactor must be in (0, 1]")

    if not validate_probability(engagement.ambient_probability_cap):
        errors.append("Engagement.AmbientProbabilityCap must be between 0 and 1")

    if engagement.retry_backoff_seconds < 0 or engagement.retry_jitter_seconds < 0:
        errors.append("retry backoff and jitter must not be negative")

    timing = config.initiative.timing
    if timing.min_minutes_between_initiatives < 0:
        errors.append("Timing.MinMinutesBetweenInitiatives must not be negative")

    active_hours = timing.active_hours
    for label, hour in (("StartHour", active_hours.start_hour), ("EndHour", active_hours.end_hour)):
        if not validate_hour(hour):
            errors.append(f"Timing.ActiveHours.{label} must be between 0 and 23")

    if not validate_probability(active_hours.inactive_hours_multiplier):
        errors.append("Timing.ActiveHours.InactiveHoursMultiplier must be between 0 and 1")

    if config.activity.level_window_seconds > config.activity.window_seconds:
        errors.append(
            f"activity level_window_seconds ({config.activity.level_window_seconds}) "
            f"must not exceed window_seconds ({config.activity.window_seconds})"
        )

    if config.scheduler.interval_scale <= 0:
        errors.append("scheduler interval_scale must be positive")

    return errors
