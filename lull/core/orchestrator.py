"""Main orchestrator routing messages and operator commands."""

import logging
from typing import Any, Dict, List, Optional

from lull.activity.tracker import ActivityTracker
from lull.core.config import SystemConfig
from lull.core.events import EventBus, MessageReceived
from lull.core.interfaces import IHealthCheck
from lull.engagement.engine import EngagementEngine
from lull.sleep.controller import SleepController
from lull.toggles.service import ToggleService
from lull.utils.clock import Clock, utc_now
from lull.utils.validation import ValidationError, parse_duration_minutes

logger = logging.getLogger(__name__)

COMMANDS = ("sleep", "wake", "status", "toggle")


class Orchestrator:
    """Central coordinator between the chat platform and the scheduler."""

    def __init__(
        self,
        config: SystemConfig,
        event_bus: EventBus,
        tracker: ActivityTracker,
        sleep: SleepController,
        toggles: ToggleService,
        engine: Optional[EngagementEngine] = None,
        health_checks: Optional[List[IHealthCheck]] = None,
        clock: Clock = utc_now
    ):
        self.config = config
        self.event_bus = event_bus
        self.tracker = tracker
        self.sleep = sleep
        self.toggles = toggles
        self.engine = engine
        self.health_checks = health_checks or []
        self.clock = clock

        logger.info("Orchestrator initialized")

    # === MESSAGES ===

    def parse_command(self, content: str) -> Optional[List[str]]:
        """Split a known operator command into [name, *args], else None."""
        prefix = self.config.discord.command_prefix
        text = content.strip()
        if not prefix or not text.startswith(prefix):
            return None

        parts = text[len(prefix):].split()
        if not parts or parts[0].lower() not in COMMANDS:
            return None
        return [parts[0].lower()] + parts[1:]

    def is_operator(self, event: MessageReceived) -> bool:
        owner_id = self.config.discord.owner_id
        if owner_id and event.user_id == owner_id:
            return True
        return bool(event.metadata.get("is_admin"))

    async def handle_message(self, event: MessageReceived) -> Optional[str]:
        """
        Handle an observed message.

        Returns:
            Reply text for operator commands, otherwise None
        """
        if event.is_self:
            return None

        command = self.parse_command(event.content)
        if command is not None:
            if self.is_operator(event):
                return await self.handle_command(event.scope_id, command[0], command[1:])
            logger.info(f"Ignoring {command[0]} command from non-operator {event.user_name}")
            return None

        recorded = self.tracker.record_message(
            event.scope_id,
            event.content,
            event.addressed_to_bot,
            author=event.user_name,
            author_id=event.user_id,
            is_self=event.is_self
        )
        if recorded:
            self.sleep.record_activity(event.scope_id)
            await self.event_bus.publish(event)

        return None

    # === COMMANDS ===

    async def handle_command(self, scope_id: str, name: str, args: List[str]) -> str:
        """Execute an operator command and return the reply text."""
        logger.info(f"Command {name} {' '.join(args)} in scope {scope_id}")

        if name == "sleep":
            return self._command_sleep(scope_id, args)
        if name == "wake":
            return self._command_wake(scope_id)
        if name == "status":
            return self.format_status(scope_id)
        if name == "toggle":
            return self._command_toggle(scope_id, args)

        return f"Unknown command: {name}"

    def _command_sleep(self, scope_id: str, args: List[str]) -> str:
        if not args:
            return "Usage: sleep <duration> (e.g. 30, 30m, 2h)"

        try:
            minutes = parse_duration_minutes(args[0])
            wake_up_time = self.sleep.put_to_sleep(scope_id, minutes)
        except ValidationError as e:
            return f"Can't sleep: {e}"

        return f"Going quiet for {minutes} minutes (until {wake_up_time.strftime('%H:%M')} UTC)."

    def _command_wake(self, scope_id: str) -> str:
        if self.sleep.wake_up(scope_id):
            return "I'm awake!"
        return "I wasn't sleeping."

    def _command_toggle(self, scope_id: str, args: List[str]) -> str:
        if not args:
            toggles = self.toggles.get_toggles(scope_id)
            return "\n".join(f"{name}: {'on' if value else 'off'}" for name, value in toggles.items())

        if len(args) != 2 or args[1].lower() not in ("on", "off"):
            return "Usage: toggle <name> <on|off>"

        enabled = args[1].lower() == "on"
        self.toggles.set_toggle(scope_id, args[0], enabled)
        return f"{args[0]} is now {'on' if enabled else 'off'}."

    # === STATUS ===

    def status(self, scope_id: str) -> Dict[str, Any]:
        sleep_status = self.sleep.get_sleep_status(scope_id)
        remaining = self.sleep.get_remaining_sleep_time(scope_id)

        status = {
            "scope_id": scope_id,
            "sleep_state": sleep_status.state.value,
            "sleeping_until": sleep_status.sleeping_until.isoformat() if sleep_status.sleeping_until else None,
            "remaining_sleep_minutes": round(remaining.total_seconds() / 60, 1) if remaining else None,
            "last_activity": sleep_status.last_activity.isoformat() if sleep_status.last_activity else None,
            "consecutive_initiatives": sleep_status.consecutive_initiatives,
            "messages_since_wake_up": sleep_status.messages_since_wake_up,
            "probability_multiplier": sleep_status.probability_multiplier,
            "activity_level": self.tracker.get_activity_level(scope_id),
            "engagement_multiplier": self.tracker.get_engagement_multiplier(scope_id),
            "context_messages": len(self.tracker.get_context_messages(scope_id)),
            "toggles": self.toggles.get_toggles(scope_id),
        }

        if self.engine and scope_id in self.engine.jobs:
            status["job"] = self.engine.get_stats()[scope_id]

        return status

    def format_status(self, scope_id: str) -> str:
        status = self.status(scope_id)

        lines = [f"State: {status['sleep_state']}"]
        if status["remaining_sleep_minutes"] is not None:
            lines.append(f"Sleeping for another {status['remaining_sleep_minutes']:.0f} min")
        lines.append(f"Activity: {status['activity_level']:.1f}")
        lines.append(f"Engagement: {status['engagement_multiplier']:.2f}x")
        lines.append(f"Initiative multiplier: {status['probability_multiplier']:.2f}")
        lines.append(f"Consecutive initiatives: {status['consecutive_initiatives']}")
        if "job" in status:
            lines.append(f"Check interval: {status['job']['interval_seconds']:.0f}s")
        return "\n".join(lines)

    async def health_check(self) -> dict:
        """Perform system health check."""
        health = {
            "timestamp": self.clock().isoformat(),
            "event_bus_running": self.event_bus.is_running,
            "engine_running": bool(self.engine and self.engine.is_running),
            "scopes_tracked": len(self.sleep.registry),
            "sleeping_scopes": len(self.sleep.get_sleeping_scopes()),
            "services": {},
        }

        for check in self.health_checks:
            name = type(check).__name__
            try:
                health["services"][name] = await check.check_health()
            except Exception as e:
                logger.error(f"Health check {name} failed: {e}", exc_info=True)
                health["services"][name] = {"error": str(e)}

        return health
