import logging
from pathlib import Path
import json

from lull.core.events import (
    EventBus,
    InitiativeExecuted,
    InitiativeFailed,
    SleepStateChanged
)

logger = logging.getLogger(__name__)


class SystemEventLogger:
    def __init__(self, log_dir: str = "data/logs"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.metrics_file = self.log_dir / "metrics.jsonl"

    async def on_sleep_state_changed(self, event: SleepStateChanged):
        logger.info(
            f"Sleep transition in scope {event.scope_id}: "
            f"{event.old_state} -> {event.new_state} ({event.reason})"
        )

        await self._write_metric({
            "event": "sleep_state_changed",
            "timestamp": event.timestamp.isoformat(),
            "scope_id": event.scope_id,
            "old_state": event.old_state,
            "new_state": event.new_state,
            "reason": event.reason
        })

    async def on_initiative_executed(self, event: InitiativeExecuted):
        logger.info(
            f"Initiative executed in scope {event.scope_id}: {event.action} "
            f"({event.content_length} chars, attempt {event.attempts}"
            f"{', forced' if event.forced else ''})"
        )

        await self._write_metric({
            "event": "initiative_executed",
            "timestamp": event.timestamp.isoformat(),
            "scope_id": event.scope_id,
            "action": event.action,
            "channel_id": event.channel_id,
            "attempts": event.attempts,
            "forced": event.forced,
            "content_length": event.content_length
        })

    async def on_initiative_failed(self, event: InitiativeFailed):
        logger.warning(
            f"Initiative failed in scope {event.scope_id}: {event.action} "
            f"after {event.attempts} attempts ({event.reason})"
        )

        await self._write_metric({
            "event": "initiative_failed",
            "timestamp": event.timestamp.isoformat(),
            "scope_id": event.scope_id,
            "action": event.action,
            "attempts": event.attempts,
            "reason": event.reason
        })

    async def _write_metric(self, data: dict):
        try:
            with open(self.metrics_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(data) + '\n')
        except Exception as e:
            logger.error(f"Failed to write metric: {e}")


def register_event_listeners(event_bus: EventBus, log_dir: str = "data/logs"):
    event_logger = SystemEventLogger(log_dir)

    event_bus.subscribe(SleepStateChanged, event_logger.on_sleep_state_changed)
    event_bus.subscribe(InitiativeExecuted, event_logger.on_initiative_executed)
    event_bus.subscribe(InitiativeFailed, event_logger.on_initiative_failed)

    logger.info("Event listeners registered")
    return event_logger
