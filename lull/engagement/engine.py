"""Per-scope engagement loops driven by the engagement scheduler."""

import asyncio
import logging
from typing import Dict, Optional

from lull.core.config import SchedulerConfig
from lull.core.events import EventBus, MessageReceived
from lull.engagement.scheduler import EngagementScheduler

logger = logging.getLogger(__name__)

# (activity ceiling, interval seconds); anything above the last ceiling is fastest
FREQUENCY_TABLE = (
    (0.1, 30.0),
    (0.3, 20.0),
    (0.7, 15.0),
    (1.3, 10.0),
    (1.5, 8.0),
)
FASTEST_INTERVAL_SECONDS = 6.0


def interval_for_activity(activity_level: float) -> float:
    """Map an activity level to the loop interval in seconds."""
    for ceiling, seconds in FREQUENCY_TABLE:
        if activity_level <= ceiling:
            return seconds
    return FASTEST_INTERVAL_SECONDS


class ScopeEngagementJob:
    """Repeating engagement loop for a single scope."""

    def __init__(
        self,
        scope_id: str,
        scheduler: EngagementScheduler,
        initial_interval_seconds: float = 8.0,
        interval_scale: float = 1.0
    ):
        self.scope_id = scope_id
        self.scheduler = scheduler
        self.interval_seconds = initial_interval_seconds
        self.interval_scale = interval_scale

        self.execution_count = 0
        self.engagement_count = 0
        self.last_activity_level: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def effective_interval(self) -> float:
        return self.interval_seconds * self.interval_scale

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def adjust_frequency(self, activity_level: float) -> None:
        """Callback handed to the scheduler on every run."""
        interval = interval_for_activity(activity_level)
        if interval != self.interval_seconds:
            logger.debug(
                f"Scope {self.scope_id} interval {self.interval_seconds:.0f}s -> {interval:.0f}s "
                f"(activity={activity_level:.1f})"
            )
        self.interval_seconds = interval
        self.last_activity_level = activity_level

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"engagement-{self.scope_id}")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def run_once(self) -> bool:
        """Single scheduler invocation; used by the loop and by tests."""
        self.execution_count += 1
        engaged = await self.scheduler.execute_engagement(self.scope_id, self.adjust_frequency)
        if engaged:
            self.engagement_count += 1
        return engaged

    async def _run(self):
        while True:
            await asyncio.sleep(self.effective_interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Engagement loop error for scope {self.scope_id}: {e}", exc_info=True)


class EngagementEngine:
    """Owns one engagement job per scope, created on first observed message."""

    def __init__(
        self,
        config: SchedulerConfig,
        scheduler: EngagementScheduler,
        event_bus: Optional[EventBus] = None
    ):
        self.config = config
        self.scheduler = scheduler
        self.event_bus = event_bus
        self.jobs: Dict[str, ScopeEngagementJob] = {}
        self._running = False

        if event_bus:
            event_bus.subscribe(MessageReceived, self._on_message_received)

        logger.info(
            f"Engagement engine initialized (interval={config.initial_interval_seconds}s, "
            f"scale={config.interval_scale})"
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start loops for every known scope and accept new ones."""
        if not self.config.enabled:
            logger.info("Engagement engine disabled in config")
            return

        self._running = True
        for job in self.jobs.values():
            job.start()
        logger.info(f"Engagement engine started ({len(self.jobs)} scopes)")

    async def stop(self):
        """Cancel every scope loop and wait for them to finish."""
        self._running = False
        await asyncio.gather(*(job.stop() for job in self.jobs.values()))
        logger.info("Engagement engine stopped")

    def ensure_scope(self, scope_id: str) -> ScopeEngagementJob:
        """Get or create the job for a scope, starting it if the engine is running."""
        job = self.jobs.get(scope_id)
        if job is None:
            job = ScopeEngagementJob(
                scope_id,
                self.scheduler,
                initial_interval_seconds=self.config.initial_interval_seconds,
                interval_scale=self.config.interval_scale
            )
            self.jobs[scope_id] = job
            logger.info(f"Registered engagement job for scope {scope_id}")

        if self._running:
            job.start()
        return job

    async def _on_message_received(self, event: MessageReceived):
        if event.is_self or not event.scope_id:
            return
        self.ensure_scope(event.scope_id)

    def get_stats(self) -> Dict[str, dict]:
        return {
            scope_id: {
                "interval_seconds": job.effective_interval,
                "execution_count": job.execution_count,
                "engagement_count": job.engagement_count,
                "last_activity_level": job.last_activity_level,
                "running": job.is_running,
            }
            for scope_id, job in self.jobs.items()
        }
