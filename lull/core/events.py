"""Event system for decoupled communication between components."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Type
from enum import Enum
import asyncio
import logging

logger = logging.getLogger(__name__)


class EventPriority(Enum):
    """Event priority levels."""
    LOW = 0
    NORMAL = 1
    HIGH = 2


@dataclass
class Event:
    """Base event class.

    Note: All fields have defaults to allow subclasses to add required fields.
    """
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    priority: EventPriority = EventPriority.NORMAL
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MessageReceived(Event):
    """User message observed in a scope."""
    scope_id: str = ""
    user_id: str = ""
    user_name: str = ""
    content: str = ""
    channel_id: str = ""
    addressed_to_bot: bool = False
    is_self: bool = False


@dataclass
class SleepStateChanged(Event):
    """Scope moved between awake, manual sleep, deep sleep and waking up."""
    scope_id: str = ""
    old_state: str = ""
    new_state: str = ""
    reason: str = ""


@dataclass
class InitiativeExecuted(Event):
    """A proactive action was generated and delivered."""
    scope_id: str = ""
    action: str = ""
    channel_id: str = ""
    attempts: int = 0
    forced: bool = False
    content_length: int = 0


@dataclass
class InitiativeFailed(Event):
    """A proactive action was chosen but could not be delivered."""
    scope_id: str = ""
    action: str = ""
    attempts: int = 0
    reason: str = ""


class EventBus:
    """Central event bus for system-wide communication with backpressure."""

    def __init__(self, max_queue_size: int = 1000):
        self._handlers: Dict[Type[Event], List[Callable]] = defaultdict(list)
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._running = False
        self._task = None
        logger.info(f"Event bus initialized (max_queue_size={max_queue_size})")

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe(self, event_type: Type[Event], handler: Callable):
        """Register an event handler."""
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[Event], handler: Callable):
        """Remove an event handler."""
        if handler in self._handlers.get(event_type, []):
            self._handlers[event_type].remove(handler)

    async def publish(self, event: Event):
        """Publish an event to all subscribers."""
        try:
            await asyncio.wait_for(self._queue.put(event), timeout=1.0)
        except asyncio.TimeoutError:
            logger.error(f"Event queue full, dropping {type(event).__name__}")

    def publish_nowait(self, event: Event):
        """Publish from synchronous code; drops the event if the queue is full."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(f"Event queue full, dropping {type(event).__name__}")

    async def start(self):
        """Start processing events."""
        self._running = True
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self):
        """Stop processing events."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Event bus stopped")

    async def _process_events(self):
        """Process events from queue."""
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
                await self._dispatch(event)
            except asyncio.TimeoutError:
                continue
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)

    async def _dispatch(self, event: Event):
        """Dispatch event to handlers with error isolation."""
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            logger.debug(f"No handlers for {event_type.__name__}")
            return

        for handler in handlers:
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}",
                    exc_info=True
                )
