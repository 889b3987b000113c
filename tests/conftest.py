"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import tempfile
import shutil

from lull.core.config import SystemConfig, PersonaConfig
from lull.core.events import EventBus
from lull.core.state import ScopeStateRegistry


class ManualClock:
    """Controllable clock for simulated time."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture
def clock():
    """Clock starting at noon UTC."""
    return ManualClock()


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def test_config(temp_data_dir):
    """Create test configuration."""
    config = SystemConfig()
    config.debug_mode = True
    config.log_level = "DEBUG"
    config.log_dir = str(temp_data_dir / "logs")

    config.discord.token = "test-token"
    config.discord.owner_id = "100000000000000001"

    config.persona = PersonaConfig(
        name="TestBot",
        system_prompt="You are a test bot.",
        temperature=0.7
    )

    return config


@pytest.fixture
def registry():
    """Fresh per-scope state registry."""
    return ScopeStateRegistry()


@pytest.fixture
async def event_bus():
    """Create and start event bus."""
    bus = EventBus()
    await bus.start()
    yield bus
    await bus.stop()
