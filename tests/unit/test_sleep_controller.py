"""Unit tests for the sleep controller."""

import asyncio
import pytest
from datetime import datetime, timedelta, timezone

from lull.core.config import InitiativeConfig
from lull.core.events import EventBus, SleepStateChanged
from lull.sleep.controller import SleepController, SleepState
from lull.utils.validation import InvalidSleepDuration, ValidationError


@pytest.fixture
def initiative_config():
    config = InitiativeConfig()
    config.timing.min_minutes_between_initiatives = 15
    return config


@pytest.fixture
def controller(initiative_config, registry, clock):
    return SleepController(initiative_config, registry, clock=clock)


class TestManualSleep:

    @pytest.mark.parametrize("minutes", [0, -5, 1441])
    def test_rejects_out_of_range_durations(self, controller, minutes):
        with pytest.raises(InvalidSleepDuration):
            controller.put_to_sleep("guild", minutes)

        assert not controller.is_sleeping("guild")

    def test_invalid_duration_is_a_value_error(self, controller):
        with pytest.raises(ValueError):
            controller.put_to_sleep("guild", 0)
        with pytest.raises(ValidationError):
            controller.put_to_sleep("guild", 2000)

    @pytest.mark.parametrize("minutes", [1, 30, 1440])
    def test_accepts_valid_durations(self, controller, clock, minutes):
        wake_up_time = controller.put_to_sleep("guild", minutes)

        assert wake_up_time == clock.now + timedelta(minutes=minutes)
        assert controller.is_sleeping("guild")

    def test_sleep_expires_and_is_evicted(self, controller, clock):
        controller.put_to_sleep("guild", 30)
        clock.advance(minutes=29)
        assert controller.is_sleeping("guild")
        assert controller.get_remaining_sleep_time("guild") == timedelta(minutes=1)

        clock.advance(minutes=1)

        assert not controller.is_sleeping("guild")
        assert controller.get_remaining_sleep_time("guild") is None
        assert controller.get_sleeping_scopes() == {}

    def test_sleeping_scopes_lists_live_entries(self, controller, clock):
        controller.put_to_sleep("a", 10)
        controller.put_to_sleep("b", 60)
        clock.advance(minutes=20)

        assert list(controller.get_sleeping_scopes()) == ["b"]

    def test_manual_sleep_zeroes_multiplier(self, controller):
        controller.put_to_sleep("guild", 30)

        assert controller.get_initiative_probability_multiplier("guild") == 0.0
        assert controller.get_sleep_state("guild") == SleepState.MANUAL_SLEEP

    def test_wake_up(self, controller):
        controller.put_to_sleep("guild", 30)

        assert controller.wake_up("guild") is True
        assert not controller.is_sleeping("guild")
        assert controller.wake_up("guild") is False


class TestDeepSleep:

    @pytest.fixture
    def initiative_config(self):
        config = InitiativeConfig()
        config.deep_sleep.inactivity_hours_threshold = 6
        config.deep_sleep.wake_up_message_threshold = 3
        config.deep_sleep.gradual_wake_up_hours = 2
        config.deep_sleep.wake_up_probability_multiplier = 0.3
        return config

    def test_unknown_scope_never_deep_sleeps(self, controller, clock):
        clock.advance(days=30)

        assert controller.is_in_deep_sleep("guild") is False

    def test_disabled_deep_sleep(self, controller, initiative_config, registry, clock):
        initiative_config.deep_sleep.enabled = False
        registry.get_or_create("guild").last_activity = clock.now - timedelta(hours=7)

        assert controller.is_in_deep_sleep("guild") is False

    def test_inactivity_enters_deep_sleep(self, controller, registry, clock):
        registry.get_or_create("guild").last_activity = clock.now - timedelta(hours=7)

        assert controller.is_in_deep_sleep("guild") is True
        assert registry.get("guild").deep_sleep_started == clock.now
        assert controller.get_initiative_probability_multiplier("guild") == 0.0

    def test_below_threshold_stays_awake(self, controller, registry, clock):
        registry.get_or_create("guild").last_activity = clock.now - timedelta(hours=5)

        assert controller.is_in_deep_sleep("guild") is False

    def test_wake_up_scenario(self, controller, registry, clock):
        state = registry.get_or_create("guild")
        state.last_activity = clock.now - timedelta(hours=7)
        assert controller.is_in_deep_sleep("guild")

        controller.record_activity("guild")
        assert controller.is_in_deep_sleep("guild")
        assert state.messages_since_wake_up.value == 1

        controller.record_activity("guild")
        clock.advance(seconds=30)
        controller.record_activity("guild")

        assert not controller.is_in_deep_sleep("guild")
        assert state.wake_up_started == clock.now
        assert controller.get_sleep_state("guild") == SleepState.WAKING_UP
        assert controller.get_initiative_probability_multiplier("guild") == pytest.approx(0.3)

        clock.advance(hours=2)

        assert controller.get_sleep_state("guild") == SleepState.AWAKE
        assert controller.get_initiative_probability_multiplier("guild") == pytest.approx(1.0)

    def test_first_message_after_silence_counts(self, controller, registry, clock):
        registry.get_or_create("guild").last_activity = clock.now - timedelta(hours=8)

        controller.record_activity("guild")

        assert controller.is_in_deep_sleep("guild")
        assert registry.get("guild").messages_since_wake_up.value == 1

    def test_wake_up_clears_deep_sleep(self, controller, registry, clock):
        state = registry.get_or_create("guild")
        state.last_activity = clock.now - timedelta(hours=7)
        controller.record_activity("guild")

        assert controller.wake_up("guild") is True
        assert state.is_in_deep_sleep is False
        assert state.messages_since_wake_up.value == 0

    def test_wake_up_from_long_silence_sticks(self, controller, registry, clock):
        state = registry.get_or_create("guild")
        state.last_activity = clock.now - timedelta(hours=30)

        assert controller.wake_up("guild") is True

        assert controller.get_sleep_state("guild") == SleepState.AWAKE
        assert state.last_activity == clock.now
        assert controller.get_initiative_probability_multiplier("guild") > 0

        clock.advance(hours=5)
        assert controller.get_sleep_state("guild") == SleepState.AWAKE


class TestProbabilityMultiplier:

    def test_fresh_scope_is_fully_enabled(self, controller):
        assert controller.get_initiative_probability_multiplier("guild") == 1.0

    def test_record_activity_resets_consecutive(self, controller, clock):
        controller.record_initiative_action("guild")
        controller.record_initiative_action("guild")
        assert controller.get_consecutive_initiatives("guild") == 2

        controller.record_activity("guild")

        assert controller.get_consecutive_initiatives("guild") == 0

    def test_min_spacing_blocks_initiatives(self, controller, clock):
        controller.record_initiative_action("guild")
        clock.advance(minutes=14)
        assert controller.get_initiative_probability_multiplier("guild") == 0.0

        clock.advance(minutes=1)
        assert controller.get_initiative_probability_multiplier("guild") == pytest.approx(0.5)

    def test_consecutive_decay_applies(self, controller, clock):
        controller.record_initiative_action("guild")
        clock.advance(minutes=20)
        controller.record_initiative_action("guild")
        clock.advance(minutes=20)

        # 0.5 ** 2, then the over-limit penalty
        assert controller.get_initiative_probability_multiplier("guild") == pytest.approx(0.025)

    def test_outside_active_hours(self, initiative_config, registry):
        initiative_config.timing.active_hours.enabled = True
        initiative_config.timing.active_hours.start_hour = 9
        initiative_config.timing.active_hours.end_hour = 23

        night = datetime(2024, 6, 1, 3, 0, tzinfo=timezone.utc)
        controller = SleepController(initiative_config, registry, clock=lambda: night)

        assert controller.get_initiative_probability_multiplier("guild") == pytest.approx(0.2)

    def test_active_hours_in_configured_timezone(self, initiative_config, registry):
        initiative_config.timing.active_hours.enabled = True
        initiative_config.timing.active_hours.timezone = "America/New_York"

        # 14:00 UTC is 10:00 in New York during DST
        afternoon = datetime(2024, 6, 1, 14, 0, tzinfo=timezone.utc)
        controller = SleepController(initiative_config, registry, clock=lambda: afternoon)

        assert controller.get_initiative_probability_multiplier("guild") == 1.0

    def test_multiplier_stays_in_unit_range(self, initiative_config, registry, clock):
        initiative_config.deep_sleep.wake_up_probability_multiplier = 1.0
        controller = SleepController(initiative_config, registry, clock=clock)

        for _ in range(5):
            controller.record_initiative_action("guild")
            clock.advance(hours=1)
            value = controller.get_initiative_probability_multiplier("guild")
            assert 0.0 <= value <= 1.0


class TestSleepEvents:

    async def test_transitions_are_published(self, initiative_config, registry, clock):
        bus = EventBus()
        received = []
        bus.subscribe(SleepStateChanged, received.append)
        await bus.start()

        controller = SleepController(initiative_config, registry, bus, clock)
        controller.put_to_sleep("guild", 5)
        controller.wake_up("guild")

        # Let the dispatcher drain the queue
        for _ in range(50):
            if len(received) == 2:
                break
            await asyncio.sleep(0.01)
        await bus.stop()

        assert [(e.old_state, e.new_state) for e in received] == [
            ("awake", "manual_sleep"),
            ("manual_sleep", "awake"),
        ]
