"""Unit tests for validation helpers, atomic cells and feature toggles."""

import threading
import pytest

from lull.core.atomic import AtomicCounter, AtomicValue
from lull.core.config import TogglesConfig
from lull.toggles.service import ToggleNames, ToggleService
from lull.utils.validation import (
    ValidationError,
    parse_duration_minutes,
    sanitize_message,
    validate_discord_id,
)


class TestDurations:

    @pytest.mark.parametrize("text,minutes", [
        ("30", 30), ("30m", 30), ("45min", 45), ("2h", 120), ("1h30m", 90), (" 2H ", 120),
    ])
    def test_parse(self, text, minutes):
        assert parse_duration_minutes(text) == minutes

    @pytest.mark.parametrize("text", ["", "soon", "h", "30s", "-5"])
    def test_parse_rejects(self, text):
        with pytest.raises(ValidationError):
            parse_duration_minutes(text)


class TestSanitize:

    def test_strips_control_characters(self):
        assert sanitize_message("hi\x00 there\x07") == "hi there"

    def test_truncates_to_limit(self):
        text = sanitize_message("x" * 2500)

        assert len(text) == 2000
        assert text.endswith("...")


def test_discord_ids():
    assert validate_discord_id("123456789012345678")
    assert not validate_discord_id("abc")
    assert not validate_discord_id(None)


class TestAtomic:

    def test_counter_increment_and_reset(self):
        counter = AtomicCounter()

        assert counter.increment() == 1
        assert counter.increment(2) == 3
        assert counter.reset() == 3
        assert counter.value == 0

    def test_compare_exchange(self):
        cell = AtomicValue(1.0)

        assert cell.compare_exchange(1.0, 2.0)
        assert not cell.compare_exchange(1.0, 3.0)
        assert cell.value == 2.0

    def test_concurrent_increments_are_not_lost(self):
        counter = AtomicCounter()

        def work():
            for _ in range(1000):
                counter.increment()

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.value == 8000


class TestToggleService:

    async def test_defaults_and_overrides(self):
        toggles = ToggleService(TogglesConfig())

        assert await toggles.is_enabled("guild", ToggleNames.ENABLE_LIVE_JOB)
        assert not await toggles.is_enabled("guild", "SomethingElse")

        toggles.set_toggle("guild", ToggleNames.ENABLE_LIVE_JOB, False)

        assert not await toggles.is_enabled("guild", ToggleNames.ENABLE_LIVE_JOB)
        assert await toggles.is_enabled("other", ToggleNames.ENABLE_LIVE_JOB)

        toggles.clear_toggle("guild", ToggleNames.ENABLE_LIVE_JOB)
        assert await toggles.is_enabled("guild", ToggleNames.ENABLE_LIVE_JOB)

    def test_get_toggles_merges_overrides(self):
        toggles = ToggleService(TogglesConfig(defaults={"EnableLiveJob": True, "Extra": False}))
        toggles.set_toggle("guild", "Extra", True)

        assert toggles.get_toggles("guild") == {"EnableLiveJob": True, "Extra": True}
        assert toggles.get_toggles("other") == {"EnableLiveJob": True, "Extra": False}
