"""Unit tests for configuration loading and validation."""

import pytest

from lull.core.config import (
    DeepSleepConfig,
    SystemConfig,
    apply_overrides,
    load_config,
    validate_config,
)


class TestOverrides:

    def test_pascal_case_keys(self):
        config = SystemConfig()

        apply_overrides(config.initiative, {
            "DeepSleep": {"InactivityHoursThreshold": 6, "WakeUpMessageThreshold": 5},
            "Timing": {"ActiveHours": {"Enabled": True, "StartHour": 22, "EndHour": 6}},
        })

        assert config.initiative.deep_sleep.inactivity_hours_threshold == 6
        assert config.initiative.deep_sleep.wake_up_message_threshold == 5
        assert config.initiative.timing.active_hours.enabled is True
        assert config.initiative.timing.active_hours.start_hour == 22

    def test_unknown_keys_are_skipped(self):
        deep_sleep = DeepSleepConfig()

        apply_overrides(deep_sleep, {"NotARealSetting": 1, "enabled": False})

        assert deep_sleep.enabled is False
        assert not hasattr(deep_sleep, "not_a_real_setting")


class TestLoadConfig:

    def test_yaml_overlay_and_env(self, tmp_path, monkeypatch):
        path = tmp_path / "initiative.yaml"
        path.write_text(
            "Initiative:\n"
            "  Engagement:\n"
            "    MaxConsecutiveInitiatives: 4\n"
            "scheduler:\n"
            "  interval_scale: 2.0\n"
        )
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DISCORD_TOKEN", "abc")
        monkeypatch.setenv("MIN_MINUTES_BETWEEN_INITIATIVES", "30")
        monkeypatch.setenv("DEEP_SLEEP_ENABLED", "false")

        config = load_config(str(path))

        assert config.initiative.engagement.max_consecutive_initiatives == 4
        assert config.scheduler.interval_scale == 2.0
        assert config.discord.token == "abc"
        assert config.initiative.timing.min_minutes_between_initiatives == 30
        assert config.initiative.deep_sleep.enabled is False

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BOT_NAME", raising=False)

        config = load_config(str(tmp_path / "missing.yaml"))

        assert config.initiative.deep_sleep.inactivity_hours_threshold == 24
        assert config.persona.name == "Lull"


class TestValidateConfig:

    def test_valid_config(self, test_config):
        assert validate_config(test_config) == []

    def test_missing_token(self):
        errors = validate_config(SystemConfig())

        assert any("DISCORD_TOKEN" in e for e in errors)

    @pytest.mark.parametrize("mutate,fragment", [
        (lambda c: setattr(c.initiative.deep_sleep, "inactivity_hours_threshold", 0), "InactivityHoursThreshold"),
        (lambda c: setattr(c.initiative.deep_sleep, "wake_up_probability_multiplier", 1.5), "WakeUpProbabilityMultiplier"),
        (lambda c: setattr(c.initiative.engagement, "consecutive_reduction_factor", 0), "ConsecutiveReductionFactor"),
        (lambda c: setattr(c.initiative.timing.active_hours, "end_hour", 24), "EndHour"),
        (lambda c: setattr(c.scheduler, "interval_scale", 0), "interval_scale"),
    ])
    def test_range_errors(self, test_config, mutate, fragment):
        mutate(test_config)

        errors = validate_config(test_config)

        assert any(fragment in e for e in errors)
