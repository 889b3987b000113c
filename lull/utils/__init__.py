"""Utility functions and helpers.

This module provides common utilities used throughout the system:
- Logging configuration
- Clock injection for time-dependent services
- Input validation and sanitization

Usage:
    from lull.utils import setup_logging, utc_now, parse_duration_minutes

    setup_logging(debug_mode=True, log_level="DEBUG")
    minutes = parse_duration_minutes("1h30m")  # 90
"""

from lull.utils.logging_config import setup_logging
from lull.utils.clock import Clock, utc_now
from lull.utils.validation import (
    MAX_SLEEP_MINUTES,
    ValidationError,
    InvalidSleepDuration,
    validate_sleep_minutes,
    parse_duration_minutes,
    validate_discord_id,
    validate_hour,
    validate_probability,
    sanitize_message,
)

__all__ = [
    # Logging
    "setup_logging",

    # Time
    "Clock",
    "utc_now",

    # Validation
    "MAX_SLEEP_MINUTES",
    "ValidationError",
    "InvalidSleepDuration",
    "validate_sleep_minutes",
    "parse_duration_minutes",
    "validate_discord_id",
    "validate_hour",
    "validate_probability",
    "sanitize_message",
]
