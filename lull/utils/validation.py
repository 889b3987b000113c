"""Input validation utilities."""

import re
from typing import Optional


MAX_SLEEP_MINUTES = 24 * 60


class ValidationError(Exception):
    """Validation error."""
    pass


class InvalidSleepDuration(ValidationError, ValueError):
    """Manual sleep duration outside (0, 1440] minutes."""
    pass


def validate_sleep_minutes(minutes: int) -> int:
    """Ensure a manual sleep duration is within 1 minute and 24 hours."""
    if minutes <= 0:
        raise InvalidSleepDuration("Duration must be positive")

    if minutes > MAX_SLEEP_MINUTES:
        raise InvalidSleepDuration("Duration cannot exceed 24 hours")

    return minutes


def parse_duration_minutes(text: str) -> int:
    """
    Parse an operator duration such as "30", "30m", "2h" or "1h30m".

    Raises:
        ValidationError: if the text is not a duration
    """
    value = (text or "").strip().lower()
    if value.isdigit():
        return int(value)

    match = re.fullmatch(r'(?:(\d+)\s*h)?\s*(?:(\d+)\s*m(?:in)?)?', value)
    if not value or not match or not any(match.groups()):
        raise ValidationError(f"Invalid duration: {text!r}")

    hours, minutes = match.groups()
    return int(hours or 0) * 60 + int(minutes or 0)


def validate_discord_id(value: Optional[str]) -> bool:
    """Validate Discord user/channel/guild ID."""
    if not value:
        return False

    # Discord IDs are numeric snowflakes
    return value.isdigit() and len(value) >= 17


def validate_hour(hour: int) -> bool:
    """Validate hour of day."""
    return 0 <= hour <= 23


def validate_probability(value: float) -> bool:
    """Validate a probability or multiplier in [0, 1]."""
    return 0.0 <= value <= 1.0


def sanitize_message(content: str, max_length: int = 2000) -> str:
    """Sanitize and truncate message content."""
    # Remove control characters except newlines and tabs
    sanitized = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]', '', content)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length-3] + "..."

    return sanitized.strip()
