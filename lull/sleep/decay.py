"""Pure probability-shaping functions used by the sleep controller."""

# Extra damping once the consecutive limit is reached. Keeps one more
# initiative possible but rare.
OVER_LIMIT_PENALTY = 0.1


def consecutive_decay(
    consecutive_count: int,
    reduction_factor: float,
    max_consecutive: int
) -> float:
    """
    Probability factor after `consecutive_count` unanswered initiatives.

    reduction_factor ** k, times OVER_LIMIT_PENALTY once k >= max_consecutive.
    """
    count = max(consecutive_count, 0)
    factor = reduction_factor ** count
    if count >= max_consecutive:
        factor *= OVER_LIMIT_PENALTY
    return factor


def is_within_active_hours(hour: int, start_hour: int, end_hour: int) -> bool:
    """
    Check whether an hour falls inside [start_hour, end_hour).

    Windows may wrap past midnight (e.g. 22 -> 6). start == end means
    the whole day is active.
    """
    if start_hour == end_hour:
        return True
    if start_hour < end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]."""
    return min(max(value, 0.0), 1.0)
