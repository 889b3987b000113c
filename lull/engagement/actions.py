"""Proactive action selection by activity band."""

import random
from typing import Dict, List, Optional, Sequence, Tuple

from lull.core.config import ActionWeightsConfig
from lull.core.interfaces import EngagementAction

A = EngagementAction

# (minimum activity level, candidate pool); repeats make an action more likely
ACTIVITY_BANDS: Sequence[Tuple[float, Sequence[EngagementAction]]] = (
    # Busy chat: join in
    (1.5, (A.INCREASE_ENGAGEMENT, A.INCREASE_ENGAGEMENT, A.SHARE_OPINION, A.SHARE_OPINION,
           A.ADAPTIVE_RESPONSE, A.ASK_QUESTION, A.ASK_QUESTION, A.SHARE_FUNNY)),
    (1.0, (A.INCREASE_ENGAGEMENT, A.SHARE_OPINION, A.ADAPTIVE_RESPONSE, A.ASK_QUESTION,
           A.ASK_QUESTION, A.SHARE_FUNNY, A.SHARE_INTERESTING)),
    (0.7, (A.ASK_QUESTION, A.SHARE_FUNNY, A.INCREASE_ENGAGEMENT, A.SHARE_OPINION,
           A.ADAPTIVE_RESPONSE, A.SHARE_INTERESTING, A.SHARE_USEFUL, A.START_TOPIC)),
    # Quiet chat: spark something
    (0.0, (A.START_TOPIC, A.START_TOPIC, A.ADAPTIVE_RESPONSE, A.ADAPTIVE_RESPONSE,
           A.SHARE_INTERESTING, A.SHARE_INTERESTING, A.SHARE_USEFUL, A.SHARE_OPINION,
           A.ASK_QUESTION)),
)


def candidates_for_activity(activity_level: float) -> Sequence[EngagementAction]:
    for minimum, pool in ACTIVITY_BANDS:
        if activity_level >= minimum:
            return pool
    return ACTIVITY_BANDS[-1][1]


def weighted_candidates(
    activity_level: float,
    weights: ActionWeightsConfig
) -> Dict[EngagementAction, float]:
    """Band frequency times configured weight, for each candidate action."""
    result: Dict[EngagementAction, float] = {}
    for action in candidates_for_activity(activity_level):
        weight = getattr(weights, action.value, 1.0)
        result[action] = result.get(action, 0.0) + weight
    return result


def select_action(
    activity_level: float,
    weights: ActionWeightsConfig,
    forced: bool = False,
    rng: Optional[random.Random] = None
) -> EngagementAction:
    """Pick the proactive action to attempt."""
    if forced:
        return EngagementAction.ANSWER_MENTION

    rng = rng or random
    pool = {a: w for a, w in weighted_candidates(activity_level, weights).items() if w > 0}
    if not pool:
        return EngagementAction.ADAPTIVE_RESPONSE

    actions: List[EngagementAction] = list(pool)
    return rng.choices(actions, weights=[pool[a] for a in actions], k=1)[0]
