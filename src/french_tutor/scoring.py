"""Submission scoring with partial credit, time bonus and penalties."""
import math
from typing import Optional

from french_tutor.models import ScoringPolicy

DEFAULT_POLICY = ScoringPolicy()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def time_bonus(point_value: int, elapsed_ms: int, time_limit_seconds: Optional[float], bonus_factor: float) -> int:
    if not time_limit_seconds:
        return 0
    remaining_ratio = max(0.0, (time_limit_seconds - elapsed_ms / 1000) / time_limit_seconds)
    return math.floor(point_value * remaining_ratio * bonus_factor)


def score(
    unit_results,
    point_value: int,
    elapsed_ms: int,
    time_limit_seconds: Optional[float],
    attempts_used: int,
    hint_cost_sum: int,
    partial_credit: bool = True,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> int:
    """Calculate the score for one submission.

    Args:
        unit_results: Per-unit match booleans from the matcher
        point_value: Maximum score for a fully correct answer
        elapsed_ms: Time since the question was presented
        time_limit_seconds: Question time limit, None when untimed
        attempts_used: Submissions so far, including this one
        hint_cost_sum: Total cost of the hints revealed
        partial_credit: Whether partially matched answers earn points
        policy: Bonus factor and attempt penalty

    Returns:
        Integer score between 0 and point_value. A fully correct answer
        always earns at least 1 point.
    """
    units = list(unit_results)
    matched = sum(1 for u in units if u)
    fully_correct = bool(units) and matched == len(units)

    if fully_correct:
        base = point_value
    elif partial_credit and matched:
        base = round_half_up(point_value * matched / len(units))
    else:
        base = 0

    bonus = 0
    if fully_correct:
        bonus = time_bonus(point_value, elapsed_ms, time_limit_seconds, policy.bonus_factor)

    penalties = max(0, attempts_used - 1) * policy.attempt_penalty + hint_cost_sum
    total = base + bonus - penalties

    floor = 1 if fully_correct else 0
    return min(point_value, max(floor, total))
