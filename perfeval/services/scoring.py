"""
KPI and company value scoring.

Converts a (target, achieved, policy) triple or a set of behavior ratings
into a 1.0-5.0 performance score. Pure functions: no state, no I/O.

Both entry points are total. Unknown policies and unusable ratings fall back
to the neutral score instead of raising, so a single bad row never blocks an
evaluation.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from numbers import Number
from typing import Any, Iterable, Optional

from perfeval.models.kpi import TargetPolicy

NEUTRAL_SCORE = 3.0
MIN_RATING = 1
MAX_RATING = 5

# Aliases accepted in imported spreadsheets
TARGET_POLICY_ALIASES = {
    "higher": TargetPolicy.HIGHER_BETTER,
    "increase": TargetPolicy.HIGHER_BETTER,
    "growth": TargetPolicy.HIGHER_BETTER,
    "lower": TargetPolicy.LOWER_BETTER,
    "decrease": TargetPolicy.LOWER_BETTER,
    "reduction": TargetPolicy.LOWER_BETTER,
    "range": TargetPolicy.TARGET_RANGE,
    "balanced": TargetPolicy.TARGET_RANGE,
}


def round_half_up(value: float, places: int) -> float:
    """Round like a spreadsheet does (2.25 -> 2.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def to_number(value: Any) -> Optional[float]:
    """
    Return value as a float if it is numeric (numbers or numeric strings),
    otherwise None. Booleans are not numbers here.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Number):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(Decimal(value.strip()))
        except (InvalidOperation, ValueError):
            return None
    else:
        return None
    # NaN and infinities cannot be scored
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def score_from_target(target: float, achieved: float, policy: str = TargetPolicy.HIGHER_BETTER.value) -> float:
    """
    Score an achieved value against its target.

    Args:
        target: Target value from the job template
        achieved: Value actually achieved in the period
        policy: higher_better | lower_better | target_range

    Returns:
        One of 1.0-5.0; 0.0 when target is zero; 3.0 for an unknown policy
    """
    target = float(target)
    achieved = float(achieved)

    if target == 0:
        return 0.0

    policy = policy.value if isinstance(policy, TargetPolicy) else policy

    if policy == TargetPolicy.HIGHER_BETTER.value:
        percentage = achieved / target * 100
        if percentage >= 100:
            return 5.0
        if percentage >= 90:
            return 4.0
        if percentage >= 80:
            return 3.0
        if percentage >= 70:
            return 2.0
        return 1.0

    if policy == TargetPolicy.LOWER_BETTER.value:
        if achieved > target:
            return 1.0
        improvement = (target - achieved) / target * 100
        if improvement >= 20:
            return 5.0
        if improvement >= 10:
            return 4.0
        if improvement >= 5:
            return 3.0
        # Met the target with minimal improvement; still better than missing it
        return 2.0

    if policy == TargetPolicy.TARGET_RANGE.value:
        variance = abs(achieved - target) / target * 100
        if variance <= 2:
            return 5.0
        if variance <= 5:
            return 4.0
        if variance <= 10:
            return 3.0
        if variance <= 15:
            return 2.0
        return 1.0

    return NEUTRAL_SCORE


def score_from_behaviors(ratings: Optional[Iterable[Any]]) -> float:
    """
    Average behavior ratings into a company value score.

    Only numeric ratings between 1 and 5 (inclusive) are counted; anything
    else is skipped. Returns the mean rounded to one decimal, or 3.0 when no
    rating qualifies.
    """
    if not ratings:
        return NEUTRAL_SCORE

    kept = []
    for rating in ratings:
        number = to_number(rating)
        if number is not None and MIN_RATING <= number <= MAX_RATING:
            kept.append(number)

    if not kept:
        return NEUTRAL_SCORE
    return round_half_up(sum(kept) / len(kept), 1)


def normalize_target_policy(raw: Optional[str]) -> str:
    """
    Map a free-text target type (e.g. from a CSV column) onto a policy.

    Blank or unrecognized values default to higher_better.
    """
    value = (raw or "").strip().lower()
    if not value:
        return TargetPolicy.HIGHER_BETTER.value
    if value in TARGET_POLICY_ALIASES:
        return TARGET_POLICY_ALIASES[value].value
    if value in {policy.value for policy in TargetPolicy}:
        return value
    return TargetPolicy.HIGHER_BETTER.value
