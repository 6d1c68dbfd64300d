"""
Score statistics over historical evaluation results.

The functions here work on result rows that have already been narrowed to a
single KPI or Value (or, for the cross-value summary, to active Values). Each
row carries ``score``, optionally ``achieved_value``, and the parent
evaluation's ``created_at``.

Window rule: the [period_start, period_end] filter is applied only when both
bounds are given. A single bound is ignored, exactly as if neither were
supplied.

"No data" is reported as count 0 with null aggregates, never as 0.0.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from perfeval.services.scoring import to_number

HIGH_PERFORMER_THRESHOLD = 4.0
LOW_PERFORMER_THRESHOLD = 3.0

Bound = Optional[Union[date, datetime, str]]


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def coerce_timestamp(value: Any, end_of_day: bool = False) -> Optional[datetime]:
    """
    Normalize a stored or supplied timestamp to a naive UTC datetime.

    SQLite hands timestamps back as strings, PostgreSQL as aware datetimes.
    A bare date becomes midnight, or 23:59:59.999999 when end_of_day is set
    so that an end date covers the whole day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    if isinstance(value, str):
        raw = value.strip()
        if len(raw) == 10:
            return coerce_timestamp(date.fromisoformat(raw), end_of_day=end_of_day)
        return _as_naive_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported timestamp value: {value!r}")


def resolve_window(period_start: Bound, period_end: Bound) -> Optional[Tuple[datetime, datetime]]:
    """Return the closed interval to filter on, or None when it does not apply."""
    if not period_start or not period_end:
        return None
    return coerce_timestamp(period_start), coerce_timestamp(period_end, end_of_day=True)


def window_condition(column: str, period_start: Bound, period_end: Bound) -> Tuple[str, Dict[str, Any]]:
    """
    SQL fragment and parameters narrowing a query to the window, so only
    in-period rows are loaded. Empty when the window does not apply.
    """
    window = resolve_window(period_start, period_end)
    if window is None:
        return "", {}
    return f" AND {column} BETWEEN :window_start AND :window_end", {"window_start": window[0], "window_end": window[1]}


def filter_window(rows: Iterable[Dict[str, Any]], period_start: Bound = None,
                  period_end: Bound = None, key: str = "created_at") -> List[Dict[str, Any]]:
    rows = list(rows)
    window = resolve_window(period_start, period_end)
    if window is None:
        return rows

    start, end = window
    kept = []
    for row in rows:
        created_at = coerce_timestamp(row.get(key))
        if created_at is not None and start <= created_at <= end:
            kept.append(row)
    return kept


def _summarize(values: Sequence[float]) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    if not values:
        return None, None, None
    return sum(values) / len(values), min(values), max(values)


def _numbers(rows: Iterable[Dict[str, Any]], field: str) -> List[float]:
    numbers = []
    for row in rows:
        number = to_number(row.get(field))
        if number is not None:
            numbers.append(number)
    return numbers


def kpi_statistics(rows: Iterable[Dict[str, Any]], period_start: Bound = None,
                   period_end: Bound = None) -> Dict[str, Any]:
    """
    Summarize KPI results: count, avg/min/max of score and of achieved_value.
    """
    rows = filter_window(rows, period_start, period_end)
    average_score, min_score, max_score = _summarize(_numbers(rows, "score"))
    average_achieved, min_achieved, max_achieved = _summarize(_numbers(rows, "achieved_value"))

    return {
        "total_evaluations": len(rows),
        "average_score": average_score,
        "min_score": min_score,
        "max_score": max_score,
        "average_achieved": average_achieved,
        "min_achieved": min_achieved,
        "max_achieved": max_achieved,
    }


def _performer_buckets(scores: Sequence[float]) -> Tuple[int, int]:
    high = sum(1 for score in scores if score >= HIGH_PERFORMER_THRESHOLD)
    low = sum(1 for score in scores if score < LOW_PERFORMER_THRESHOLD)
    return high, low


def value_statistics(rows: Iterable[Dict[str, Any]], period_start: Bound = None,
                     period_end: Bound = None) -> Dict[str, Any]:
    """
    Summarize Value results: count, avg/min/max of score and performer buckets.
    """
    rows = filter_window(rows, period_start, period_end)
    scores = _numbers(rows, "score")
    average_score, min_score, max_score = _summarize(scores)
    high, low = _performer_buckets(scores)

    return {
        "total_evaluations": len(rows),
        "average_score": average_score,
        "min_score": min_score,
        "max_score": max_score,
        "high_performers": high,
        "low_performers": low,
    }


def all_values_statistics(values: Iterable[Dict[str, Any]], rows: Iterable[Dict[str, Any]],
                          period_start: Bound = None, period_end: Bound = None) -> List[Dict[str, Any]]:
    """
    One summary per active Value, in report order (sort_order, value_name).

    Values without results in the window are still listed, with count 0 and
    null aggregates. Results are bucketed by ``value_id`` in a single pass.
    """
    buckets: Dict[Any, List[float]] = {}
    counts: Dict[Any, int] = {}
    for row in filter_window(rows, period_start, period_end):
        value_id = row.get("value_id")
        counts[value_id] = counts.get(value_id, 0) + 1
        score = to_number(row.get("score"))
        if score is not None:
            buckets.setdefault(value_id, []).append(score)

    ordered = sorted(values, key=lambda v: (v.get("sort_order") or 0, v.get("value_name") or ""))

    summary = []
    for value in ordered:
        scores = buckets.get(value["id"], [])
        average_score, min_score, max_score = _summarize(scores)
        high, low = _performer_buckets(scores)
        summary.append({
            "value_id": value["id"],
            "value_name": value.get("value_name"),
            "description": value.get("description"),
            "sort_order": value.get("sort_order"),
            "total_evaluations": counts.get(value["id"], 0),
            "average_score": average_score,
            "min_score": min_score,
            "max_score": max_score,
            "high_performers": high,
            "low_performers": low,
        })
    return summary
