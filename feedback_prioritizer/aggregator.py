"""Dashboard aggregations over stored feedback items.

All functions are read-only over their input and never raise on
well-formed ``FeedbackItem`` collections.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from quadrants import DEFAULT_THRESHOLDS, partition
from schemas import SENTIMENTS, AnalyticsSummary, FeedbackItem, PriorityThresholds, TrendPoint


def category_distribution(items: Sequence[FeedbackItem]) -> Dict[str, int]:
    """Count items per category.

    Categories are compared verbatim (case-sensitive, untrimmed); keys appear
    in order of first occurrence.
    """
    counts: Dict[str, int] = {}
    for item in items:
        counts[item.category] = counts.get(item.category, 0) + 1
    return counts


def sentiment_distribution(items: Sequence[FeedbackItem], zero_fill: bool = True) -> Dict[str, int]:
    """Count items per sentiment.

    With ``zero_fill`` every known sentiment is present (positive, neutral,
    negative order) and the counts sum to ``len(items)``. Without it, only
    sentiments that occur are returned, in order of first occurrence.
    """
    counts: Dict[str, int] = {sentiment: 0 for sentiment in SENTIMENTS} if zero_fill else {}
    for item in items:
        counts[item.sentiment] = counts.get(item.sentiment, 0) + 1
    return counts


def _round_one_decimal(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def utc_today() -> date:
    """Current UTC date, the same clock intake uses to stamp ``created_at``."""
    return datetime.now(timezone.utc).date()


def _day_label(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def trend(
    items: Sequence[FeedbackItem],
    today: Optional[date] = None,
    days: int = 7,
) -> List[TrendPoint]:
    """Build the trailing daily trend, oldest day first.

    Always returns ``days`` points, ``today - (days - 1)`` through ``today``.
    Items are bucketed by the calendar date of their own ``created_at``; no
    timezone conversion is applied. Empty days report ``avg_priority == 0``.
    ``today`` defaults to the current UTC date.

    Raises:
        ValueError: If ``days`` is less than 1
    """
    if days < 1:
        raise ValueError(f"Trend window must cover at least one day, got {days}")

    today = today or utc_today()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    buckets: Dict[date, List[int]] = {day: [] for day in window}
    for item in items:
        bucket = buckets.get(item.created_at.date())
        if bucket is not None:
            bucket.append(item.priority_score)

    points = []
    for day in window:
        scores = buckets[day]
        avg = _round_one_decimal(sum(scores) / len(scores)) if scores else 0.0
        points.append(TrendPoint(day=day, label=_day_label(day), avg_priority=avg, count=len(scores)))
    return points


def summarize(
    items: Sequence[FeedbackItem],
    today: Optional[date] = None,
    thresholds: PriorityThresholds = DEFAULT_THRESHOLDS,
    days: int = 7,
    zero_fill: bool = True,
) -> AnalyticsSummary:
    """Compute every dashboard aggregate for one snapshot of items."""
    return AnalyticsSummary(
        total_items=len(items),
        categories=category_distribution(items),
        sentiments=sentiment_distribution(items, zero_fill=zero_fill),
        trend=trend(items, today=today, days=days),
        quadrant_counts=partition(items, thresholds).counts(),
    )
