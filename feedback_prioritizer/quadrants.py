"""Urgency/impact quadrant partitioning."""
from typing import Iterable

from schemas import FeedbackItem, PriorityThresholds, Quadrants

QUADRANT_LABELS = {
    "critical": "Critical",
    "urgent": "Urgent",
    "important": "Important",
    "low": "Low Priority",
}

DEFAULT_THRESHOLDS = PriorityThresholds()


def quadrant_for(item: FeedbackItem, thresholds: PriorityThresholds = DEFAULT_THRESHOLDS) -> str:
    """Return the quadrant name for a single item.

    Urgency and impact are "high" at or above their threshold (inclusive).
    """
    high_urgency = item.urgency >= thresholds.high_urgency
    high_impact = item.impact >= thresholds.high_impact

    if high_urgency and high_impact:
        return "critical"
    if high_urgency:
        return "urgent"
    if high_impact:
        return "important"
    return "low"


def partition(
    items: Iterable[FeedbackItem],
    thresholds: PriorityThresholds = DEFAULT_THRESHOLDS,
) -> Quadrants:
    """Bucket items into the four quadrants, preserving input order in each."""
    quadrants = Quadrants()
    for item in items:
        getattr(quadrants, quadrant_for(item, thresholds)).append(item)
    return quadrants
