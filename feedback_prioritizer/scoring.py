"""Scoring and intake of classifier output.

Turns raw classifier records into ranked ``FeedbackItem`` objects:
- validates each record independently (bad records are dropped, not fatal)
- clamps or rejects out-of-range urgency/impact
- assigns ids and a shared batch timestamp
- orders by priority score, highest first, keeping input order on ties
"""
import logging
import math
import uuid
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Callable, Iterable, List, Mapping, Optional

from schemas import SENTIMENTS, URGENCY_MAX, URGENCY_MIN, FeedbackItem, IntakeResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "category", "urgency", "impact", "sentiment", "summary")


class RecordRejected(ValueError):
    """Raised internally when a single classifier record cannot be used."""


def _require_text(raw: Mapping[str, Any], field: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str):
        raise RecordRejected(f"missing or non-text field: {field}")
    return value


def _coerce_level(value: Any, field: str, clamp: bool) -> int:
    """Convert a classifier urgency/impact value into an int in [1, 10]."""
    # bool is a Real subclass; the classifier never means True as a score
    if isinstance(value, bool) or not isinstance(value, Real):
        raise RecordRejected(f"non-numeric field: {field}")
    if isinstance(value, int):
        # JSON integers are unbounded and may not fit in a float
        level = value
    elif not math.isfinite(value):
        raise RecordRejected(f"non-finite field: {field}")
    else:
        level = int(math.floor(value + 0.5))
    if URGENCY_MIN <= level <= URGENCY_MAX:
        return level
    if not clamp:
        raise RecordRejected(f"{field} out of range [{URGENCY_MIN}, {URGENCY_MAX}]")

    clamped = max(URGENCY_MIN, min(URGENCY_MAX, level))
    logger.info(f"Clamped out-of-range {field} to {clamped}")
    return clamped


def build_item(
    raw: Mapping[str, Any],
    *,
    item_id: str,
    created_at: datetime,
    clamp: bool = True,
) -> FeedbackItem:
    """Validate one raw record and build a ``FeedbackItem`` from it.

    Raises:
        RecordRejected: If a required field is absent or unusable
    """
    if not isinstance(raw, Mapping):
        raise RecordRejected("record is not an object")

    missing = [field for field in REQUIRED_FIELDS if raw.get(field) is None]
    if missing:
        raise RecordRejected(f"missing required field(s): {', '.join(missing)}")

    title = _require_text(raw, "title").strip()
    if not title:
        raise RecordRejected("empty title")

    sentiment = _require_text(raw, "sentiment").strip().lower()
    if sentiment not in SENTIMENTS:
        raise RecordRejected(f"unknown sentiment: {raw['sentiment']!r}")

    return FeedbackItem(
        id=item_id,
        title=title,
        category=_require_text(raw, "category"),
        urgency=_coerce_level(raw["urgency"], "urgency", clamp),
        impact=_coerce_level(raw["impact"], "impact", clamp),
        sentiment=sentiment,
        summary=_require_text(raw, "summary").strip(),
        created_at=created_at,
    )


def sort_by_priority(items: Iterable[FeedbackItem]) -> List[FeedbackItem]:
    """Return items ordered by descending priority score.

    ``sorted`` is stable, so items with equal scores keep their relative order.
    """
    return sorted(items, key=lambda item: item.priority_score, reverse=True)


def score(
    raw_items: Iterable[Mapping[str, Any]],
    *,
    clamp: bool = True,
    id_factory: Callable[[], Any] = uuid.uuid4,
    now: Optional[datetime] = None,
) -> IntakeResult:
    """Score a batch of classifier records.

    Args:
        raw_items: Records with title, category, urgency, impact, sentiment, summary
        clamp: Clamp out-of-range urgency/impact into [1, 10]; drop the record when False
        id_factory: Produces a new unique id per accepted record
        now: Creation timestamp for the batch (defaults to current UTC time)

    Returns:
        IntakeResult with the ranked items and the number of dropped records
    """
    created_at = now or datetime.now(timezone.utc)
    accepted: List[FeedbackItem] = []
    dropped = 0

    for index, raw in enumerate(raw_items):
        try:
            item = build_item(raw, item_id=str(id_factory()), created_at=created_at, clamp=clamp)
        except RecordRejected as e:
            dropped += 1
            logger.warning(f"Dropped classifier record #{index}: {e}")
            continue
        accepted.append(item)

    if dropped:
        logger.warning(f"Intake dropped {dropped} of {dropped + len(accepted)} records")

    return IntakeResult(items=sort_by_priority(accepted), dropped=dropped)
