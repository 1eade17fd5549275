"""CSV export of the priority list."""
import csv
import io
from typing import Iterable

from schemas import FeedbackItem

CSV_HEADER = ["Title", "Category", "Urgency", "Impact", "Priority Score", "Sentiment", "Summary"]
CSV_FILENAME = "feedback-priority-list.csv"


def items_to_csv(items: Iterable[FeedbackItem]) -> str:
    """Render items as CSV, one row per item in the given order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow([
            item.title,
            item.category,
            item.urgency,
            item.impact,
            item.priority_score,
            item.sentiment,
            item.summary
        ])
    return buffer.getvalue()
