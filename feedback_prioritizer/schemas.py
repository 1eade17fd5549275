"""Pydantic schemas for feedback items, analytics, and request/response validation."""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

Sentiment = Literal["positive", "neutral", "negative"]

SENTIMENTS: tuple = ("positive", "neutral", "negative")

URGENCY_MIN = 1
URGENCY_MAX = 10


class RawClassification(TypedDict, total=False):
    """One record as returned by the classifier, before intake validation."""

    title: Any
    category: Any
    urgency: Any
    impact: Any
    sentiment: Any
    summary: Any


class PriorityThresholds(BaseModel):
    """Tunable boundaries for quadrant bucketing and critical alerts."""

    model_config = ConfigDict(frozen=True)

    high_urgency: int = Field(6, ge=URGENCY_MIN, le=URGENCY_MAX)
    high_impact: int = Field(6, ge=URGENCY_MIN, le=URGENCY_MAX)
    critical_alert: int = Field(14, ge=2, le=20)


class FeedbackItem(BaseModel):
    """A single classified feedback item.

    ``priority_score`` is always derived from ``urgency + impact``; it is
    never accepted as input.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "0b7f6c1e-3f2a-4d7e-9a51-2f3c0f6e1a10",
                "title": "Checkout crashes on submit",
                "category": "Bug",
                "urgency": 9,
                "impact": 8,
                "sentiment": "negative",
                "summary": "Several users report the checkout page crashing.",
                "priority_score": 17,
                "created_at": "2024-01-10T14:22:05+00:00"
            }
        }
    )

    id: str
    title: str = Field(..., min_length=1)
    category: str
    urgency: int = Field(..., ge=URGENCY_MIN, le=URGENCY_MAX)
    impact: int = Field(..., ge=URGENCY_MIN, le=URGENCY_MAX)
    sentiment: Sentiment
    summary: str
    created_at: datetime

    @computed_field
    @property
    def priority_score(self) -> int:
        return self.urgency + self.impact


class IntakeResult(BaseModel):
    """Outcome of scoring one classifier batch."""

    items: List[FeedbackItem] = Field(default_factory=list)
    dropped: int = 0


class Quadrants(BaseModel):
    """Urgency/impact partition of a set of items."""

    critical: List[FeedbackItem] = Field(default_factory=list)
    urgent: List[FeedbackItem] = Field(default_factory=list)
    important: List[FeedbackItem] = Field(default_factory=list)
    low: List[FeedbackItem] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "critical": len(self.critical),
            "urgent": len(self.urgent),
            "important": len(self.important),
            "low": len(self.low),
        }


class TrendPoint(BaseModel):
    """Aggregate for one calendar day of the trailing window."""

    day: date
    label: str
    avg_priority: float
    count: int


class AnalyticsSummary(BaseModel):
    """Dashboard analytics over a snapshot of stored items."""

    total_items: int
    categories: Dict[str, int]
    sentiments: Dict[str, int]
    trend: List[TrendPoint]
    quadrant_counts: Dict[str, int]


class FeedbackRequest(BaseModel):
    """Request schema for feedback analysis."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "The new dashboard is great, but exporting reports takes forever "
                        "and the app crashed twice during checkout."
            }
        }
    )

    text: str = Field(..., min_length=1, max_length=20000, description="Raw customer feedback, one or many entries")

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Feedback text must not be blank")
        return value


class AnalyzeResponse(BaseModel):
    """Response schema for an analyzed feedback batch."""

    items: List[FeedbackItem]
    dropped: int = Field(..., description="Classifier records rejected at intake")
    quadrants: Dict[str, int]
    alerts: List[str] = Field(default_factory=list, description="IDs of items at or above the critical threshold")


class NotificationSettingsIn(BaseModel):
    """Notification preferences as submitted by the user."""

    email: str = Field(..., min_length=3, max_length=320)
    enable_weekly_reports: bool = True
    enable_critical_alerts: bool = True
    critical_threshold: int = Field(14, ge=2, le=20)
    slack_webhook_url: Optional[str] = None


class NotificationSettingsOut(NotificationSettingsIn):
    """Stored notification preferences."""

    id: int
