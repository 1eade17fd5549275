"""Database models for feedback items and notification settings."""
from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.orm import declarative_base

from schemas import FeedbackItem

Base = declarative_base()


class FeedbackItemRecord(Base):
    """Stored feedback item."""

    __tablename__ = "feedback_items"

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    urgency = Column(Integer, nullable=False)
    impact = Column(Integer, nullable=False)
    sentiment = Column(String(20), nullable=False)  # positive, neutral, negative
    summary = Column(Text, nullable=False, default="")
    # Written from urgency + impact at insert; ordering/filtering only, never read back
    priority_score = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True, default=lambda: datetime.now(UTC))

    @classmethod
    def from_item(cls, item: FeedbackItem) -> "FeedbackItemRecord":
        return cls(
            id=item.id,
            title=item.title,
            category=item.category,
            urgency=item.urgency,
            impact=item.impact,
            sentiment=item.sentiment,
            summary=item.summary,
            priority_score=item.priority_score,
            created_at=item.created_at,
        )

    def to_item(self) -> FeedbackItem:
        """Convert the row back into a domain item (score is recomputed)."""
        return FeedbackItem(
            id=self.id,
            title=self.title,
            category=self.category,
            urgency=self.urgency,
            impact=self.impact,
            sentiment=self.sentiment,
            summary=self.summary,
            created_at=self.created_at,
        )


class NotificationSettingsRecord(Base):
    """Single-row notification preferences."""

    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False)
    enable_weekly_reports = Column(Boolean, nullable=False, default=True)
    enable_critical_alerts = Column(Boolean, nullable=False, default=True)
    critical_threshold = Column(Integer, nullable=False, default=14)
    slack_webhook_url = Column(Text, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC)
    )

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "email": self.email,
            "enable_weekly_reports": self.enable_weekly_reports,
            "enable_critical_alerts": self.enable_critical_alerts,
            "critical_threshold": self.critical_threshold,
            "slack_webhook_url": self.slack_webhook_url,
        }
