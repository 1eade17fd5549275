"""Critical-priority alert rule for scored feedback."""
import logging
from typing import List, Optional, Sequence

from config import config
from models import NotificationSettingsRecord
from schemas import FeedbackItem

logger = logging.getLogger(__name__)


class AlertService:
    """Decides which items warrant a critical alert.

    Only the rule lives here ("priority score >= threshold"). Delivery to
    email or Slack is handled outside this service; flagged items are logged.
    """

    def __init__(self, default_threshold: Optional[int] = None):
        """Initialize alert service.

        Args:
            default_threshold: Threshold when no settings are stored (default from config)
        """
        self.default_threshold = default_threshold or config.CRITICAL_ALERT_THRESHOLD

    @staticmethod
    def critical_items(
        items: Sequence[FeedbackItem],
        threshold: int
    ) -> List[FeedbackItem]:
        """Return items whose priority score is at or above the threshold."""
        return [item for item in items if item.priority_score >= threshold]

    def evaluate(
        self,
        items: Sequence[FeedbackItem],
        settings: Optional[NotificationSettingsRecord] = None
    ) -> List[FeedbackItem]:
        """Apply the stored notification preferences to a scored batch.

        Args:
            items: Scored feedback items
            settings: Stored preferences; the config default applies when None

        Returns:
            Items that should be alerted on (empty when alerts are disabled)
        """
        if settings is not None and not settings.enable_critical_alerts:
            logger.info("Critical alerts disabled in notification settings")
            return []

        threshold = settings.critical_threshold if settings is not None else self.default_threshold
        flagged = self.critical_items(items, threshold)

        for item in flagged:
            logger.warning(
                f"ALERT: Feedback {item.id} requires attention - "
                f"Priority: {item.priority_score} (threshold {threshold}), "
                f"Category: {item.category}, Title: {item.title}"
            )

        return flagged
