"""End-to-end analysis: classify, score, store, flag alerts."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ai_analyzer import AIAnalyzer
from alerting import AlertService
from config import config
from database import get_notification_settings, save_feedback_items
from schemas import FeedbackItem, IntakeResult
from scoring import score

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Result of analyzing one feedback submission."""

    intake: IntakeResult
    alerts: List[FeedbackItem] = field(default_factory=list)


class FeedbackPipeline:
    """Runs one feedback submission through the full workflow."""

    def __init__(
        self,
        analyzer: Optional[AIAnalyzer] = None,
        alert_service: Optional[AlertService] = None
    ):
        self.analyzer = analyzer or AIAnalyzer()
        self.alert_service = alert_service or AlertService()

    async def analyze(self, db: AsyncSession, feedback_text: str) -> AnalysisOutcome:
        """Analyze feedback text and persist the resulting items.

        Classifier failures propagate unchanged; nothing is stored for a
        failed batch.
        """
        raw_items = await self.analyzer.classify(feedback_text)

        intake = score(raw_items, clamp=config.CLAMP_OUT_OF_RANGE)
        logger.info(f"Analyzed {len(intake.items)} feedback items ({intake.dropped} dropped)")

        await save_feedback_items(db, intake.items)

        settings = await get_notification_settings(db)
        alerts = self.alert_service.evaluate(intake.items, settings)

        return AnalysisOutcome(intake=intake, alerts=alerts)
