"""Configuration management for the feedback prioritizer."""
import os
from dotenv import load_dotenv

from schemas import PriorityThresholds

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Application configuration."""

    # AI gateway (OpenAI-compatible chat completions)
    AI_API_KEY = os.getenv("AI_API_KEY", "")
    AI_BASE_URL = os.getenv("AI_BASE_URL", "https://ai.gateway.lovable.dev/v1")
    AI_MODEL = os.getenv("AI_MODEL", "google/gemini-2.5-flash")
    AI_TIMEOUT_SECONDS = int(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    AI_PROVIDER_ENABLED = _env_bool("AI_PROVIDER_ENABLED", "true")

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./feedback.db")

    # Prioritization constants
    HIGH_URGENCY_THRESHOLD = int(os.getenv("HIGH_URGENCY_THRESHOLD", "6"))
    HIGH_IMPACT_THRESHOLD = int(os.getenv("HIGH_IMPACT_THRESHOLD", "6"))
    CRITICAL_ALERT_THRESHOLD = int(os.getenv("CRITICAL_ALERT_THRESHOLD", "14"))

    # Out-of-range urgency/impact: clamp into [1, 10] when true, drop the item when false
    CLAMP_OUT_OF_RANGE = _env_bool("CLAMP_OUT_OF_RANGE", "true")

    # Analytics
    SENTIMENT_ZERO_FILL = _env_bool("SENTIMENT_ZERO_FILL", "true")
    TREND_DAYS = int(os.getenv("TREND_DAYS", "7"))
    if TREND_DAYS < 1:
        raise ValueError(f"TREND_DAYS must be at least 1, got {TREND_DAYS}")
    ANALYTICS_LIMIT = int(os.getenv("ANALYTICS_LIMIT", "100"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def thresholds(self) -> PriorityThresholds:
        """Build the prioritization thresholds from the current settings."""
        return PriorityThresholds(
            high_urgency=self.HIGH_URGENCY_THRESHOLD,
            high_impact=self.HIGH_IMPACT_THRESHOLD,
            critical_alert=self.CRITICAL_ALERT_THRESHOLD,
        )


config = Config()
