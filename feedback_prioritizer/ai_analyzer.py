"""AI-powered feedback classification through an OpenAI-compatible gateway."""
import json
import asyncio
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from config import config
from errors import (
    ClassifierError,
    ClassifierNotConfiguredError,
    PaymentRequiredError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "analyze_feedback"

SYSTEM_PROMPT = """You are a product feedback analysis AI. Analyze customer feedback and extract individual feedback items with urgency and impact scores.

For each piece of feedback, return:
- title: A clear, concise summary
- category: The feature area (e.g., "UI/UX", "Performance", "Feature Request", "Bug")
- urgency: How quickly it needs addressing (1-10)
- impact: How many users it affects (1-10)
- sentiment: positive, neutral, or negative
- summary: Brief explanation of the issue

Return a JSON array of feedback items."""

ANALYZE_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Extract and analyze individual feedback items",
        "parameters": {
            "type": "object",
            "properties": {
                "items": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "category": {"type": "string"},
                            "urgency": {"type": "number", "minimum": 1, "maximum": 10},
                            "impact": {"type": "number", "minimum": 1, "maximum": 10},
                            "sentiment": {"type": "string", "enum": ["positive", "neutral", "negative"]},
                            "summary": {"type": "string"}
                        },
                        "required": ["title", "category", "urgency", "impact", "sentiment", "summary"]
                    }
                }
            },
            "required": ["items"]
        }
    }
}


class AIAnalyzer:
    """Splits free-text feedback into classified records via a hosted model."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        """Initialize the AI analyzer.

        Args:
            client: Pre-built client (tests); built from config when omitted
        """
        if client is None and config.AI_API_KEY:
            # Retries belong to the caller; a failed call fails the batch
            client = AsyncOpenAI(
                api_key=config.AI_API_KEY,
                base_url=config.AI_BASE_URL,
                max_retries=0,
            )
        self.client = client
        self.model = config.AI_MODEL
        self.timeout = config.AI_TIMEOUT_SECONDS

    @property
    def available(self) -> bool:
        return config.AI_PROVIDER_ENABLED and self.client is not None

    def _build_messages(self, feedback_text: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Analyze this customer feedback and extract individual items:\n\n{feedback_text}"
            }
        ]

    async def classify(self, feedback_text: str) -> List[Dict[str, Any]]:
        """Classify feedback text into raw records.

        Args:
            feedback_text: Free-text feedback, possibly many entries

        Returns:
            Raw classifier records (validated later at intake)

        Raises:
            RateLimitedError: Gateway answered 429
            PaymentRequiredError: Gateway answered 402
            ClassifierNotConfiguredError: No client or provider disabled
            ClassifierError: Any other transport or envelope failure
        """
        if not self.available:
            raise ClassifierNotConfiguredError()

        logger.info("Analyzing feedback with AI...")

        try:
            async with asyncio.timeout(self.timeout):
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=self._build_messages(feedback_text),
                    tools=[ANALYZE_TOOL],
                    tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
                )
        except openai.RateLimitError as e:
            logger.error(f"AI gateway rate limited: {e}")
            raise RateLimitedError() from e
        except openai.APIStatusError as e:
            logger.error(f"AI gateway error: {e.status_code} {e.message}")
            if e.status_code == 402:
                raise PaymentRequiredError() from e
            raise ClassifierError() from e
        except asyncio.TimeoutError as e:
            raise ClassifierError(f"AI provider timeout after {self.timeout}s") from e
        except openai.APIError as e:
            logger.error(f"AI gateway unreachable: {e}")
            raise ClassifierError() from e

        logger.info("AI response received")
        return self._parse_tool_call(response)

    def _parse_tool_call(self, response: Any) -> List[Dict[str, Any]]:
        """Extract the ``items`` array from the forced tool call.

        Raises:
            ClassifierError: If the envelope is not what was requested
        """
        try:
            tool_calls = response.choices[0].message.tool_calls
        except (AttributeError, IndexError) as e:
            raise ClassifierError("Malformed AI response") from e

        if not tool_calls:
            raise ClassifierError("No tool call in AI response")

        try:
            arguments = json.loads(tool_calls[0].function.arguments)
        except (TypeError, json.JSONDecodeError) as e:
            raise ClassifierError(f"Failed to parse AI response: {e}") from e

        items = arguments.get("items") if isinstance(arguments, dict) else None
        if not isinstance(items, list):
            raise ClassifierError("AI response has no items array")

        return items
