"""Failures raised at the classifier boundary."""
from typing import Optional


class ClassifierError(Exception):
    """The classifier call failed; the whole batch is rejected."""

    status_code = 502
    default_message = "AI analysis failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RateLimitedError(ClassifierError):
    """The AI gateway rejected the request with HTTP 429."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class PaymentRequiredError(ClassifierError):
    """The AI gateway rejected the request with HTTP 402."""

    status_code = 402
    default_message = "Payment required. Please add credits to your AI workspace."


class ClassifierNotConfiguredError(ClassifierError):
    """No API key is configured or the provider is disabled."""

    status_code = 503
    default_message = "AI provider is not configured"
