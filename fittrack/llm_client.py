"""
Claude LLM client for the AI progress insight.

Writes a short motivational analysis of a user's recent activity logs using
the Anthropic API. Any failure falls back to a fixed message so the dashboard
always has something to show.
"""

import hashlib
import logging
from dataclasses import dataclass

import anthropic

from fittrack.config import ANTHROPIC_API_KEY, INSIGHT_MODEL
from fittrack.date_keys import InvalidDateInput, normalize
from fittrack.models import ResolvedRecord

logger = logging.getLogger(__name__)


class LLMConfigError(Exception):
    """Raised when LLM is not configured (missing API key)."""

    pass


class LLMRateLimitError(Exception):
    """Raised when LLM API rate limit is exceeded."""

    pass


class LLMError(Exception):
    """Generic LLM error."""

    pass


@dataclass
class InsightResult:
    """An insight text and where it came from (ai, cache, fallback, empty)."""

    text: str
    source: str


NO_DATA_MESSAGE = (
    "No data yet. Log a few sit-ups or push-ups and I'll comment on your progress!"
)
FALLBACK_MESSAGE = (
    "The analysis isn't available right now, but your data looks great. Keep training!"
)
EMPTY_RESPONSE_MESSAGE = (
    "Your progress is very consistent. You're getting one step closer to your goals every day!"
)

INSIGHT_PROMPT = """Write a motivating, professional and short analysis for a user with the activity data below.
Reward consistency in basic exercises such as sit-ups, push-ups and pull-ups.
Use at most 2-3 sentences.

{summary}"""

SUMMARY_LIMIT = 10
CACHE_TTL_HOURS = 24


def summarize_logs(resolved: list[ResolvedRecord], limit: int = SUMMARY_LIMIT) -> str:
    """
    Format the most recent logs as ``date: name - value unit`` lines.

    Args:
        resolved: Resolved records in any order
        limit: Number of most recent logs to include
    """
    dated = []
    for item in resolved:
        try:
            dated.append((normalize(item.record.calendar_date), item))
        except InvalidDateInput:
            continue
    dated.sort(key=lambda pair: pair[0], reverse=True)

    lines = []
    for key, item in dated[:limit]:
        unit = f" {item.category.unit}" if item.category.unit else ""
        lines.append(f"{key}: {item.category.display_name} - {item.record.magnitude:g}{unit}")
    return "\n".join(lines)


class InsightClient:
    """Client for Claude API with caching support."""

    def __init__(self, storage=None):
        """
        Initialize the insight client.

        Args:
            storage: FitnessStorage instance for caching. Optional.
        """
        self.storage = storage
        self._client = None

    @property
    def is_configured(self) -> bool:
        """Check if the API key is configured."""
        return bool(ANTHROPIC_API_KEY) and ANTHROPIC_API_KEY != "your_api_key_here"

    def _get_client(self):
        """Get or create the Anthropic client."""
        if not self.is_configured:
            raise LLMConfigError(
                "Anthropic API key not configured. "
                "Set ANTHROPIC_API_KEY in your .env file."
            )

        if self._client is None:
            self._client = anthropic.Anthropic(api_key=ANTHROPIC_API_KEY)

        return self._client

    def _cache_key(self, summary: str) -> str:
        """Generate a cache key for the insight request."""
        return f"llm_insight:{hashlib.sha256(summary.encode()).hexdigest()[:16]}"

    def request_insight(self, summary: str) -> str:
        """
        Ask the model for an insight on a log summary.

        Returns:
            The stripped response text (may be empty)

        Raises:
            LLMConfigError: If API key is not configured
            LLMRateLimitError: If rate limit is exceeded
            LLMError: For other API errors
        """
        client = self._get_client()

        try:
            message = client.messages.create(
                model=INSIGHT_MODEL,
                max_tokens=300,
                messages=[{"role": "user", "content": INSIGHT_PROMPT.format(summary=summary)}],
            )
        except anthropic.RateLimitError as e:
            raise LLMRateLimitError(
                "Rate limit exceeded. Please wait before making more requests."
            ) from e
        except anthropic.APIError as e:
            raise LLMError(f"API error: {e}") from e

        if not message.content:
            return ""
        return message.content[0].text.strip()

    def generate_insight(self, resolved: list[ResolvedRecord]) -> InsightResult:
        """
        Produce the dashboard insight for a user's logs.

        Never raises: no logs gives NO_DATA_MESSAGE, an API or configuration
        failure gives FALLBACK_MESSAGE and an empty answer gives
        EMPTY_RESPONSE_MESSAGE.
        """
        if not resolved:
            return InsightResult(NO_DATA_MESSAGE, "empty")

        summary = summarize_logs(resolved)

        # Check cache first
        if self.storage:
            cache_key = self._cache_key(summary)
            cached = self.storage.get_cache(cache_key)
            if cached:
                return InsightResult(cached, "cache")

        try:
            text = self.request_insight(summary)
        except (LLMConfigError, LLMRateLimitError, LLMError) as e:
            logger.warning("Insight generation failed, using fallback: %s", e)
            return InsightResult(FALLBACK_MESSAGE, "fallback")

        if not text:
            return InsightResult(EMPTY_RESPONSE_MESSAGE, "fallback")

        if self.storage:
            self.storage.set_cache(cache_key, text, hours=CACHE_TTL_HOURS)

        return InsightResult(text, "ai")
