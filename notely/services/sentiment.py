"""
Sentiment Analysis (ai.sentiment).

Scores the emotional tone of a note with a PydanticAI agent backed by
Gemini. The agent returns a structured SentimentScore; the category and
confidence are derived locally from the score.

Usage:
    from notely.services.sentiment import SentimentService

    service = SentimentService.from_config()
    analysis = await service.analyze(note)
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from notely.core.config import get_app_config, get_settings
from notely.core.exceptions import ExternalServiceError, NotConfiguredError, ValidationError
from notely.core.logging import get_logger, log_with_source
from notely.schemas.note import Note

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You analyze the sentiment of a personal note.\n\n"
    "Return:\n"
    "1. score: a number from -1 (very negative) to +1 (very positive)\n"
    "2. summary: one or two sentences describing the emotional tone\n\n"
    "Judge the writer's tone, not the topic. Plain factual notes are close to 0."
)

Sentiment = Literal["positive", "negative", "neutral"]


# =============================================================================
# Output Schemas
# =============================================================================


class SentimentScore(BaseModel):
    """Structured output of the agent."""

    score: float = Field(ge=-1, le=1)
    summary: str


class SentimentAnalysis(BaseModel):
    """Result shown to the user."""

    score: float
    summary: str
    sentiment: Sentiment
    confidence: float


def categorize(score: float, neutral_band: float = 0.1) -> Sentiment:
    if score > neutral_band:
        return "positive"
    if score < -neutral_band:
        return "negative"
    return "neutral"


# =============================================================================
# Service
# =============================================================================


class SentimentService:
    """
    Note sentiment analysis.

    Args:
        model: PydanticAI model, or None when no API key is configured
        neutral_band: Scores within ±neutral_band are neutral
        enabled: Feature flag from features.yaml
    """

    def __init__(self, model: Model | str | None, neutral_band: float = 0.1, enabled: bool = True) -> None:
        self.model = model
        self.neutral_band = neutral_band
        self.enabled = enabled
        self._agent: Agent[None, SentimentScore] | None = None

    @classmethod
    def from_config(cls) -> "SentimentService":
        config = get_app_config()
        sentiment = config.integrations.sentiment
        api_key = get_settings().genai_api_key
        model = None
        if api_key:
            model = GoogleModel(sentiment.model, provider=GoogleProvider(api_key=api_key))
        return cls(
            model=model,
            neutral_band=sentiment.neutral_band,
            enabled=config.features.ai_sentiment_enabled,
        )

    @property
    def is_configured(self) -> bool:
        return self.enabled and self.model is not None

    def _get_agent(self) -> Agent[None, SentimentScore]:
        """Lazy initialization: only creates the agent when first called."""
        if self._agent is not None:
            return self._agent
        if not self.enabled:
            raise NotConfiguredError("AI sentiment analysis is disabled")
        if self.model is None:
            raise NotConfiguredError("Google AI API key not configured")

        self._agent = Agent(
            self.model,
            output_type=SentimentScore,
            instructions=SYSTEM_PROMPT,
        )
        log_with_source(logger, "services", "info", "Sentiment agent initialized")
        return self._agent

    async def analyze_text(self, title: str, text: str) -> SentimentAnalysis:
        """
        Analyze a title and body.

        Raises:
            NotConfiguredError: If the feature is off or no key is configured
            ValidationError: If there is nothing to analyze
            ExternalServiceError: If the model call fails
        """
        agent = self._get_agent()
        if not (title.strip() or text.strip()):
            raise ValidationError("Nothing to analyze", details={"content": "Note is empty"})

        prompt = f'Title: "{title}"\nText: "{text}"'
        log_with_source(logger, "services", "info", "Sentiment analysis invoked", title=title)

        try:
            result = await agent.run(prompt)
        except AgentRunError as e:
            log_with_source(logger, "services", "error", "Sentiment analysis failed", error=str(e))
            raise ExternalServiceError("Failed to analyze sentiment") from e

        score = result.output.score
        analysis = SentimentAnalysis(
            score=score,
            summary=result.output.summary,
            sentiment=categorize(score, self.neutral_band),
            confidence=abs(score),
        )

        usage = result.usage
        log_with_source(
            logger, "services", "info", "Sentiment analysis completed",
            sentiment=analysis.sentiment,
            usage={
                "requests": usage.requests,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )
        return analysis

    async def analyze(self, note: Note) -> SentimentAnalysis:
        return await self.analyze_text(note.title, note.content)
