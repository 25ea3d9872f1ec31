"""
Gemini Content Service for ViralForge AI

Generation features behind the metered endpoints: A/B hook prediction,
captions and hashtags, hooks, weekly content plans, video analysis, daily
suggestions and weekly insights. Every call asks Gemini for a JSON object
and validates it into a domain DTO. Transient failures (rate limits,
timeouts, dropped connections) are retried with jittered exponential
backoff, bounded by the retry settings.
"""

import asyncio
import json
import logging
import os
import random
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from viralforge.config.settings import settings
from viralforge.domain.content import (
    HOOKS_PER_GENERATION,
    ABTestResult,
    CaptionResult,
    ContentPlanResult,
    HookResult,
    SuggestionIdea,
    VideoAnalysisResult,
    WeeklyInsightResult,
)
from viralforge.infrastructure.exceptions import (
    AIServiceError,
    ConfigurationError,
    RateLimitError,
)


logger = logging.getLogger(__name__)

ResultType = TypeVar("ResultType", bound=BaseModel)

SYSTEM_PROMPT_PATH = os.path.join(os.path.dirname(__file__), "SYSTEM_PROMPT.md")

LANGUAGE_NAMES = {"tr": "Turkish", "en": "English"}


class SuggestionList(BaseModel):
    suggestions: List[SuggestionIdea] = []


def load_system_prompt() -> str:
    """Load the system prompt from the markdown file."""
    try:
        with open(SYSTEM_PROMPT_PATH, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        logger.warning(f"System prompt not found at {SYSTEM_PROMPT_PATH}")
        return "You are a short-form video strategist. Answer in JSON."


def is_rate_limit_error(error: Exception) -> bool:
    message = str(error).lower()
    return "rate" in message or "quota" in message or "429" in message or "resource_exhausted" in message


def is_transient_error(error: Exception) -> bool:
    if isinstance(error, (asyncio.TimeoutError, ConnectionError, TimeoutError)):
        return True
    message = str(error).lower()
    return (
        is_rate_limit_error(error)
        or "timeout" in message
        or "timed out" in message
        or "connection" in message
        or "503" in message
        or "unavailable" in message
    )


class ContentService:
    """
    Gemini-backed content generation.

    The genai client is created on first use so the service can be built
    (and injected) without credentials, e.g. in tests.
    """

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
    ):
        self._client = client
        self.model = model or settings.gemini_model
        self.max_retries = max(1, max_retries if max_retries is not None else settings.max_retries)
        self.base_delay = base_delay if base_delay is not None else settings.retry_base_delay
        self.max_delay = max_delay if max_delay is not None else settings.retry_max_delay
        self._system_prompt = load_system_prompt()

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not settings.google_api_key:
                raise ConfigurationError(
                    "Missing GOOGLE_API_KEY environment variable",
                    missing_keys=["GOOGLE_API_KEY"],
                )
            self._client = genai.Client(api_key=settings.google_api_key)
            logger.info(f"ContentService initialized with model: {self.model}")
        return self._client

    # =========================================================================
    # Retry / parsing helpers
    # =========================================================================

    def _backoff_delay(self, attempt: int) -> float:
        """Full-jitter exponential delay for the given 1-based attempt."""
        ceiling = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return random.uniform(ceiling / 2, ceiling)

    async def _retry_with_backoff(self, operation: Callable[[], Any], operation_name: str) -> Any:
        """Run a blocking SDK call in a thread, retrying transient failures."""
        for attempt in range(1, self.max_retries + 1):
            try:
                return await asyncio.to_thread(operation)
            except Exception as e:
                if not is_transient_error(e) or attempt == self.max_retries:
                    raise
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"{operation_name} transient error. Attempt {attempt}/{self.max_retries}. "
                    f"Retrying in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)

    def _parse_json_response(self, response_text: str) -> Dict[str, Any]:
        """Parse JSON from response, handling markdown code blocks."""
        text = response_text.strip()

        if text.startswith("```json"):
            text = text[7:]
        elif text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    async def _generate(
        self,
        prompt: str,
        result_type: Type[ResultType],
        operation: str,
        temperature: Optional[float] = None,
    ) -> ResultType:
        full_prompt = f"{self._system_prompt}\n\n{prompt}"
        config = types.GenerateContentConfig(
            temperature=settings.llm_temperature if temperature is None else temperature,
            max_output_tokens=settings.llm_max_output_tokens,
            response_mime_type="application/json",
        )

        try:
            response = await self._retry_with_backoff(
                lambda: self.client.models.generate_content(
                    model=self.model,
                    contents=full_prompt,
                    config=config,
                ),
                operation,
            )
        except (AIServiceError, ConfigurationError):
            raise
        except Exception as e:
            if is_rate_limit_error(e):
                raise RateLimitError("Gemini API rate limit exceeded", original_error=e)
            raise AIServiceError(
                f"{operation} failed: {e}",
                model=self.model,
                operation=operation,
                original_error=e,
            )

        if not response.text:
            raise AIServiceError("Empty response from Gemini", model=self.model, operation=operation)

        try:
            return result_type.model_validate(self._parse_json_response(response.text))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"{operation} returned an unusable payload: {e}")
            raise AIServiceError(
                "Model returned an invalid response",
                model=self.model,
                operation=operation,
                original_error=e,
            )

    # =========================================================================
    # Features
    # =========================================================================

    async def predict_ab_test(
        self,
        option_a: str,
        option_b: str,
        test_type: str,
        locale: str = "tr",
    ) -> ABTestResult:
        """Predict which of two hooks/captions/covers will perform better."""
        prompt = f"""## Task
Compare two {test_type} options for a short-form video and predict which one
gets more retention and engagement. Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

Option A: {option_a}
Option B: {option_b}

## Schema
{{"winner": "A" | "B", "confidence": 0-100, "reasoning": "...", "suggestions": ["..."]}}"""
        return await self._generate(prompt, ABTestResult, "predict_ab_test", temperature=0.3)

    async def generate_caption(
        self,
        hook: str,
        platform: str,
        locale: str = "tr",
        tone: Optional[str] = None,
        niche: Optional[str] = None,
        include_story_version: bool = False,
    ) -> CaptionResult:
        details = [f"Platform: {platform}", f"Hook: {hook}"]
        if tone:
            details.append(f"Tone: {tone}")
        if niche:
            details.append(f"Niche: {niche}")
        story = ', "story_version": "..."' if include_story_version else ""

        prompt = f"""## Task
Write a caption with a call to action and 5-10 hashtags for this video.
Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

{chr(10).join(details)}

## Schema
{{"caption": "...", "hashtags": ["#..."], "cta": "..."{story}}}"""
        return await self._generate(prompt, CaptionResult, "generate_caption")

    async def generate_hashtags(
        self,
        hook: str,
        platform: str,
        locale: str = "tr",
        niche: Optional[str] = None,
    ) -> List[str]:
        """Hashtags only; returned through the caption schema with an empty caption."""
        niche_line = f"\nNiche: {niche}" if niche else ""
        prompt = f"""## Task
Suggest 10-15 hashtags for this {platform} video, mixing broad and niche tags.
Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

Hook: {hook}{niche_line}

## Schema
{{"caption": "", "hashtags": ["#..."]}}"""
        result = await self._generate(prompt, CaptionResult, "generate_hashtags")
        return result.hashtags

    async def generate_hooks(
        self,
        platform: str,
        locale: str = "tr",
        niche: Optional[str] = None,
        tone: Optional[str] = None,
        goal: Optional[str] = None,
        count: int = HOOKS_PER_GENERATION,
    ) -> List[str]:
        """Opening lines for the first seconds of a video. An empty batch is an error."""
        details = [f"Platform: {platform}", f"Niche: {niche or 'lifestyle'}"]
        if tone:
            details.append(f"Tone: {tone}")
        if goal:
            details.append(f"Goal: {goal}")

        prompt = f"""## Task
Write {count} distinct scroll-stopping hooks (max 15 words each) for
short-form videos. Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

{chr(10).join(details)}

## Schema
{{"hooks": ["..."]}}"""
        result = await self._generate(prompt, HookResult, "generate_hooks", temperature=0.9)
        hooks = [hook.strip() for hook in result.hooks if hook.strip()][:count]
        if not hooks:
            raise AIServiceError("Model returned no hooks", model=self.model, operation="generate_hooks")
        return hooks

    async def generate_content_plan(
        self,
        platform: str,
        locale: str = "tr",
        niche: Optional[str] = None,
        goal: Optional[str] = None,
        audience: Optional[str] = None,
        tone: Optional[str] = None,
        frequency: int = 7,
    ) -> ContentPlanResult:
        """A week of scripted posts, one item per posting day."""
        details = [f"Platform: {platform}", f"Posts this week: {frequency}"]
        for label, value in (("Niche", niche), ("Goal", goal), ("Audience", audience), ("Tone", tone)):
            if value:
                details.append(f"{label}: {value}")

        prompt = f"""## Task
Plan this creator's next 7 days of short-form videos. Respond in
{LANGUAGE_NAMES.get(locale, "Turkish")}.

{chr(10).join(details)}

## Schema
{{"items": [{{"day_index": 1-7, "title": "...", "hook": "...",
  "script_outline": ["..."], "shot_list": ["..."], "on_screen_text": ["..."],
  "cta": "...", "hashtags": ["#..."], "estimated_duration_seconds": 15-60}}]}}"""
        result = await self._generate(prompt, ContentPlanResult, "generate_content_plan", temperature=0.8)
        if not result.items:
            raise AIServiceError("Model returned an empty plan", model=self.model, operation="generate_content_plan")
        result.items = result.items[:frequency]
        return result

    async def analyze_video(
        self,
        platform: str,
        locale: str = "tr",
        description: Optional[str] = None,
        transcript: Optional[str] = None,
        category_slug: Optional[str] = None,
    ) -> VideoAnalysisResult:
        """Score a video from its description/transcript and list concrete fixes."""
        context = [f"Platform: {platform}"]
        if category_slug:
            context.append(f"Category: {category_slug}")
        if description:
            context.append(f"Description: {description}")
        if transcript:
            context.append(f"Transcript:\n{transcript[:8000]}")

        prompt = f"""## Task
Analyze this short-form video for viral potential. Respond in
{LANGUAGE_NAMES.get(locale, "Turkish")}.

{chr(10).join(context)}

## Schema
{{"engagement_score": 0-100, "summary": "...", "issues": ["..."],
  "hook_suggestions": ["..."], "caption_ideas": ["..."]}}"""
        return await self._generate(prompt, VideoAnalysisResult, "analyze_video", temperature=0.4)

    async def generate_daily_suggestions(
        self,
        count: int,
        locale: str = "tr",
        niche: Optional[str] = None,
    ) -> List[SuggestionIdea]:
        if count <= 0:
            return []
        niche_line = f"The creator's niche: {niche}." if niche else "The creator has not set a niche."

        prompt = f"""## Task
Propose {count} fresh short-form video ideas for today. {niche_line}
Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

## Schema
{{"suggestions": [{{"title": "...", "hook": "...", "description": "..."}}]}}"""
        result = await self._generate(prompt, SuggestionList, "generate_daily_suggestions", temperature=0.9)
        return result.suggestions[:count]

    async def summarize_week(
        self,
        activity_counts: Dict[str, int],
        locale: str = "tr",
    ) -> WeeklyInsightResult:
        """Turn a week of activity counts into a short coaching summary."""
        lines = "\n".join(f"- {action}: {count}" for action, count in sorted(activity_counts.items()))
        prompt = f"""## Task
Summarize this creator's last 7 days on ViralForge and give next-week advice.
Respond in {LANGUAGE_NAMES.get(locale, "Turkish")}.

## Activity
{lines}

## Schema
{{"summary": "...", "highlights": ["..."], "recommendations": ["..."]}}"""
        return await self._generate(prompt, WeeklyInsightResult, "summarize_week")


@lru_cache
def get_content_service() -> ContentService:
    """Get cached content service instance."""
    return ContentService()
