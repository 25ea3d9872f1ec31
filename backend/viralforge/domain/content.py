"""
Content Domain Models

Request/response DTOs for the generation features (A/B prediction,
captions, video analysis, suggestions, insights) and the rewards shop.
Field aliases follow the camelCase names the web client sends.
"""

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


Locale = Literal["tr", "en"]
Platform = Literal["tiktok", "instagram", "youtube"]


class ClientRequest(BaseModel):
    """Base for request bodies sent by the web client."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    locale: Locale = "tr"


# =============================================================================
# A/B Testing
# =============================================================================

class ABTestRequest(ClientRequest):
    option_a: str = Field(..., alias="optionA", min_length=1, max_length=2000)
    option_b: str = Field(..., alias="optionB", min_length=1, max_length=2000)
    type: Literal["hook", "caption", "cover"]


class ABTestResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    winner: Literal["A", "B"]
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    suggestions: List[str] = []


# =============================================================================
# Captions
# =============================================================================

class CaptionRequest(ClientRequest):
    hook: str = Field(..., min_length=1, max_length=2000)
    platform: Platform
    tone: Optional[str] = Field(default=None, max_length=50)
    niche: Optional[str] = Field(default=None, max_length=100)
    include_story_version: bool = Field(default=False, alias="includeStoryVersion")
    hashtags_only: bool = Field(default=False, alias="hashtagsOnly")


class CaptionResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    caption: str
    hashtags: List[str] = []
    cta: Optional[str] = None
    story_version: Optional[str] = None


# =============================================================================
# Hooks / Content Planner
# =============================================================================

HOOKS_PER_GENERATION = 5


class HooksRequest(ClientRequest):
    platform: Platform = "tiktok"
    niche: Optional[str] = Field(default=None, max_length=100)
    tone: Optional[str] = Field(default=None, max_length=50)
    goal: Optional[str] = Field(default=None, max_length=50)
    category_slug: Optional[str] = Field(default=None, alias="categorySlug", max_length=100)


class HookResult(BaseModel):
    hooks: List[str] = []


class ContentPlanRequest(ClientRequest):
    platform: Platform = "tiktok"
    niche: Optional[str] = Field(default=None, max_length=100)
    goal: Optional[str] = Field(default=None, max_length=50)
    audience: Optional[str] = Field(default=None, max_length=200)
    tone: Optional[str] = Field(default=None, max_length=50)
    frequency: int = Field(default=7, ge=1, le=7)


class ContentPlanItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    day_index: int = Field(..., ge=1, le=7)
    title: str
    hook: str
    script_outline: List[str] = []
    shot_list: List[str] = []
    on_screen_text: List[str] = []
    cta: Optional[str] = None
    hashtags: List[str] = []
    estimated_duration_seconds: Optional[int] = None


class ContentPlanResult(BaseModel):
    items: List[ContentPlanItem] = []


# =============================================================================
# Video Analysis
# =============================================================================

class AnalyzeRequest(ClientRequest):
    analysis_id: UUID = Field(..., alias="analysisId")
    platform: Optional[Platform] = None
    category_slug: Optional[str] = Field(default=None, alias="categorySlug")


class VideoAnalysisResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    engagement_score: int = Field(..., ge=0, le=100)
    summary: str
    issues: List[str] = []
    hook_suggestions: List[str] = []
    caption_ideas: List[str] = []


# =============================================================================
# Daily Suggestions / Weekly Insights
# =============================================================================

class SuggestionIdea(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    hook: str
    description: Optional[str] = None


class GenerateSuggestionsRequest(ClientRequest):
    niche: Optional[str] = Field(default=None, max_length=100)


class UseSuggestionRequest(ClientRequest):
    suggestion_id: UUID = Field(..., alias="suggestionId")
    generation_id: Optional[str] = Field(default=None, alias="generationId")


class WeeklyInsightResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    summary: str
    highlights: List[str] = []
    recommendations: List[str] = []


# =============================================================================
# Rewards Shop
# =============================================================================

class RedeemRequest(BaseModel):
    item_id: str = Field(..., min_length=1, max_length=100)


class RedeemResult(BaseModel):
    success: bool
    new_xp_balance: Optional[int] = None
    new_analysis_credits: Optional[int] = None
    new_premium_hooks_until: Optional[str] = None
    error_message: Optional[str] = None
