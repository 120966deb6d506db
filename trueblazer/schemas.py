"""Pydantic models and enums for the TrueBlazer scoring and context API."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskTolerance(str, Enum):
    """Three-point risk scale shared by founders and ideas."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class IdeaStatus(str, Enum):
    """Lifecycle of a stored idea; only the UI moves ideas along it."""

    CANDIDATE = "candidate"
    CHOSEN = "chosen"
    NORTH_STAR = "north_star"
    ARCHIVED = "archived"


class SortBy(str, Enum):
    OPPORTUNITY = "opportunity"
    FIT = "fit"
    RECENT = "recent"


# ---------------------------------------------------------------------------
# Founder side
# ---------------------------------------------------------------------------


class SkillSpikes(BaseModel):
    """Self-rated skill vector captured during onboarding, nominally 1-5."""

    sales_persuasion: Optional[float] = None
    content_teaching: Optional[float] = None
    ops_systems: Optional[float] = None
    product_creativity: Optional[float] = None
    numbers_analysis: Optional[float] = None


class FounderProfile(BaseModel):
    """Normalized founder profile used as the "who" side of fit scoring.

    Onboarding fills this in step by step, so every field is optional and the
    scorers substitute neutral defaults for whatever is still missing. Values
    are not range-checked here; unrecognized or out-of-range values are
    defaulted or clamped during scoring.
    """

    user_id: Optional[str] = None

    passions_text: Optional[str] = None
    passion_domains: List[str] = Field(default_factory=list)
    skills_text: Optional[str] = None
    skill_tags: List[str] = Field(default_factory=list)
    skill_spikes: Optional[SkillSpikes] = None

    hours_per_week: Optional[float] = None
    available_capital: Optional[float] = None
    risk_tolerance: Optional[str] = None
    runway: Optional[str] = None
    urgency_vs_upside: Optional[float] = None

    lifestyle_goals_text: Optional[str] = None
    vision_of_success_text: Optional[str] = None

    business_archetypes: List[str] = Field(default_factory=list)
    work_personality: List[str] = Field(default_factory=list)
    work_style_preferences: List[str] = Field(default_factory=list)
    creator_platforms: List[str] = Field(default_factory=list)
    market_segments_understood: List[str] = Field(default_factory=list)
    existing_network_channels: List[str] = Field(default_factory=list)


class FounderProfileLite(BaseModel):
    """Column subset of a ``founder_profiles`` row used by ranking and prompts."""

    model_config = ConfigDict(extra="ignore")

    passions_text: Optional[str] = None
    skills_text: Optional[str] = None
    time_per_week: Optional[float] = None
    capital_available: Optional[float] = None
    risk_tolerance: Optional[str] = None
    lifestyle_goals: Optional[str] = None
    success_vision: Optional[str] = None


# ---------------------------------------------------------------------------
# Idea side
# ---------------------------------------------------------------------------


class BusinessIdea(BaseModel):
    """Legacy (v5) idea shape scored through attribute overlap."""

    id: Optional[str] = None
    title: Optional[str] = None
    one_liner: Optional[str] = None
    description: Optional[str] = None

    primary_passion_domains: List[str] = Field(default_factory=list)
    primary_skill_needs: List[str] = Field(default_factory=list)
    markets: List[str] = Field(default_factory=list)
    business_archetype: Optional[str] = None

    sales_intensity: Optional[float] = None
    hours_per_week_min: Optional[float] = None
    hours_per_week_max: Optional[float] = None
    capital_required: Optional[float] = None
    risk_level: Optional[str] = None
    time_to_first_revenue_months: Optional[float] = None

    revenue_model: Optional[str] = None
    requires_public_personal_brand: bool = False


class BusinessIdeaV6(BaseModel):
    """Flattened numeric idea shape; each metric is on a 0-100 scale."""

    id: Optional[str] = None
    title: Optional[str] = None
    leverage_score: Optional[float] = None
    autonomy_level: Optional[float] = None
    difficulty: Optional[str] = None
    solo_fit: bool = False
    culture_tailwind: Optional[float] = None
    virality_potential: Optional[float] = None
    automation_density: Optional[float] = None
    platform: Optional[str] = None


class IdeaLite(BaseModel):
    """Projection of an idea used purely for sorting and filtering."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    summary: Optional[str] = None
    tags: Optional[List[str]] = None
    stage: Optional[str] = None
    opportunity_score: Optional[float] = None
    founder_fit_score: Optional[float] = None
    created_at: Optional[str] = None


class IdeaDraft(BaseModel):
    """Partially filled idea submitted for validation before persistence."""

    title: Optional[str] = None
    summary: Optional[str] = None


class IdeaFitScores(BaseModel):
    """Fit scores written by idea generation; unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    passion_fit_score: Optional[float] = None
    skill_fit_score: Optional[float] = None
    constraint_fit_score: Optional[float] = None
    lifestyle_fit_score: Optional[float] = None
    overall_fit_score: Optional[float] = None


class GeneratedIdeaMetadata(BaseModel):
    """Metadata attached by the idea-generation handler."""

    model_config = ConfigDict(extra="allow")

    source: Literal["generated"] = "generated"
    model: Optional[str] = None
    prompt_version: Optional[str] = None
    fit_scores: Optional[IdeaFitScores] = None


class UserEditedIdeaMetadata(BaseModel):
    """Metadata attached when the founder edits or imports an idea by hand."""

    model_config = ConfigDict(extra="allow")

    source: Literal["user"] = "user"
    edited_fields: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


IdeaMetadata = Annotated[
    Union[GeneratedIdeaMetadata, UserEditedIdeaMetadata],
    Field(discriminator="source"),
]


class IdeaRecord(BaseModel):
    """A row of the ``ideas`` table as read by the context handlers."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    title: str = ""
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    stage: Optional[str] = None
    status: IdeaStatus = IdeaStatus.CANDIDATE
    business_model_type: Optional[str] = None
    target_customer: Optional[str] = None
    time_to_first_dollar: Optional[str] = None
    complexity: Optional[str] = None
    opportunity_score: Optional[float] = None
    founder_fit_score: Optional[float] = None
    fit_scores: Optional[IdeaFitScores] = None
    metadata: Optional[IdeaMetadata] = None
    created_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_unknown_status(cls, value: Any) -> Any:
        """Rows written by older clients may carry a null or unrecognized status."""

        normalized = value.strip().lower() if isinstance(value, str) else None
        if normalized in {status.value for status in IdeaStatus}:
            return normalized
        return IdeaStatus.CANDIDATE

    @field_validator("metadata", mode="before")
    @classmethod
    def _drop_untagged_metadata(cls, value: Any) -> Any:
        if isinstance(value, dict) and value.get("source") not in {"generated", "user"}:
            return None
        return value

    def to_lite(self) -> IdeaLite:
        return IdeaLite(
            id=self.id,
            title=self.title,
            summary=self.summary or self.description,
            tags=self.tags,
            stage=self.stage,
            opportunity_score=self.opportunity_score,
            founder_fit_score=self.founder_fit_score,
            created_at=self.created_at,
        )


class IdeaAnalysisPayload(BaseModel):
    """Structured vetting output forwarded into blueprint generation."""

    customer: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    revenue_model: Optional[str] = None
    channels: Optional[str] = None

    @classmethod
    def from_analysis_row(cls, row: Dict[str, Any]) -> "IdeaAnalysisPayload":
        """Project an ``idea_analysis`` row onto the blueprint fields."""

        return cls(
            customer=row.get("ideal_customer_profile"),
            problem=row.get("problem_intensity"),
            solution=row.get("elevator_pitch"),
            revenue_model=row.get("pricing_power"),
            channels=row.get("market_insight"),
        )


# ---------------------------------------------------------------------------
# Scoring outputs
# ---------------------------------------------------------------------------


class IdeaScoreBreakdown(BaseModel):
    """Explainable 0-100 fit breakdown of one idea for one founder."""

    founder_fit: float = Field(..., ge=0.0, le=100.0)
    constraints_fit: float = Field(..., ge=0.0, le=100.0)
    market_fit: float = Field(..., ge=0.0, le=100.0)
    economics: float = Field(..., ge=0.0, le=100.0)
    overall: float = Field(..., ge=0.0, le=100.0)


class ScoreBands(BaseModel):
    founder_fit: str
    constraints_fit: str
    market_fit: str
    economics: str
    overall: str


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------


class ScoreIdeaRequest(BaseModel):
    idea: BusinessIdea
    founder: FounderProfile


class ScoreIdeaV6Request(BaseModel):
    idea: BusinessIdeaV6
    founder: FounderProfile


class ScoreIdeaResponse(BaseModel):
    breakdown: IdeaScoreBreakdown
    bands: ScoreBands


class RankIdeasRequest(BaseModel):
    ideas: List[IdeaLite]
    sort_by: SortBy = SortBy.OPPORTUNITY
    founder_profile: Optional[FounderProfileLite] = None


class IdeaFilters(BaseModel):
    """Criteria accepted by the idea filter; all of them AND together."""

    stage: Optional[List[str]] = None
    min_opportunity_score: float = 0
    min_fit_score: float = 0
    tags: Optional[List[str]] = None


class FilterIdeasRequest(BaseModel):
    ideas: List[IdeaLite]
    filters: Optional[IdeaFilters] = None


class IdeaGenerationPromptRequest(BaseModel):
    founder_profile: FounderProfileLite
    max_ideas: int = Field(default=10, ge=1, le=50)


class IdeaVettingPromptRequest(BaseModel):
    founder_profile: FounderProfileLite
    idea: IdeaLite


class OpportunityScorePromptRequest(BaseModel):
    idea: IdeaLite
    founder_profile: FounderProfileLite
    market_notes: Optional[str] = None


class BlueprintPromptRequest(BaseModel):
    founder_profile: Optional[FounderProfileLite] = None
    chosen_idea: Optional[IdeaLite] = None
    idea_analysis: Optional[IdeaAnalysisPayload] = None


class PromptPairResponse(BaseModel):
    system: str
    user: str


class MasterPromptResponse(BaseModel):
    """Master prompt for the founder's chosen idea."""

    idea_id: str
    platform_target: str
    prompt_body: str
    source_hash: str
    cached: bool = False
    stale: bool = False


class BlueprintResponse(BaseModel):
    idea_id: Optional[str]
    blueprint: Dict[str, Any]
    source_hash: str
    cached: bool = False


class AnalyzeValidationRequest(BaseModel):
    venture_id: str = Field(..., min_length=1)


class ValidationSummaryResponse(BaseModel):
    """Persisted summary of a validation session analysis."""

    model_config = ConfigDict(extra="allow")

    id: str
    session_id: str
    venture_id: str
    total_evidence_count: int
    positive_count: int
    negative_count: int
    neutral_count: int
    pattern_summary: Optional[str] = None
    advisor_note: Optional[str] = None
    recommendation: str
    fvs_delta: Dict[str, int]
    confidence_shift: str
