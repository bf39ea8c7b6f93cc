"""Request/response schemas for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from storysmith.constants import (
    OperationMode,
    QualityLevel,
    StoryStatus,
    SuggestionKind,
)


class _CamelModel(BaseModel):
    """Accepts both camelCase (wire) and snake_case (Python) names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class APIResponse(BaseModel):
    """Standard response envelope for CRUD endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


# ── Relay payloads ──────────────────────────────────────


class Suggestion(_CamelModel):
    """Improvement suggestion or acceptance criterion."""

    id: str
    text: str
    example: str = ""
    ticked: bool = False
    kind: SuggestionKind | None = Field(
        default=None, validation_alias=AliasChoices("kind", "type")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # Vendors occasionally emit numeric ids
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("kind", mode="before")
    @classmethod
    def _known_kind(cls, v: Any) -> Any:
        # Vendors put free-form categories ("clarity") under "type"
        if isinstance(v, str) and v in {k.value for k in SuggestionKind}:
            return v
        return None


class SimilarStoryRef(_CamelModel):
    id: str
    title: str
    status: str = ""
    feature_id: str = Field(default="", alias="featureId")
    feature_name: str = Field(default="", alias="featureName")
    matching_percentage: int = Field(
        ge=0, le=100, alias="matchingPercentage"
    )

    @field_validator("id", "feature_id", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("matching_percentage", mode="before")
    @classmethod
    def _round_percentage(cls, v: Any) -> Any:
        if isinstance(v, float):
            return round(v)
        return v


class AnalysisResult(_CamelModel):
    quality_score: int = Field(ge=0, le=100, alias="qualityScore")
    quality_level: QualityLevel = Field(alias="qualityLevel")
    recommended_story_points: int = Field(
        ge=0, alias="recommendedStoryPoints"
    )
    improvement_suggestions: list[Suggestion] = Field(
        default_factory=list, alias="improvementSuggestions"
    )
    suggested_acceptance_criteria: list[Suggestion] = Field(
        default_factory=list, alias="suggestedAcceptanceCriteria"
    )
    similar_historical_stories: list[SimilarStoryRef] = Field(
        default_factory=list, alias="similarHistoricalStories"
    )

    def with_kinds(self) -> AnalysisResult:
        """Tag every suggestion with the list it came from."""
        return self.model_copy(
            update={
                "improvement_suggestions": [
                    s.model_copy(update={"kind": SuggestionKind.IMPROVEMENT})
                    for s in self.improvement_suggestions
                ],
                "suggested_acceptance_criteria": [
                    s.model_copy(update={"kind": SuggestionKind.ACCEPTANCE})
                    for s in self.suggested_acceptance_criteria
                ],
            }
        )


class NewStoryResult(_CamelModel):
    new_story: str = Field(alias="newStory")


class DraftedStory(_CamelModel):
    title: str
    description: str


class RelayRequest(_CamelModel):
    """Request body for POST /api/analyze-story."""

    user_story: str = Field(alias="userStory")
    llm_model: str = Field(default="", alias="llmModel")
    operation_mode: OperationMode = Field(alias="operationMode")
    suggestions: list[Suggestion] = Field(default_factory=list)


# ── Story records ───────────────────────────────────────


class StoryCreate(BaseModel):
    """Request body for POST /api/stories."""

    title: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1)
    status: StoryStatus = StoryStatus.DRAFT
    feature_epic: str | None = Field(default=None, max_length=200)
    sprint: str | None = Field(default=None, max_length=100)
    story_points: int | None = Field(default=None, ge=0)
    acceptance_criteria: list[Suggestion] = Field(default_factory=list)


class StoryUpdate(BaseModel):
    """Request body for PUT /api/stories/{id}; omitted fields are kept."""

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=1)
    status: StoryStatus | None = None
    feature_epic: str | None = Field(default=None, max_length=200)
    sprint: str | None = Field(default=None, max_length=100)
    story_points: int | None = Field(default=None, ge=0)
    acceptance_criteria: list[Suggestion] | None = None


class ProfileUpdate(BaseModel):
    """Request body for PUT /api/profile."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    avatar_url: str | None = Field(default=None, max_length=500)

    @field_validator("avatar_url")
    @classmethod
    def _validate_url(cls, v: str | None) -> str | None:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Must be a valid URL")
        return v
