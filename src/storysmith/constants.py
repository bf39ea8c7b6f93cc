"""Shared constants — single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, SQL,
request bodies) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class OperationMode(StrEnum):
    """Operations accepted by the prompt relay."""

    ANALYZE = "analyze"
    APPLY_SUGGESTIONS = "apply_suggestions"
    REVIEW_AND_IMPROVE = "review_and_improve"
    CREATE_STORY_FROM_SCRATCH = "create_story_from_scratch"


class AssistantMode(StrEnum):
    """Operating modes of the AI-assist panel.

    Not the same set as OperationMode: apply_suggestions is a
    follow-up action inside ANALYZE, and CREATE_FROM_SCRATCH maps
    to the relay's create_story_from_scratch operation.
    """

    ANALYZE = "analyze"
    REVIEW_AND_IMPROVE = "review_and_improve"
    CREATE_FROM_SCRATCH = "create_from_scratch"


class QualityLevel(StrEnum):
    """Coarse quality rating returned by story analysis."""

    POOR = "Poor"
    NEEDS_IMPROVEMENTS = "Needs Improvements"
    GOOD = "Good"
    EXCELLENT = "Excellent"


class SuggestionKind(StrEnum):
    """Which list a suggestion belongs to."""

    IMPROVEMENT = "improvement"
    ACCEPTANCE = "acceptance"


class StoryStatus(StrEnum):
    """Story record workflow status."""

    DRAFT = "Draft"
    READY = "Ready"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    ARCHIVED = "Archived"


class VendorFamily(StrEnum):
    """Upstream LLM API families the relay can talk to."""

    OPENAI = "openai"
    GEMINI = "gemini"


# Assistant mode → relay operation executed by "Execute Operation"
MODE_OPERATIONS: dict[AssistantMode, OperationMode] = {
    AssistantMode.ANALYZE: OperationMode.ANALYZE,
    AssistantMode.REVIEW_AND_IMPROVE: OperationMode.REVIEW_AND_IMPROVE,
    AssistantMode.CREATE_FROM_SCRATCH: (
        OperationMode.CREATE_STORY_FROM_SCRATCH
    ),
}

# Operations whose vendor output must be a JSON object
JSON_MODE_OPERATIONS = frozenset({
    OperationMode.ANALYZE,
    OperationMode.CREATE_STORY_FROM_SCRATCH,
})

# Model name prefix → vendor family (checked in order)
MODEL_PREFIXES: tuple[tuple[str, VendorFamily], ...] = (
    ("gpt-", VendorFamily.OPENAI),
    ("o1", VendorFamily.OPENAI),
    ("o3", VendorFamily.OPENAI),
    ("o4", VendorFamily.OPENAI),
    ("gemini-", VendorFamily.GEMINI),
)

# ── Story Sorting ────────────────────────────────────────

STORY_SORT_FIELDS = frozenset({
    "created_at",
    "title",
    "status",
    "story_points",
})
DEFAULT_STORY_SORT = "created_at"

# ── LLM Request ──────────────────────────────────────────

LLM_TEMPERATURE = 0.7
SIMILAR_STORY_COUNT = 3

# ── Error Messages (wire-visible) ────────────────────────

ERR_STORY_REQUIRED = "User story is required."
ERR_UNSUPPORTED_MODEL = "Unsupported LLM model."
ERR_INVALID_MODE = "Invalid operation mode."
ERR_SUGGESTIONS_REQUIRED = "At least one ticked suggestion is required."

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200

# ── CORS (relay preflight) ───────────────────────────────

RELAY_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type"
    ),
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

# Routes that answer every origin with RELAY_CORS_HEADERS
RELAY_PATHS = frozenset({"/api/analyze-story"})

# ── Auth Exempt Paths ────────────────────────────────────

AUTH_EXEMPT_PATHS = frozenset({
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
})

AUTH_EXEMPT_PREFIXES = ("/api/health",)

USER_ID_HEADER = "X-User-Id"

# ── ID Generation ───────────────────────────────────────

ID_HEX_LENGTH = 12
