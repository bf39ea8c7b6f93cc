"""Per-mode state held by the assistant controller."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum

from storysmith.api.schemas import AnalysisResult


class ModeStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    RESULT_READY = "result_ready"
    COMPARISON = "comparison"


@dataclass(frozen=True)
class ModeResult:
    """Staged output of the last operation run in one mode.

    A comparison exists only while both the captured original and a
    generated or improved text are present.
    """

    original_content_for_comparison: str | None = None
    generated_title: str | None = None
    generated_description: str | None = None
    improved_text: str | None = None

    @property
    def proposed_text(self) -> str | None:
        if self.improved_text is not None:
            return self.improved_text
        return self.generated_description

    @property
    def has_comparison(self) -> bool:
        return (
            self.original_content_for_comparison is not None
            and self.proposed_text is not None
        )

    def formatted_proposal(self) -> str | None:
        """Proposed story as shown in the review column."""
        text = self.proposed_text
        if text is None:
            return None
        if self.generated_title:
            return f"## {self.generated_title}\n\n{text}"
        return text


EMPTY_RESULT = ModeResult()


@dataclass
class StagedAnalysis:
    """Current analysis plus the text it was computed from.

    ``dirty`` is set as soon as the story text differs from
    ``analyzed_text`` and only a fresh analysis clears it.
    """

    result: AnalysisResult
    analyzed_text: str
    dirty: bool = False

    def mark_if_changed(self, text: str) -> None:
        if text != self.analyzed_text:
            self.dirty = True

    def snapshot(self) -> StagedAnalysis:
        return replace(self)


@dataclass(frozen=True)
class ComparisonColumn:
    label: str
    text: str


@dataclass(frozen=True)
class ComparisonView:
    """Side-by-side review of a staged result."""

    columns: tuple[ComparisonColumn, ...] = field(default_factory=tuple)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def texts(self) -> list[str]:
        return [c.text for c in self.columns]
