"""AI-assist panel controller.

Drives the three assistant modes against a story view. Each mode keeps
its own staged ModeResult; the analyze mode additionally holds the
current AnalysisResult. At most one operation runs per mode at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from storysmith.api.schemas import (
    AnalysisResult,
    DraftedStory,
    NewStoryResult,
    SimilarStoryRef,
    Suggestion,
)
from storysmith.assistant.draft import StoryView
from storysmith.assistant.notifier import LoggingNotifier, Notifier
from storysmith.assistant.relay_client import RelayClient
from storysmith.assistant.state import (
    EMPTY_RESULT,
    ComparisonColumn,
    ComparisonView,
    ModeResult,
    ModeStatus,
    StagedAnalysis,
)
from storysmith.constants import (
    MODE_OPERATIONS,
    AssistantMode,
    OperationMode,
    QualityLevel,
    SuggestionKind,
)
from storysmith.resilience.errors import (
    OperationInFlightError,
    RelayError,
    is_retryable,
)
from storysmith.resilience.inflight import InFlightGuard

logger = logging.getLogger(__name__)

_EMPTY_TEXT_MESSAGES: dict[AssistantMode, str] = {
    AssistantMode.ANALYZE: "Please enter a user story to analyze.",
    AssistantMode.REVIEW_AND_IMPROVE: "Please enter a user story to review.",
    AssistantMode.CREATE_FROM_SCRATCH: (
        "Please describe your ideas for the new story."
    ),
}

_SUCCESS_MESSAGES: dict[AssistantMode, str] = {
    AssistantMode.ANALYZE: "User story analysis complete!",
    AssistantMode.REVIEW_AND_IMPROVE: (
        "Review complete. Please review the changes."
    ),
    AssistantMode.CREATE_FROM_SCRATCH: (
        "Story drafted. Please review the generated story."
    ),
}

_COLUMN_LABELS: dict[AssistantMode, tuple[str, str]] = {
    AssistantMode.ANALYZE: ("Original Story", "Updated Story"),
    AssistantMode.REVIEW_AND_IMPROVE: ("Original Story", "Improved Story"),
    AssistantMode.CREATE_FROM_SCRATCH: ("Your Notes", "Generated Story"),
}


class AssistantController:
    def __init__(
        self,
        view: StoryView,
        relay: RelayClient,
        *,
        notifier: Notifier | None = None,
        llm_model: str = "",
    ) -> None:
        self._view = view
        self._relay = relay
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._guard = InFlightGuard()
        self._results: dict[AssistantMode, ModeResult] = {
            mode: EMPTY_RESULT for mode in AssistantMode
        }
        self._analysis: StagedAnalysis | None = None
        self.active_mode = AssistantMode.ANALYZE
        self.llm_model = llm_model

    # ── Read-side state ─────────────────────────────────

    def result_for(self, mode: AssistantMode) -> ModeResult:
        return self._results[mode]

    def status(self, mode: AssistantMode | None = None) -> ModeStatus:
        mode = mode or self.active_mode
        if self._guard.is_active(mode.value):
            return ModeStatus.LOADING
        if self._results[mode].has_comparison:
            return ModeStatus.COMPARISON
        if mode == AssistantMode.ANALYZE and self._current_analysis():
            return ModeStatus.RESULT_READY
        return ModeStatus.IDLE

    @property
    def analysis(self) -> AnalysisResult | None:
        """Analysis shown in the panel, hidden outside analyze mode."""
        if self.active_mode != AssistantMode.ANALYZE:
            return None
        return self._current_analysis()

    @property
    def can_apply_suggestions(self) -> bool:
        analysis = self.analysis
        return (
            analysis is not None
            and analysis.quality_level != QualityLevel.EXCELLENT
        )

    def _current_analysis(self) -> AnalysisResult | None:
        staged = self._analysis
        if staged is None:
            return None
        staged.mark_if_changed(self._view.story_text)
        if staged.dirty:
            return None
        return staged.result

    # ── Mode and text ───────────────────────────────────

    def set_mode(self, mode: AssistantMode) -> None:
        self.active_mode = AssistantMode(mode)

    def notify_text_changed(self, text: str | None = None) -> None:
        if self._analysis is None:
            return
        self._analysis.mark_if_changed(
            self._view.story_text if text is None else text
        )

    # ── Operations ──────────────────────────────────────

    async def execute(self) -> bool:
        """Run the active mode's operation against the current text."""
        mode = self.active_mode
        text = self._view.story_text
        if not text.strip():
            self._notifier.error(_EMPTY_TEXT_MESSAGES[mode])
            return False

        operation = MODE_OPERATIONS[mode]
        if mode == AssistantMode.ANALYZE:
            return await self._guarded(
                mode, lambda: self._run_analyze(text, operation)
            )
        if mode == AssistantMode.REVIEW_AND_IMPROVE:
            return await self._guarded(
                mode, lambda: self._run_review(text, operation)
            )
        return await self._guarded(
            mode, lambda: self._run_create(text, operation)
        )

    async def apply_suggestions(self) -> bool:
        """Send ticked suggestions and criteria for a rewritten story."""
        analysis = self.analysis
        if analysis is None:
            self._notifier.info("Run an analysis before applying suggestions.")
            return False
        if analysis.quality_level == QualityLevel.EXCELLENT:
            self._notifier.info("This story needs no further improvements.")
            return False

        selected = [
            s.model_copy(update={"kind": SuggestionKind.IMPROVEMENT})
            for s in analysis.improvement_suggestions
            if s.ticked
        ] + [
            c.model_copy(update={"kind": SuggestionKind.ACCEPTANCE})
            for c in self._view.acceptance_criteria
            if c.ticked
        ]
        if not selected:
            self._notifier.info("No suggestions selected to apply.")
            return False

        text = self._view.story_text
        if not text.strip():
            self._notifier.error(_EMPTY_TEXT_MESSAGES[AssistantMode.ANALYZE])
            return False

        return await self._guarded(
            AssistantMode.ANALYZE,
            lambda: self._run_apply(text, selected),
        )

    def toggle_suggestion(
        self, kind: SuggestionKind, suggestion_id: str
    ) -> bool:
        """Flip the tick on one suggestion; False if nothing matched."""
        staged = self._analysis
        if staged is None or self._current_analysis() is None:
            return False
        if self._busy(AssistantMode.ANALYZE):
            return False

        if SuggestionKind(kind) == SuggestionKind.IMPROVEMENT:
            suggestions = staged.result.improvement_suggestions
            if not any(s.id == suggestion_id for s in suggestions):
                return False
            staged.result = staged.result.model_copy(
                update={
                    "improvement_suggestions": _flip(
                        suggestions, suggestion_id
                    )
                }
            )
            return True

        criteria = self._view.acceptance_criteria
        if not any(c.id == suggestion_id for c in criteria):
            return False
        self._view.on_story_update(
            self._view.story_text, _flip(criteria, suggestion_id)
        )
        return True

    def accept(self) -> bool:
        mode = self.active_mode
        staged = self._results[mode]
        text = staged.proposed_text
        if not staged.has_comparison or text is None:
            return False
        if self._busy(mode):
            return False
        self._view.on_accept_changes(text, staged.generated_title)
        self._reset(mode)
        self._notifier.success("Changes accepted.")
        return True

    def decline(self) -> bool:
        mode = self.active_mode
        staged = self._results[mode]
        if not staged.has_comparison:
            return False
        if self._busy(mode):
            return False
        self._view.on_decline_changes(staged.original_content_for_comparison)
        self._reset(mode)
        self._notifier.info("Changes discarded.")
        return True

    def comparison(self) -> ComparisonView | None:
        """Columns for reviewing the active mode's staged result."""
        mode = self.active_mode
        staged = self._results[mode]
        proposal = staged.formatted_proposal()
        if not staged.has_comparison or proposal is None:
            return None
        original_label, proposal_label = _COLUMN_LABELS[mode]
        columns = [ComparisonColumn(proposal_label, proposal)]
        original = staged.original_content_for_comparison or ""
        if original.strip():
            columns.insert(0, ComparisonColumn(original_label, original))
        return ComparisonView(columns=tuple(columns))

    def similar_stories(self) -> list[SimilarStoryRef]:
        analysis = self.analysis
        if analysis is None:
            return []
        return sorted(
            analysis.similar_historical_stories,
            key=lambda s: s.matching_percentage,
            reverse=True,
        )

    # ── Internals ───────────────────────────────────────

    async def _guarded(
        self,
        mode: AssistantMode,
        operation: Callable[[], Awaitable[None]],
    ) -> bool:
        result_snapshot = self._results[mode]
        analysis_snapshot = (
            self._analysis.snapshot() if self._analysis is not None else None
        )

        try:
            await self._guard.execute(mode.value, operation)
        except OperationInFlightError:
            self._notifier.info("An operation is already running.")
            return False
        except RelayError as exc:
            self._rollback(mode, result_snapshot, analysis_snapshot)
            message = exc.message
            if is_retryable(exc):
                message = f"{message} Please try again."
            logger.info(
                "event=assistant_failed mode=%s status=%d error=%s",
                mode,
                exc.status_code,
                exc.message,
            )
            self._notifier.error(message)
            return False
        except ValidationError:
            self._rollback(mode, result_snapshot, analysis_snapshot)
            logger.warning("event=assistant_bad_reply mode=%s", mode)
            self._notifier.error(
                "The assistant returned an unexpected response."
            )
            return False
        return True

    def _busy(self, mode: AssistantMode) -> bool:
        """True (and notify) while a relay call for mode is loading.

        The staged result must not change under a running call, since a
        failure restores the snapshot taken when the call started.
        """
        if not self._guard.is_active(mode.value):
            return False
        self._notifier.info("An operation is already running.")
        return True

    def _rollback(
        self,
        mode: AssistantMode,
        result: ModeResult,
        analysis: StagedAnalysis | None,
    ) -> None:
        self._results[mode] = result
        if mode == AssistantMode.ANALYZE:
            self._analysis = analysis

    def _reset(self, mode: AssistantMode) -> None:
        self._results[mode] = EMPTY_RESULT
        if mode == AssistantMode.ANALYZE:
            self._analysis = None

    async def _run_analyze(self, text: str, operation: OperationMode) -> None:
        data = await self._relay.invoke(
            user_story=text,
            llm_model=self.llm_model,
            operation_mode=operation,
        )
        result = AnalysisResult.model_validate(data).with_kinds()
        self._results[AssistantMode.ANALYZE] = EMPTY_RESULT
        self._analysis = StagedAnalysis(result=result, analyzed_text=text)
        self._view.on_story_points_update(result.recommended_story_points)
        self._view.on_story_update(
            self._view.story_text, result.suggested_acceptance_criteria
        )
        self._notifier.success(_SUCCESS_MESSAGES[AssistantMode.ANALYZE])

    async def _run_review(self, text: str, operation: OperationMode) -> None:
        data = await self._relay.invoke(
            user_story=text,
            llm_model=self.llm_model,
            operation_mode=operation,
        )
        improved = NewStoryResult.model_validate(data)
        self._results[AssistantMode.REVIEW_AND_IMPROVE] = ModeResult(
            original_content_for_comparison=text,
            improved_text=improved.new_story,
        )
        self._notifier.success(
            _SUCCESS_MESSAGES[AssistantMode.REVIEW_AND_IMPROVE]
        )

    async def _run_create(self, text: str, operation: OperationMode) -> None:
        data = await self._relay.invoke(
            user_story=text,
            llm_model=self.llm_model,
            operation_mode=operation,
        )
        drafted = DraftedStory.model_validate(data)
        self._results[AssistantMode.CREATE_FROM_SCRATCH] = ModeResult(
            original_content_for_comparison=text,
            generated_title=drafted.title,
            generated_description=drafted.description,
        )
        self._notifier.success(
            _SUCCESS_MESSAGES[AssistantMode.CREATE_FROM_SCRATCH]
        )

    async def _run_apply(self, text: str, selected: list[Suggestion]) -> None:
        data = await self._relay.invoke(
            user_story=text,
            llm_model=self.llm_model,
            operation_mode=OperationMode.APPLY_SUGGESTIONS,
            suggestions=selected,
        )
        rewritten = NewStoryResult.model_validate(data)
        self._results[AssistantMode.ANALYZE] = ModeResult(
            original_content_for_comparison=text,
            generated_description=rewritten.new_story,
        )
        self._notifier.success(
            "Suggestions applied. Please review the changes."
        )


def _flip(items: list[Suggestion], suggestion_id: str) -> list[Suggestion]:
    return [
        s.model_copy(update={"ticked": not s.ticked})
        if s.id == suggestion_id
        else s
        for s in items
    ]
