"""AI-assist panel: analyze, review and draft stories through the relay."""

from storysmith.assistant.controller import AssistantController
from storysmith.assistant.draft import StoryDraft, StoryView
from storysmith.assistant.notifier import LoggingNotifier, Notifier
from storysmith.assistant.relay_client import (
    HttpRelayClient,
    LocalRelayClient,
    RelayClient,
)
from storysmith.assistant.state import ComparisonView, ModeResult, ModeStatus

__all__ = [
    "AssistantController",
    "ComparisonView",
    "HttpRelayClient",
    "LocalRelayClient",
    "LoggingNotifier",
    "ModeResult",
    "ModeStatus",
    "Notifier",
    "RelayClient",
    "StoryDraft",
    "StoryView",
]
