"""Shared test fixtures — fake repos, stub vendors, in-memory SQLite."""

import os

# Force demo API keys for all tests; no real LLM calls.
# These are set unconditionally at import time, so even if you have
# real keys in your shell environment, pytest overwrites them before
# any Settings() is created. Vendor traffic goes to httpx.MockTransport.
os.environ["OPENAI_API_KEY"] = "for-demo-purposes-only"
os.environ["GEMINI_API_KEY"] = "for-demo-purposes-only"
os.environ["API_KEY"] = ""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    async_sessionmaker,
    create_async_engine,
)

from storysmith.api.dependencies import (
    Repos,
    get_data_service,
    get_relay_service,
    get_repos,
)
from storysmith.config import Settings
from storysmith.main import app
from storysmith.models.base import Base
from storysmith.relay.client import VendorClient
from storysmith.relay.service import RelayService
from storysmith.repositories.fakes import (
    FakeDataService,
    FakeProfileRepository,
    FakeStoryRepository,
)

VendorHandler = Callable[[httpx.Request], httpx.Response]

SAMPLE_ANALYSIS: dict[str, Any] = {
    "qualityScore": 62,
    "qualityLevel": "Needs Improvements",
    "recommendedStoryPoints": 5,
    "improvementSuggestions": [
        {
            "id": "s1",
            "text": "Name the user role explicitly",
            "example": "As a returning shopper...",
            "ticked": False,
        },
        {
            "id": "s2",
            "text": "State the business value",
            "example": "...so that I can check out faster",
            "ticked": False,
        },
    ],
    "suggestedAcceptanceCriteria": [
        {
            "id": "ac1",
            "text": "Saved cards are listed at checkout",
            "example": "Given a saved card, when I check out...",
            "ticked": False,
        },
    ],
    "similarHistoricalStories": [
        {
            "id": "h1",
            "title": "Guest checkout",
            "status": "Done",
            "featureId": "F-10",
            "featureName": "Checkout",
            "matchingPercentage": 48,
        },
        {
            "id": "h2",
            "title": "Saved addresses",
            "status": "Done",
            "featureId": "F-11",
            "featureName": "Accounts",
            "matchingPercentage": 81,
        },
    ],
}


def gemini_reply(text: str, status_code: int = 200) -> httpx.Response:
    """Gemini generateContent envelope wrapping ``text``."""
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


def openai_reply(text: str, status_code: int = 200) -> httpx.Response:
    """OpenAI chat-completions envelope wrapping ``text``."""
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"content": text}}]},
    )


class StubVendor:
    """httpx.MockTransport handler recording every outbound request.

    ``handler`` decides the reply; the default answers every call
    with SAMPLE_ANALYSIS in a Gemini envelope.
    """

    def __init__(self, handler: VendorHandler | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: VendorHandler = handler or (
            lambda _req: gemini_reply(json.dumps(SAMPLE_ANALYSIS))
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)  # type: ignore[no-any-return]


def make_relay_service(
    vendor: StubVendor,
    settings: Settings | None = None,
) -> RelayService:
    settings = settings or Settings(database_url="sqlite:///:memory:")
    http = httpx.AsyncClient(transport=httpx.MockTransport(vendor))
    return RelayService(VendorClient(http, settings), settings)


def setup_test_app(
    tmp_path: Path,
    *,
    vendor: StubVendor | None = None,
    settings: Settings | None = None,
) -> Repos:
    """Common app-state setup for API test fixtures.

    Sets up fake repos, settings, a relay service talking to a stub
    vendor, and dependency overrides. Each test file's fixture calls
    this then adds its own specifics (e.g. seeded data).
    """
    settings = settings or Settings(
        database_url="sqlite:///:memory:",
        log_dir=tmp_path / "logs",
    )
    fake_repos = Repos(
        story=FakeStoryRepository(),
        profile=FakeProfileRepository(),
    )
    relay_service = make_relay_service(vendor or StubVendor(), settings)

    app.state.settings = settings
    app.dependency_overrides[get_repos] = lambda: fake_repos
    app.dependency_overrides[get_relay_service] = lambda: relay_service
    app.dependency_overrides[get_data_service] = (
        lambda: FakeDataService()
    )
    return fake_repos


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()
