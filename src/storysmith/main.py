"""FastAPI application with lifespan startup."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from storysmith.logging_config import setup_logging

setup_logging()

import httpx  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from storysmith import __version__  # noqa: E402
from storysmith.api.app_state import AppState  # noqa: E402
from storysmith.api.middleware.auth import ApiKeyMiddleware  # noqa: E402
from storysmith.api.middleware.cors import (  # noqa: E402
    RelayAwareCORSMiddleware,
)
from storysmith.api.routes import (  # noqa: E402
    health,
    profiles,
    relay,
    stories,
)
from storysmith.config import Settings, create_app_engine  # noqa: E402
from storysmith.logger import RelayLogger  # noqa: E402
from storysmith.models.base import Base  # noqa: E402
from storysmith.relay.client import VendorClient  # noqa: E402
from storysmith.relay.service import RelayService  # noqa: E402
from storysmith.services.data_service import DataService  # noqa: E402

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    logging.getLogger().setLevel(settings.log_level)

    # 1. Database engine (WAL set via pool-connect listener)
    engine = create_app_engine(
        settings.database_url, echo=settings.debug_mode
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    # 2. Shared outbound HTTP client for vendor calls
    http_client = httpx.AsyncClient()

    # 3. Services
    audit = RelayLogger(log_dir=settings.log_dir, level=settings.log_level)
    relay_service = RelayService(
        VendorClient(http_client, settings), settings, audit=audit
    )
    app.state.typed = AppState(
        settings=settings,
        session_factory=session_factory,
        http_client=http_client,
        relay_service=relay_service,
        data_service=DataService(session_factory),
    )

    if not settings.openai_api_key and not settings.gemini_api_key:
        _logger.warning(
            "event=no_vendor_keys action=relay_requests_will_fail"
        )
    if not settings.api_key:
        _logger.warning("event=no_api_key action=all_endpoints_public")

    yield

    await http_client.aclose()
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings default to the environment."""
    settings = settings or Settings()

    app = FastAPI(
        title="Storysmith",
        description=(
            "User story authoring with an AI review assistant"
        ),
        version=__version__,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware stack (Starlette LIFO: last added = outermost)
    #
    # Inbound request order:
    #   RelayAwareCORSMiddleware (outermost) -> ApiKeyMiddleware -> Router
    #   Relay paths skip the CORS layer and set their own headers.
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(
        RelayAwareCORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-API-Key",
            "X-User-Id",
            "X-Client-Info",
            "Apikey",
        ],
        allow_credentials=False,
    )

    app.include_router(health.router)
    app.include_router(relay.router)
    app.include_router(stories.router)
    app.include_router(profiles.router)
    return app


app = create_app()
