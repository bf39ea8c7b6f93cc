"""Typed application state — replaces untyped getattr() access."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storysmith.config import Settings
from storysmith.relay.service import RelayService
from storysmith.services.data_service import DataService


@dataclass
class AppState:
    """Typed container for objects built once in the app lifespan."""

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    http_client: httpx.AsyncClient
    relay_service: RelayService
    data_service: DataService
