"""CORS handling that leaves the relay routes to their own headers."""

from __future__ import annotations

from starlette.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send

from storysmith.constants import RELAY_PATHS


class RelayAwareCORSMiddleware(CORSMiddleware):
    """``CORSMiddleware`` for everything except ``RELAY_PATHS``.

    The relay answers any origin with ``RELAY_CORS_HEADERS``, including
    its OPTIONS preflight, whatever ``CORS_ORIGINS`` allows for the
    rest of the API.
    """

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] == "http" and scope["path"] in RELAY_PATHS:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
