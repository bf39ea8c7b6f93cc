"""CLI entry point — ``storysmith serve`` and ``storysmith analyze``."""

from __future__ import annotations

from storysmith.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import json  # noqa: E402
import sys  # noqa: E402
from typing import Any  # noqa: E402

import httpx  # noqa: E402

from storysmith import __version__  # noqa: E402
from storysmith.assistant.relay_client import (  # noqa: E402
    HttpRelayClient,
    LocalRelayClient,
    RelayClient,
)
from storysmith.config import Settings  # noqa: E402
from storysmith.constants import OperationMode  # noqa: E402
from storysmith.relay.client import VendorClient  # noqa: E402
from storysmith.relay.service import RelayService  # noqa: E402
from storysmith.resilience.errors import RelayError  # noqa: E402

# apply_suggestions needs ticked suggestions, which only the panel has
_CLI_MODES = [
    m.value for m in OperationMode if m != OperationMode.APPLY_SUGGESTIONS
]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"storysmith {__version__}")
        return 0

    if args.command == "serve":
        _run_serve(args)
        return 0
    if args.command == "analyze":
        return _run_analyze(args)
    parser.print_help()
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="storysmith",
        description=(
            "User story authoring with an AI review assistant."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser(
        "serve",
        help="Start the HTTP API",
    )
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port (default: 8000)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes",
    )

    analyze = sub.add_parser(
        "analyze",
        help="Run one relay operation on a story",
    )
    analyze.add_argument(
        "story",
        type=str,
        help="Story text, or '-' to read from stdin",
    )
    analyze.add_argument(
        "--model",
        "-m",
        default="",
        help="LLM model (default: from settings)",
    )
    analyze.add_argument(
        "--mode",
        choices=_CLI_MODES,
        default=OperationMode.ANALYZE.value,
        help="Operation mode (default: analyze)",
    )
    analyze.add_argument(
        "--remote",
        action="store_true",
        help=(
            "Call the relay at RELAY_URL instead of the vendors directly"
        ),
    )

    return parser


def _run_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run(
        "storysmith.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def _run_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze command; prints the relay reply as JSON."""
    story = sys.stdin.read() if args.story == "-" else args.story
    if not story.strip():
        print("Error: story text is empty", file=sys.stderr)
        return 1

    settings = Settings()
    try:
        result = asyncio.run(
            _invoke(
                settings,
                story,
                args.model,
                OperationMode(args.mode),
                args.remote,
            )
        )
    except RelayError as exc:
        print(
            f"Error ({exc.status_code}): {exc.message}", file=sys.stderr
        )
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


async def _invoke(
    settings: Settings,
    story: str,
    model: str,
    mode: OperationMode,
    remote: bool,
) -> dict[str, Any]:
    async with httpx.AsyncClient() as http:
        client: RelayClient
        if remote:
            client = HttpRelayClient(
                http,
                settings.relay_url,
                api_key=settings.api_key,
                timeout=settings.llm_timeout_seconds,
            )
        else:
            client = LocalRelayClient(
                RelayService(VendorClient(http, settings), settings)
            )
        return await client.invoke(
            user_story=story,
            llm_model=model,
            operation_mode=mode,
        )


if __name__ == "__main__":
    sys.exit(main())
