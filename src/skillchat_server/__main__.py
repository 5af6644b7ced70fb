"""CLI entry point for skillchat-server.

This module provides the command-line interface for starting the skillchat-server.
It can be invoked as `skillchat-server` (via the script entry point) or
`python -m skillchat_server`. The `run` subcommand executes a single chat
turn without starting the HTTP server.
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from skillchat_server import __version__, create_app
from skillchat_server.config import SkillChatSettings
from skillchat_server.errors import SkillChatError
from skillchat_server.headless import run_headless


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the skillchat-server CLI."""
    parser = argparse.ArgumentParser(
        prog="skillchat-server",
        description="Headless FastAPI server for skill-driven chats with MCP tools via Ollama",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"skillchat-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via SKILLCHAT_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via SKILLCHAT_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via SKILLCHAT_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Default model for new sessions (can be set via SKILLCHAT_MODEL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for skills and server config (default: ., can be set via SKILLCHAT_DATA_DIR)",
    )

    parser.add_argument(
        "--servers-config",
        type=str,
        default=None,
        help="Tool servers JSON file, relative to the data dir (default: mcp_servers.json)",
    )

    parser.add_argument(
        "--max-tool-rounds",
        type=int,
        default=None,
        help="Maximum completion rounds per turn (default: 30, can be set via SKILLCHAT_MAX_TOOL_ROUNDS)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via SKILLCHAT_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    subparsers = parser.add_subparsers(dest="command")
    run_parser = subparsers.add_parser(
        "run", help="Run a single chat turn without starting the HTTP server"
    )
    run_parser.add_argument("--skill", type=str, default=None, help="Skill id to load first")
    run_parser.add_argument(
        "--message", type=str, required=True, help="The user message to send"
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> SkillChatSettings:
    """Build settings; CLI args override environment variables."""
    overrides = {
        "host": args.host,
        "port": args.port,
        "ollama_host": args.ollama_host,
        "model": args.model,
        "data_dir": args.data_dir,
        "servers_config": args.servers_config,
        "max_tool_rounds": args.max_tool_rounds,
        "log_level": args.log_level,
    }
    settings_kwargs = {key: value for key, value in overrides.items() if value is not None}
    return SkillChatSettings(**settings_kwargs)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the skillchat-server CLI.

    Parses command-line arguments and either starts the uvicorn server with
    the FastAPI application or runs one headless turn.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        try:
            return asyncio.run(run_headless(settings, args.message, skill_id=args.skill))
        except SkillChatError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
