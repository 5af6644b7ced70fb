"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillchat_server.config import SkillChatSettings
from skillchat_server.ollama import OllamaClient
from skillchat_server.routers import chat, health, sessions, skills, tools
from skillchat_server.sessions import SessionManager
from skillchat_server.tools import ToolServerManager, create_transport

logger = logging.getLogger(__name__)


def build_tool_manager(settings: SkillChatSettings) -> ToolServerManager:
    """Create the ToolServerManager for the configured tool servers.

    Relative script paths in server arguments resolve against data_dir, and
    empty environment values are looked up in the configured secrets.

    Raises:
        ConfigurationError: If the servers configuration file is invalid
    """
    factory = partial(
        create_transport,
        base_dir=settings.resolved_data_dir,
        secret_lookup=settings.lookup_secret,
        connect_timeout=settings.server_connect_timeout,
        request_timeout=settings.tool_call_timeout,
    )
    return ToolServerManager(settings.load_server_specs(), transport_factory=factory)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Expensive objects (the Ollama client, tool server connections, the
    session store) are created once at startup and stored in app.state for
    reuse across all requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: SkillChatSettings = app.state.settings
    app.state.ollama_client = OllamaClient(host=settings.ollama_host)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    app.state.tool_manager = build_tool_manager(settings)
    await app.state.tool_manager.initialize()

    app.state.session_manager = SessionManager()

    try:
        yield
    finally:
        if hasattr(app.state, "tool_manager"):
            await app.state.tool_manager.shutdown()
            logger.info("Tool server connections closed")

        if hasattr(app.state, "ollama_client"):
            await app.state.ollama_client.close()
            logger.info("Ollama client closed")


def create_app(settings: SkillChatSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional SkillChatSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from skillchat_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="skillchat-server",
        description="Headless FastAPI server for skill-driven chats with MCP tools via Ollama",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(skills.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)

    return app
