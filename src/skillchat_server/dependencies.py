"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from skillchat_server.agents import ChatOrchestrator
from skillchat_server.completion import OllamaCompletionClient
from skillchat_server.config import SkillChatSettings
from skillchat_server.ollama import OllamaClient
from skillchat_server.services import SkillService
from skillchat_server.sessions import ChatSession, SessionManager
from skillchat_server.tools import ToolServerManager


@lru_cache
def get_settings() -> SkillChatSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the SKILLCHAT_ prefix.

    Returns:
        SkillChatSettings: The application configuration settings.
    """
    return SkillChatSettings()


def _get_state(request: Request, name: str, label: str):
    if not hasattr(request.app.state, name):
        raise HTTPException(
            status_code=503,
            detail=f"{label} not initialized",
        )
    return getattr(request.app.state, name)


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    return _get_state(request, "ollama_client", "Ollama client")


def get_tool_manager(request: Request) -> ToolServerManager:
    """Get the shared ToolServerManager from app state.

    Raises:
        HTTPException: If the manager is not initialized (503 Service Unavailable).
    """
    return _get_state(request, "tool_manager", "Tool server manager")


def get_session_manager(request: Request) -> SessionManager:
    """Get the in-memory SessionManager from app state.

    Raises:
        HTTPException: If the manager is not initialized (503 Service Unavailable).
    """
    return _get_state(request, "session_manager", "Session manager")


def get_skill_service(request: Request) -> SkillService:
    """Get a SkillService reading from the configured skills directory."""
    settings = request.app.state.settings
    return SkillService(skills_dir=settings.resolved_skills_dir)


def create_orchestrator(
    session: ChatSession,
    settings: SkillChatSettings,
    ollama_client: OllamaClient,
    tool_manager: ToolServerManager,
) -> ChatOrchestrator:
    """Build a ChatOrchestrator for one turn on a session.

    Args:
        session: The session whose conversation the turn runs against
        settings: Generation parameters and loop limits
        ollama_client: Shared Ollama client
        tool_manager: Shared tool server manager

    Returns:
        ChatOrchestrator bound to the session's conversation and model
    """
    completion_client = OllamaCompletionClient(
        ollama_client,
        model=session.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )
    return ChatOrchestrator(
        conversation=session.conversation,
        tool_manager=tool_manager,
        completion_client=completion_client,
        max_tool_rounds=settings.max_tool_rounds,
        result_preview_length=settings.tool_result_preview_length,
    )
