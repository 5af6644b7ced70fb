"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from skillchat_server.models.chat import ChatRequest, ChatResponse
from skillchat_server.models.health import HealthResponse
from skillchat_server.models.sessions import (
    CreateSessionRequest,
    LoadSkillRequest,
    SessionDetailResponse,
    SessionResponse,
    SetSystemPromptRequest,
)
from skillchat_server.models.skills import SkillListResponse, SkillResponse
from skillchat_server.models.tools import ServerStatusListResponse, ToolListResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "CreateSessionRequest",
    "HealthResponse",
    "LoadSkillRequest",
    "ServerStatusListResponse",
    "SessionDetailResponse",
    "SessionResponse",
    "SetSystemPromptRequest",
    "SkillListResponse",
    "SkillResponse",
    "ToolListResponse",
]
