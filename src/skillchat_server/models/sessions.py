"""Pydantic models for session API requests and responses."""

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Request body for creating a new session."""

    model: str | None = Field(
        None, description="Model to use for this session (defaults to the configured model)"
    )
    skill_id: str | None = Field(
        None, description="Optional skill whose system prompt is loaded"
    )
    system_prompt: str | None = Field(
        None, description="Optional system prompt content (ignored when skill_id is set)"
    )


class LoadSkillRequest(BaseModel):
    """Request body for loading a skill into a session."""

    skill_id: str = Field(..., min_length=1, description="Skill to load")


class SetSystemPromptRequest(BaseModel):
    """Request body for setting a session's system prompt."""

    content: str = Field(..., min_length=1, description="System prompt content")


class ToolCallRequestResponse(BaseModel):
    """A tool call requested by the assistant."""

    call_id: str
    tool_name: str
    arguments_json: str = ""


class MessageResponse(BaseModel):
    """Response model for a single message."""

    role: str
    content: str | None
    message_id: str | None = None
    timestamp: str | None = None
    tool_calls: list[ToolCallRequestResponse] | None = None
    call_id: str | None = None
    tool_name: str | None = None
    skill_id: str | None = None


class SessionResponse(BaseModel):
    """Response model for a single session (metadata only)."""

    session_id: str
    model: str
    skill_id: str | None = None
    created_at: str
    updated_at: str
    message_count: int


class SessionListItem(BaseModel):
    """A session item in the list response."""

    session_id: str
    model: str
    skill_id: str | None = None
    created_at: str
    updated_at: str
    message_count: int
    preview: str = Field("", description="Preview of first user message")


class SessionListResponse(BaseModel):
    """Response model for listing sessions."""

    sessions: list[SessionListItem]


class SessionDetailResponse(SessionResponse):
    """Response model for a session with full message history."""

    messages: list[MessageResponse]


class MessagesResponse(BaseModel):
    """Response model for getting session messages."""

    messages: list[MessageResponse]
