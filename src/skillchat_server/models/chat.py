"""Pydantic models for chat API requests, responses and SSE events.

This module defines the request and response schemas for the chat endpoints,
including both streaming and non-streaming chat turns.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for chat endpoints.

    Used by both POST /api/v1/chat/{session_id} (non-streaming)
    and POST /api/v1/chat/{session_id}/stream (streaming).
    """

    message: str = Field(..., min_length=1, description="The user message to send.")
    max_tool_rounds: int | None = Field(
        default=None,
        ge=1,
        description="Override for the maximum number of completion rounds in this turn.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "Summarize the open issues in my repository"},
                {"message": "call echo with hello", "max_tool_rounds": 5},
            ]
        }
    )


class ToolCallRecordResponse(BaseModel):
    """A tool call executed during the turn, with a truncated result preview."""

    call_id: str
    tool_name: str
    arguments_json: str
    result: str


class ChatResponse(BaseModel):
    """Response body for the non-streaming chat endpoint.

    A turn that ended on a completion failure or the round limit still
    returns 200, with success set to false and error holding the reason.
    """

    session_id: str = Field(description="Session identifier")
    response: str = Field(description="Final assistant text")
    tool_calls: list[ToolCallRecordResponse] = Field(
        default_factory=list, description="Tool calls executed during the turn"
    )
    success: bool
    error: str | None = None
    rounds: int = Field(default=0, description="Completion requests made")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "a1b2c3d4e5",
                "response": "done",
                "tool_calls": [
                    {
                        "call_id": "call_0f3a9c2b7d1e",
                        "tool_name": "echo",
                        "arguments_json": '{"text": "hello"}',
                        "result": "hello",
                    }
                ],
                "success": True,
                "error": None,
                "rounds": 2,
            }
        }
    )


class ToolCallEvent(ToolCallRecordResponse):
    """SSE event data emitted after each executed tool call."""


class TurnCompleteEvent(BaseModel):
    """SSE event data emitted when the turn ends."""

    response: str
    success: bool
    error: str | None = None
    rounds: int
    tool_call_count: int


class ErrorEvent(BaseModel):
    """SSE event data emitted when the turn raised unexpectedly."""

    code: str
    message: str


class DoneEvent(BaseModel):
    """SSE event data for the final event of the stream."""

    session_id: str
