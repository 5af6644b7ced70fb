"""Pydantic models for the tool registry API."""

from typing import Any

from pydantic import BaseModel, Field


class ToolResponse(BaseModel):
    """A registered tool."""

    name: str
    description: str = ""
    server: str = Field(..., description="Name of the server that owns the tool")
    input_schema: dict[str, Any] = Field(default_factory=dict)


class ToolListResponse(BaseModel):
    """Response model for listing registered tools."""

    tools: list[ToolResponse]


class ServerStatusResponse(BaseModel):
    """Status of one configured tool server."""

    name: str
    transport: str
    enabled: bool
    connected: bool
    tool_count: int
    error: str | None = None


class ServerStatusListResponse(BaseModel):
    """Response model for listing tool server statuses."""

    servers: list[ServerStatusResponse]
