"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of skillchat-server.
        ollama_connected: Whether Ollama is reachable, if the client is initialized.
        ollama_host: The Ollama host URL, if the client is initialized.
        tool_servers_connected: Number of tool servers with a live connection.
        tools_registered: Number of tools available to the model.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of skillchat-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    tool_servers_connected: int = Field(
        default=0, description="Number of connected tool servers"
    )
    tools_registered: int = Field(default=0, description="Number of registered tools")
