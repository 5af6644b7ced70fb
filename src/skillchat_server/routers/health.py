"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from skillchat_server import __version__
from skillchat_server.models.health import HealthResponse
from skillchat_server.ollama import OllamaClient
from skillchat_server.tools import ToolServerManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of the skillchat-server,
    Ollama connectivity if the client is initialized, and how many tool
    servers and tools are available.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    ollama_connected = None
    ollama_host = None

    if hasattr(request.app.state, "ollama_client"):
        ollama_client: OllamaClient = request.app.state.ollama_client
        ollama_host = ollama_client.host

        try:
            ollama_connected = await ollama_client.check_connection()
            logger.debug(f"Ollama connectivity check: {ollama_connected}")
        except Exception as e:
            logger.warning(f"Ollama connectivity check failed: {e}")
            ollama_connected = False

    servers_connected = 0
    tools_registered = 0
    if hasattr(request.app.state, "tool_manager"):
        tool_manager: ToolServerManager = request.app.state.tool_manager
        servers_connected = len(tool_manager.connected_server_names)
        tools_registered = len(tool_manager.registry)

    return HealthResponse(
        status="ok",
        version=__version__,
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        tool_servers_connected=servers_connected,
        tools_registered=tools_registered,
    )
